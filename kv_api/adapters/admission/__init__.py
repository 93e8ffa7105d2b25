"""Admission control adapters.

This package provides a small abstraction layer so the service can start with
an in-memory arrival log and later migrate to a shared store without
changing the API layer.
"""

from kv_api.adapters.admission.base import (
    AbstractAdmissionController,
    AdmissionDecision,
    ArrivalRecord,
)
from kv_api.adapters.admission.in_memory import ArrivalLog, SlidingWindowAdmissionController

__all__ = [
    "AbstractAdmissionController",
    "AdmissionDecision",
    "ArrivalLog",
    "ArrivalRecord",
    "SlidingWindowAdmissionController",
]
