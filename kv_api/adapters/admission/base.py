"""Admission controller interfaces.

The API depends on this abstraction (not the concrete implementation) so the
arrival bookkeeping can move to a shared store later with minimal changes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ArrivalRecord:
    """Timestamped marker for one counted request.

    Attributes:
        sequence_id: Unique, monotonically increasing handle assigned at insertion.
        timestamp_ms: Arrival time in milliseconds (not necessarily unique).
    """

    sequence_id: int
    timestamp_ms: int


@dataclass(frozen=True)
class AdmissionDecision:
    """Outcome of a single admission check.

    Attributes:
        allowed: Whether the request may proceed to the store.
        limit: Configured maximum requests per window (<= 0 means disabled).
        count: Live arrivals in the window, including this one (0 when disabled).
        window_ms: Trailing window length in milliseconds.
        now_ms: Timestamp the decision was taken at (0 when disabled).
        retry_after_ms: Time until the oldest arrival leaves the window when
            rejected; None when allowed.
    """

    allowed: bool
    limit: int
    count: int
    window_ms: int
    now_ms: int
    retry_after_ms: int | None


class AbstractAdmissionController(ABC):
    """Interface for admission controllers."""

    @abstractmethod
    def evaluate(self) -> AdmissionDecision:
        """Record the current request and decide whether it is admitted.

        Returns:
            AdmissionDecision describing the outcome.
        """
        raise NotImplementedError

    def check(self) -> bool:
        """Return True when the current request is admitted."""
        return self.evaluate().allowed
