"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins the environment so that no developer .env file leaks into tests.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_LOG_REQUESTS", "false")
os.environ.setdefault("KV_BACKEND", "memory")

from typing import Any, Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from kv_api.core.app_factory import create_app
from kv_api.core.config import AdmissionSettings, LogSettings, Settings, StoreSettings


class FakeClock:
    """Deterministic millisecond clock used to drive admission windows."""

    def __init__(self, start: int = 1_000_000) -> None:
        self.current = start

    def __call__(self) -> int:
        return self.current

    def advance(self, ms: int) -> None:
        self.current += ms


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


def build_settings(
    *,
    max_per_window: int = 0,
    window_ms: int = 1000,
    include_headers: bool = True,
    allow_list_all: bool = True,
    backend: str = "memory",
    sqlite_path: str = "data/kv.sqlite3",
    log_errors: bool = True,
) -> Settings:
    """Build isolated settings for one test app."""
    return Settings(
        admission=AdmissionSettings(
            max_per_window=max_per_window,
            window_ms=window_ms,
            include_headers=include_headers,
        ),
        store=StoreSettings(
            backend=backend,
            sqlite_path=sqlite_path,
            allow_list_all=allow_list_all,
        ),
        log=LogSettings(level="WARNING", log_requests=False, log_errors=log_errors),
    )


@pytest.fixture
def make_app(fake_clock: FakeClock) -> Callable[..., FastAPI]:
    """Factory for fresh apps; each call owns its own store and window."""

    def _make(**overrides: Any) -> FastAPI:
        return create_app(build_settings(**overrides), clock=fake_clock, configure_logs=False)

    return _make


@pytest.fixture
def client(make_app: Callable[..., FastAPI]) -> TestClient:
    """Client for an app with admission control disabled."""
    return TestClient(make_app())
