"""Tests for settings loading and application assembly."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from conftest import build_settings
from kv_api.adapters.admission import SlidingWindowAdmissionController
from kv_api.adapters.kv_store import InMemoryKeyValueStore
from kv_api.core.app_factory import create_admission_controller, create_app
from kv_api.core.config import AdmissionSettings, Settings, StoreSettings
from kv_api.utils.clock import monotonic_clock_ms, wall_clock_ms


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("ADMISSION_MAX_PER_WINDOW", "ADMISSION_WINDOW_MS", "KV_BACKEND"):
            monkeypatch.delenv(name, raising=False)

        admission = AdmissionSettings()
        store = StoreSettings()

        assert admission.max_per_window == 3
        assert admission.window_ms == 1000
        assert admission.clock == "wall"
        assert store.backend == "memory"
        assert store.allow_list_all is True

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("ADMISSION_MAX_PER_WINDOW", "10")
        monkeypatch.setenv("ADMISSION_WINDOW_MS", "250")
        monkeypatch.setenv("KV_ALLOW_LIST_ALL", "false")
        monkeypatch.setenv("LOG_REQUEST_ID_HEADER", "X-Correlation-ID")

        cfg = Settings()

        assert cfg.admission.max_per_window == 10
        assert cfg.admission.window_ms == 250
        assert cfg.store.allow_list_all is False
        assert cfg.log.request_id_header == "X-Correlation-ID"

    def test_window_must_be_positive(self):
        with pytest.raises(ValidationError):
            AdmissionSettings(window_ms=0)

    def test_unknown_backend_rejected(self):
        with pytest.raises(ValidationError):
            StoreSettings(backend="redis")


class TestAdmissionControllerFactory:
    def test_uses_configured_limits(self):
        cfg = build_settings(max_per_window=5, window_ms=2000)

        controller = create_admission_controller(cfg)

        assert isinstance(controller, SlidingWindowAdmissionController)
        assert controller.max_per_window == 5
        assert controller.window_ms == 2000

    def test_monotonic_clock_selected_by_name(self):
        cfg = build_settings(max_per_window=1)
        cfg.admission.clock = "monotonic"

        controller = create_admission_controller(cfg)

        assert controller._clock is monotonic_clock_ms

    def test_explicit_clock_wins(self, fake_clock):
        controller = create_admission_controller(build_settings(max_per_window=1), clock=fake_clock)

        assert controller._clock is fake_clock
        assert controller._clock is not wall_clock_ms


class TestCreateApp:
    def test_injected_store_and_controller_are_used(self, fake_clock):
        store = InMemoryKeyValueStore()
        controller = SlidingWindowAdmissionController(max_per_window=0, clock=fake_clock)

        app = create_app(
            build_settings(), store=store, admission_controller=controller, configure_logs=False
        )
        TestClient(app).post("/kv", json={"key": "a", "value": 1})

        assert app.state.kv_store is store
        assert app.state.admission_controller is controller
        assert store.fetch("a").value == 1

    def test_lifespan_closes_store(self):
        class ClosingStore(InMemoryKeyValueStore):
            closed = False

            def close(self) -> None:
                self.closed = True

        store = ClosingStore()
        app = create_app(build_settings(), store=store, configure_logs=False)

        with TestClient(app) as client:
            assert client.get("/health").json() == {"status": "ok"}
            assert store.closed is False

        assert store.closed is True

    def test_listing_route_absent_when_disabled(self):
        app = create_app(build_settings(allow_list_all=False), configure_logs=False)

        paths = {(route.path, tuple(sorted(getattr(route, "methods", ())))) for route in app.routes}

        assert ("/kv", ("POST",)) in paths
        assert ("/kv", ("GET",)) not in paths
