"""Unit tests for KeyValueService."""

import pytest

from kv_api.adapters.kv_store.in_memory import InMemoryKeyValueStore
from kv_api.core.errors import BadRequestAppError, ConflictAppError, NotFoundAppError
from kv_api.services.kv_service import KeyValueService


@pytest.fixture
def service() -> KeyValueService:
    return KeyValueService(InMemoryKeyValueStore())


class TestCreate:
    def test_create_returns_record(self, service: KeyValueService) -> None:
        record = service.create("a", {"x": 1})

        assert record.key == "a"
        assert record.value == {"x": 1}

    @pytest.mark.parametrize(
        "key, value, expected",
        [
            (None, None, "Bad Request: 'key' and 'value' are expected"),
            (None, 1, "Bad Request: 'key' is expected"),
            ("", 1, "Bad Request: 'key' is expected"),
            ("a", None, "Bad Request: 'value' is expected"),
        ],
    )
    def test_missing_fields_named(self, service: KeyValueService, key, value, expected: str) -> None:
        with pytest.raises(BadRequestAppError) as exc_info:
            service.create(key, value)

        assert exc_info.value.response_message == expected
        assert exc_info.value.status_code == 400

    def test_missing_fields_checked_before_uniqueness(self, service: KeyValueService) -> None:
        service.create("a", 1)

        with pytest.raises(BadRequestAppError):
            service.create("a", None)

    @pytest.mark.parametrize("key", [{"k": 1}, [1, 2]])
    def test_structured_key_rejected(self, service: KeyValueService, key) -> None:
        with pytest.raises(BadRequestAppError) as exc_info:
            service.create(key, 1)

        assert exc_info.value.code == "invalid_key"

    @pytest.mark.parametrize("value", [False, 0, "", [], {}])
    def test_falsy_values_are_present(self, service: KeyValueService, value) -> None:
        assert service.create("k", value).value == value

    def test_duplicate_key_conflicts(self, service: KeyValueService) -> None:
        service.create("a", {"x": 1})

        with pytest.raises(ConflictAppError) as exc_info:
            service.create("a", {"x": 2})

        assert exc_info.value.response_message == "Conflict: 'key' must be unique"
        assert service.get("a") == {"x": 1}

    def test_repeated_creates_never_overwrite(self, service: KeyValueService) -> None:
        service.create("a", 0)

        for attempt in range(1, 5):
            with pytest.raises(ConflictAppError):
                service.create("a", attempt)

        assert service.get("a") == 0
        assert len(service.list()) == 1

    def test_numeric_key_collides_with_string_form(self, service: KeyValueService) -> None:
        record = service.create(42, "number")

        assert record.key == "42"
        with pytest.raises(ConflictAppError):
            service.create("42", "string")
        assert service.get("42") == "number"


class TestUpdate:
    def test_update_replaces_value(self, service: KeyValueService) -> None:
        service.create("a", {"x": 1})

        record = service.update("a", {"y": 2})

        assert record.key == "a"
        assert service.get("a") == {"y": 2}

    def test_update_missing_key(self, service: KeyValueService) -> None:
        with pytest.raises(NotFoundAppError) as exc_info:
            service.update("missing", 1)

        assert exc_info.value.response_message == "Not Found"

    def test_update_requires_value(self, service: KeyValueService) -> None:
        service.create("a", 1)

        with pytest.raises(BadRequestAppError) as exc_info:
            service.update("a", None)

        assert exc_info.value.response_message == "Bad Request: 'value' is expected"

    def test_missing_value_reported_before_existence(self, service: KeyValueService) -> None:
        with pytest.raises(BadRequestAppError):
            service.update("missing", None)


class TestGetDeleteList:
    def test_get_missing(self, service: KeyValueService) -> None:
        with pytest.raises(NotFoundAppError):
            service.get("missing")

    def test_delete_then_everything_is_not_found(self, service: KeyValueService) -> None:
        service.create("a", 1)
        service.delete("a")

        with pytest.raises(NotFoundAppError):
            service.get("a")
        with pytest.raises(NotFoundAppError):
            service.update("a", 2)
        with pytest.raises(NotFoundAppError):
            service.delete("a")

    def test_list_returns_all_records(self, service: KeyValueService) -> None:
        service.create("b", 2)
        service.create("a", 1)

        assert [(r.key, r.value) for r in service.list()] == [("a", 1), ("b", 2)]
