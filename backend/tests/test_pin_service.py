"""
TouristMap Backend: Pin Service Unit Tests
============================================

What:  Tests for PinService delegation and error normalization.
How:   Uses a mock PinStore (no database).

What we test:
    ✅ Each service call reaches the matching store operation
    ✅ Storage error kinds pass through unchanged
    ✅ Foreign exceptions are normalized to StorageUnavailableError
    ✅ The default two-step add_rating of the PinStore contract
"""

from unittest.mock import AsyncMock, call

import pytest
from sqlalchemy.exc import OperationalError

from app.exceptions import (
    ConstraintError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from app.schemas.pin import PinResponse
from app.services.pin_service import PinService
from app.services.storage_base import PinStore


def _pin(pin_id=1, **overrides):
    data = {
        "id": pin_id,
        "type": "museum",
        "title": "Louvre",
        "description": "art museum",
        "x": 2.3376,
        "y": 48.8606,
        "average_rate": 0.0,
    }
    data.update(overrides)
    return PinResponse(**data)


class TestDelegation:
    """Each PinService method calls through to the store."""

    @pytest.mark.asyncio
    async def test_create_pin(self, mock_store):
        service = PinService(mock_store)
        await service.create_pin("museum", "Louvre", "art museum", 2.3376, 48.8606)
        mock_store.insert_pin.assert_awaited_once_with(
            "museum", "Louvre", "art museum", 2.3376, 48.8606
        )

    @pytest.mark.asyncio
    async def test_list_pins(self, mock_store):
        mock_store.get_all_pins.return_value = [_pin(1), _pin(2, title="Orsay")]
        result = await PinService(mock_store).list_pins()
        assert [p.title for p in result] == ["Louvre", "Orsay"]

    @pytest.mark.asyncio
    async def test_get_pin(self, mock_store):
        mock_store.get_pin_by_id.return_value = _pin(7)
        result = await PinService(mock_store).get_pin(7)
        assert result.id == 7
        mock_store.get_pin_by_id.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_rate_pin_uses_add_rating(self, mock_store):
        await PinService(mock_store).rate_pin(3, 5)
        mock_store.add_rating.assert_awaited_once_with(3, 5)

    @pytest.mark.asyncio
    async def test_delete_pin(self, mock_store):
        await PinService(mock_store).delete_pin(9)
        mock_store.delete_pin.assert_awaited_once_with(9)


class TestErrorNormalization:
    """Only app.exceptions kinds leave the service."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            ValidationError("bad title", field="title"),
            NotFoundError(resource="pin", resource_id=1),
            ConstraintError(),
            StorageUnavailableError(),
        ],
    )
    async def test_app_errors_pass_through(self, mock_store, error):
        mock_store.get_pin_by_id.side_effect = error
        with pytest.raises(type(error)) as exc_info:
            await PinService(mock_store).get_pin(1)
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_driver_error_becomes_storage_unavailable(self, mock_store):
        mock_store.get_all_pins.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))
        with pytest.raises(StorageUnavailableError) as exc_info:
            await PinService(mock_store).list_pins()
        assert exc_info.value.context["operation"] == "list_pins"
        assert exc_info.value.context["original_error"] == "OperationalError"

    @pytest.mark.asyncio
    async def test_os_error_becomes_storage_unavailable(self, mock_store):
        mock_store.insert_pin.side_effect = PermissionError("read-only file system")
        with pytest.raises(StorageUnavailableError):
            await PinService(mock_store).create_pin("t", "t", "", 0.0, 0.0)


class _RecordingStore(PinStore):
    """Minimal concrete PinStore that records calls; exercises the default add_rating."""

    def __init__(self):
        self.calls = []

    async def insert_pin(self, pin_type, title, description, x, y):
        self.calls.append(("insert_pin", title))

    async def get_all_pins(self):
        return []

    async def get_pin_by_id(self, pin_id):
        raise NotFoundError(resource="pin", resource_id=pin_id)

    async def insert_rating(self, point_id, rate):
        self.calls.append(("insert_rating", point_id, rate))

    async def update_average_rating(self, point_id):
        self.calls.append(("update_average_rating", point_id))

    async def delete_pin(self, pin_id):
        self.calls.append(("delete_pin", pin_id))


class TestPinStoreDefaults:
    """Default helper implementations on the abstract contract."""

    @pytest.mark.asyncio
    async def test_default_add_rating_inserts_then_recomputes(self):
        store = _RecordingStore()
        await store.add_rating(4, 2)
        assert store.calls == [("insert_rating", 4, 2), ("update_average_rating", 4)]

    @pytest.mark.asyncio
    async def test_default_add_rating_stops_when_insert_fails(self):
        store = _RecordingStore()
        store.insert_rating = AsyncMock(side_effect=ConstraintError())
        store.update_average_rating = AsyncMock()

        with pytest.raises(ConstraintError):
            await store.add_rating(4, 2)
        store.update_average_rating.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_default_health_and_close(self):
        store = _RecordingStore()
        assert await store.health_check() is True
        assert await store.close() is None

    def test_contract_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            PinStore()
