"""
TouristMap Backend: Pin Service (Access Boundary)
===================================================

What:  The object route handlers use to reach persistence.
How:   Wraps any PinStore, delegates each call, and guarantees that only
       app.exceptions kinds leave: a backend exception that slipped past
       the store's own translation is logged and reported as
       StorageUnavailableError.
Who:   Injected into routes with FastAPI's Depends(get_pin_service).

Orchestration Flow (POST /add_rate):
    ┌──────────┐    ┌──────────────────────────────────────┐
    │  Route   │───▶│ store.add_rating                     │
    └──────────┘    │   insert rating → recompute average  │
                    └──────────────────────────────────────┘
"""

import logging
from functools import wraps
from typing import List

from fastapi import Request

from app.exceptions import StorageUnavailableError, TouristMapError
from app.schemas.pin import PinResponse
from app.services.storage_base import PinStore

logger = logging.getLogger(__name__)


def _normalize_errors(method):
    """Re-raise anything that is not a TouristMapError as StorageUnavailableError."""

    @wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except TouristMapError:
            raise
        except Exception as e:
            logger.error(
                "Unexpected backend error in %s: %s", method.__name__, str(e), exc_info=True
            )
            raise StorageUnavailableError(
                context={"operation": method.__name__, "original_error": type(e).__name__},
            ) from e

    return wrapper


class PinService:
    """
    Stateless facade over a PinStore.

    Responsibilities:
        - create_pin(): insert a new pin
        - list_pins() / get_pin(): reads
        - rate_pin(): rating submission (insert + average recomputation)
        - delete_pin(): idempotent delete
    """

    def __init__(self, store: PinStore):
        self.store = store

    @_normalize_errors
    async def create_pin(
        self,
        pin_type: str,
        title: str,
        description: str,
        x: float,
        y: float,
    ) -> None:
        await self.store.insert_pin(pin_type, title, description, x, y)
        logger.info("Pin '%s' added at (%s, %s)", title, x, y)

    @_normalize_errors
    async def list_pins(self) -> List[PinResponse]:
        return await self.store.get_all_pins()

    @_normalize_errors
    async def get_pin(self, pin_id: int) -> PinResponse:
        return await self.store.get_pin_by_id(pin_id)

    @_normalize_errors
    async def rate_pin(self, point_id: int, rate: int) -> None:
        await self.store.add_rating(point_id, rate)
        logger.info("Rating %d recorded for pin %d", rate, point_id)

    @_normalize_errors
    async def delete_pin(self, pin_id: int) -> None:
        await self.store.delete_pin(pin_id)
        logger.info("Pin %d deleted", pin_id)


def get_pin_service(request: Request) -> PinService:
    """
    FastAPI dependency returning a PinService over the application's store.

    The store is opened by the lifespan handler and kept on app.state.
    """
    return PinService(request.app.state.store)
