"""
TouristMap Backend: Abstract Pin Store Interface
==================================================

What:  Abstract base class defining the access contract between request
       handling and persistence.
How:   Concrete backends inherit from PinStore and implement the six data
       operations. Routes only ever hold a PinStore (through PinService), so
       another backend can replace SQLiteStore without touching them.
Who:   Implemented by SQLiteStore; consumed by PinService.

Contract:
    - Every failure is raised as one of the app.exceptions kinds
      (ValidationError, NotFoundError, ConstraintError,
      StorageUnavailableError, SerializationError). Backend-specific
      exceptions never escape.
    - No operation retries on failure.
    - average_rate is written only by update_average_rating (or by an
      add_rating override that performs the same recomputation).
"""

from abc import ABC, abstractmethod
from typing import List

from app.schemas.pin import PinResponse


class PinStore(ABC):
    """
    Abstract interface for pin and rating persistence.

    Implementations:
        - SQLiteStore: SQLite file through async SQLAlchemy (default)
    """

    @abstractmethod
    async def insert_pin(
        self,
        pin_type: str,
        title: str,
        description: str,
        x: float,
        y: float,
    ) -> None:
        """
        Insert a new pin with average_rate = 0. The id is assigned by storage.

        Raises:
            ValidationError: title longer than 32 characters, x outside
                [-180, 180] or y outside [-90, 90].
            StorageUnavailableError: the store could not be reached.
        """
        ...

    @abstractmethod
    async def get_all_pins(self) -> List[PinResponse]:
        """Return every stored pin, ordered by id."""
        ...

    @abstractmethod
    async def get_pin_by_id(self, pin_id: int) -> PinResponse:
        """
        Return the pin with the given id.

        Raises:
            NotFoundError: no pin has this id.
        """
        ...

    @abstractmethod
    async def insert_rating(self, point_id: int, rate: int) -> None:
        """
        Insert a rating row for `point_id`.

        The pin's existence is left to referential integrity.

        Raises:
            ValidationError: rate outside 1..5.
            ConstraintError: no pin with id `point_id`.
        """
        ...

    @abstractmethod
    async def update_average_rating(self, point_id: int) -> None:
        """
        Recompute the pin's average_rate from all of its ratings.

        Leaves average_rate untouched when the pin has no ratings. A pin
        that no longer exists is not an error.
        """
        ...

    @abstractmethod
    async def delete_pin(self, pin_id: int) -> None:
        """Delete the pin and, by cascade, its ratings. Missing ids succeed."""
        ...

    # ── Lifecycle helpers (overridable) ───────────────────────────────────

    async def add_rating(self, point_id: int, rate: int) -> None:
        """
        Submit a rating: insert it, then recompute the pin's average.

        The default runs the two steps as separate operations, so a
        concurrent submission may interleave between them. Backends that
        support transactions should override this to run both atomically.
        """
        await self.insert_rating(point_id, rate)
        await self.update_average_rating(point_id)

    async def health_check(self) -> bool:
        """Return True if the backend is reachable."""
        return True

    async def close(self) -> None:
        """Release pooled resources. Safe to call more than once."""
        return None
