"""
TouristMap Backend: SQLite Storage Engine
===========================================

What:  PinStore implementation over a SQLite file, using async SQLAlchemy
       with the aiosqlite driver.
How:   Each operation runs in its own session and transaction drawn from a
       bounded connection pool. Invariants are checked before writing and
       enforced again by the schema's CHECK and FOREIGN KEY constraints;
       driver exceptions are translated into app.exceptions kinds at the
       session boundary.
Who:   Opened once by the application lifespan; shared by all requests.

Error Translation:
    IntegrityError (FOREIGN KEY)          → ConstraintError
    IntegrityError (CHECK / NOT NULL)     → ValidationError
    TimeoutError (pool exhausted)         → StorageUnavailableError
    OperationalError, other DBAPI errors  → StorageUnavailableError
    OSError (file create / open)          → StorageUnavailableError
    Row that does not fit PinResponse     → SerializationError
    Id outside the SQLite INTEGER range   → NotFoundError (lookup), no-op
                                          (delete, recompute), ConstraintError
                                          (rating insert)
    Text that is not valid UTF-8          → ValidationError

Rating Submission:
    insert_rating and update_average_rating are separate transactions, as
    the contract defines them. add_rating runs the insert and the
    recomputation in ONE transaction, so two concurrent submissions cannot
    leave average_rate computed from a stale rating set.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, List

from sqlalchemy import delete, func, inspect, select, text, update
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from app.config import Settings, settings as default_settings
from app.database import Base, create_engine_for_path, create_session_factory
from app.exceptions import (
    ConstraintError,
    NotFoundError,
    SerializationError,
    StorageUnavailableError,
    TouristMapError,
    ValidationError,
)
from app.models.pin import (
    LATITUDE_RANGE,
    LONGITUDE_RANGE,
    RATE_RANGE,
    SQLITE_INTEGER_RANGE,
    TITLE_MAX_LENGTH,
    Pin,
    Rate,
)
from app.schemas.pin import PinResponse
from app.services.storage_base import PinStore

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Invariant Checks
# ══════════════════════════════════════════════════════════════════════════

def check_text_fields(**fields: Any) -> None:
    """Reject text that cannot be stored as UTF-8 (e.g. lone surrogates)."""
    for name, value in fields.items():
        if not isinstance(value, str):
            continue
        try:
            value.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ValidationError(
                message=f"Field '{name}' is not valid UTF-8 text",
                field=name,
            ) from e


def check_pin_fields(title: str, x: float, y: float) -> None:
    """
    Validate title length and coordinate bounds.

    NaN fails every comparison and is therefore rejected as out of range.
    """
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(
            message=f"Title must be at most {TITLE_MAX_LENGTH} characters (got {len(title)})",
            field="title",
        )
    low, high = LONGITUDE_RANGE
    if not low <= x <= high:
        raise ValidationError(
            message=f"Longitude x must be between {low} and {high} (got {x})",
            field="x",
        )
    low, high = LATITUDE_RANGE
    if not low <= y <= high:
        raise ValidationError(
            message=f"Latitude y must be between {low} and {high} (got {y})",
            field="y",
        )


def check_rate(rate: int) -> None:
    """Validate that a rating is an integer in 1..5."""
    low, high = RATE_RANGE
    if isinstance(rate, bool) or not isinstance(rate, int) or not low <= rate <= high:
        raise ValidationError(
            message=f"Rate must be an integer between {low} and {high} (got {rate!r})",
            field="rate",
        )


def is_storable_id(value: int) -> bool:
    """True when `value` fits the SQLite INTEGER range, so a row could carry it."""
    low, high = SQLITE_INTEGER_RANGE
    return low <= value <= high


# ══════════════════════════════════════════════════════════════════════════
# Storage Engine
# ══════════════════════════════════════════════════════════════════════════

class SQLiteStore(PinStore):
    """
    SQLite-backed pin store.

    Use `await SQLiteStore.open(path)` rather than the constructor; open()
    creates the file and schema when needed.

    Concurrency:
        The pool is shared by all concurrent callers. When it is exhausted a
        caller waits up to `db_pool_timeout` seconds, then gets
        StorageUnavailableError. Nothing is retried.
    """

    def __init__(self, engine: AsyncEngine, path: str):
        self.path = path
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    # ── Initialization ────────────────────────────────────────────────────

    @classmethod
    async def open(cls, path: str, config: Settings = default_settings) -> "SQLiteStore":
        """
        Open (or create) the store at `path` and make sure the schema exists.

        The database file is created when missing; its parent directory is
        not. Calling open() again on the same path leaves existing data and
        schema untouched.

        Raises:
            StorageUnavailableError: the file cannot be created or opened,
                or schema creation failed.
        """
        db_file = Path(path)
        try:
            if db_file.exists():
                logger.info("Database file found at: %s", path)
            else:
                logger.info("Database file not found. A new one will be created at: %s", path)
                db_file.touch()
        except OSError as e:
            logger.error("Cannot create database file at %s: %s", path, e)
            raise StorageUnavailableError(
                message=f"Cannot create database file at '{path}'",
                context={"path": path, "error": str(e)},
            ) from e

        engine = create_engine_for_path(path, config)
        store = cls(engine, path)
        try:
            await store._ensure_schema()
        except TouristMapError:
            await engine.dispose()
            raise
        return store

    @staticmethod
    def _tables_exist(sync_conn) -> bool:
        inspector = inspect(sync_conn)
        return all(
            inspector.has_table(name)
            for name in (Pin.__tablename__, Rate.__tablename__)
        )

    async def _ensure_schema(self) -> None:
        """Create both tables unless both are already present."""
        try:
            async with self._engine.begin() as conn:
                if await conn.run_sync(self._tables_exist):
                    logger.info("Tables 'pins' and 'rates' found; using existing schema.")
                    return
                logger.info("Creating tables 'pins' and 'rates' in %s", self.path)
                await conn.run_sync(Base.metadata.create_all)
        except (sa_exc.SQLAlchemyError, OSError) as e:
            logger.error("Schema initialization failed for %s: %s", self.path, e)
            raise StorageUnavailableError(
                message="Could not initialize the database schema",
                context={"path": self.path, "error_type": type(e).__name__},
            ) from e

    # ── Session / Error Boundary ──────────────────────────────────────────

    @asynccontextmanager
    async def _session(self, operation: str, **context: Any) -> AsyncIterator[AsyncSession]:
        """
        Yield a session inside a transaction; commit on success.

        Every SQLAlchemy or OS error raised inside the block (including the
        commit) leaves as one of the app.exceptions kinds.
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except sa_exc.IntegrityError as e:
            raise self._integrity_error(e, operation, context) from e
        except sa_exc.TimeoutError as e:
            logger.error("Connection pool exhausted during %s", operation)
            raise StorageUnavailableError(
                context={"operation": operation, "reason": "pool_timeout", **context},
            ) from e
        except (sa_exc.SQLAlchemyError, OSError) as e:
            logger.error("Storage failure during %s: %s", operation, e)
            raise StorageUnavailableError(
                context={"operation": operation, "error_type": type(e).__name__, **context},
            ) from e

    @staticmethod
    def _integrity_error(
        exc: sa_exc.IntegrityError, operation: str, context: dict
    ) -> TouristMapError:
        detail = str(exc.orig) if exc.orig is not None else str(exc)
        ctx = {"operation": operation, "constraint": detail, **context}
        upper = detail.upper()
        if "FOREIGN KEY" in upper:
            logger.info("Foreign key rejected during %s: %s", operation, context)
            return ConstraintError(
                message="The referenced pin does not exist",
                context=ctx,
            )
        if "CHECK" in upper or "NOT NULL" in upper:
            return ValidationError(
                message=f"Rejected by storage constraint: {detail}",
                context=ctx,
            )
        return ConstraintError(context=ctx)

    @staticmethod
    def _check_point_id(point_id: int, operation: str) -> None:
        if not is_storable_id(point_id):
            raise ConstraintError(
                message="The referenced pin does not exist",
                context={"operation": operation, "point_id": point_id},
            )

    @staticmethod
    async def _load_pins(session: AsyncSession, stmt) -> List[PinResponse]:
        # pydantic's ValidationError subclasses ValueError
        try:
            result = await session.execute(stmt)
            return [PinResponse.model_validate(row) for row in result.scalars()]
        except (ValueError, TypeError) as e:
            logger.error("Malformed pin row: %s", e)
            raise SerializationError(context={"error_type": type(e).__name__}) from e

    @staticmethod
    async def _recompute_average(session: AsyncSession, point_id: int) -> None:
        result = await session.execute(
            select(func.avg(Rate.rate), func.count(Rate.id)).where(Rate.point_id == point_id)
        )
        average, count = result.one()
        if not count:
            logger.debug("Pin %s has no ratings; average_rate left unchanged", point_id)
            return
        await session.execute(
            update(Pin).where(Pin.id == point_id).values(average_rate=float(average))
        )
        logger.debug("Pin %s average_rate=%.4f over %d rating(s)", point_id, average, count)

    # ── Data Operations ───────────────────────────────────────────────────

    async def insert_pin(
        self,
        pin_type: str,
        title: str,
        description: str,
        x: float,
        y: float,
    ) -> None:
        check_text_fields(type=pin_type, title=title, description=description)
        check_pin_fields(title, x, y)
        async with self._session("insert_pin", title=title) as session:
            pin = Pin(
                type=pin_type,
                title=title,
                description=description,
                x=x,
                y=y,
                average_rate=0.0,
            )
            session.add(pin)
            await session.flush()
            logger.debug("Inserted pin %d (%s)", pin.id, title)

    async def get_all_pins(self) -> List[PinResponse]:
        async with self._session("get_all_pins") as session:
            return await self._load_pins(session, select(Pin).order_by(Pin.id))

    async def get_pin_by_id(self, pin_id: int) -> PinResponse:
        if not is_storable_id(pin_id):
            raise NotFoundError(resource="pin", resource_id=pin_id)
        async with self._session("get_pin_by_id", pin_id=pin_id) as session:
            pins = await self._load_pins(session, select(Pin).where(Pin.id == pin_id))
        if not pins:
            raise NotFoundError(resource="pin", resource_id=pin_id)
        return pins[0]

    async def insert_rating(self, point_id: int, rate: int) -> None:
        check_rate(rate)
        self._check_point_id(point_id, "insert_rating")
        async with self._session("insert_rating", point_id=point_id) as session:
            session.add(Rate(point_id=point_id, rate=rate))
            await session.flush()
            logger.debug("Inserted rating %d for pin %s", rate, point_id)

    async def update_average_rating(self, point_id: int) -> None:
        if not is_storable_id(point_id):
            return
        async with self._session("update_average_rating", point_id=point_id) as session:
            await self._recompute_average(session, point_id)

    async def delete_pin(self, pin_id: int) -> None:
        if not is_storable_id(pin_id):
            logger.debug("Delete of pin %s skipped; id outside INTEGER range", pin_id)
            return
        async with self._session("delete_pin", pin_id=pin_id) as session:
            result = await session.execute(delete(Pin).where(Pin.id == pin_id))
            logger.debug("Deleted pin %s (%d row(s))", pin_id, result.rowcount)

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def add_rating(self, point_id: int, rate: int) -> None:
        """Insert a rating and recompute the average in a single transaction."""
        check_rate(rate)
        self._check_point_id(point_id, "add_rating")
        async with self._session("add_rating", point_id=point_id) as session:
            session.add(Rate(point_id=point_id, rate=rate))
            await session.flush()
            await self._recompute_average(session, point_id)

    async def health_check(self) -> bool:
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (sa_exc.SQLAlchemyError, OSError) as e:
            logger.warning("Health check: database unreachable: %s", e)
            return False

    async def close(self) -> None:
        await self._engine.dispose()
        logger.info("Connection pool for %s disposed", self.path)
