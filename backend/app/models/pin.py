"""
TouristMap Backend: Pin and Rate SQLAlchemy Models
====================================================

What:  ORM models for the `pins` and `rates` tables.
How:   Declarative mappings on app.database.Base; the schema is created from
       this metadata when a store is initialized.
Who:   Used by the SQLite storage engine only. Routes and services see
       PinResponse objects, never these rows.

Table Design:
    pins(id PK autoincrement, type, title[len<=32], description,
         x[-180..180], y[-90..90], average_rate default 0)
    rates(id PK autoincrement, point_id FK->pins.id ON DELETE CASCADE,
          rate[1..5])

    Both tables use SQLite AUTOINCREMENT so ids grow monotonically and are
    never reused after a delete.

    The CHECK constraints duplicate the checks the storage engine performs
    before writing. They stay authoritative for rows written by any other
    client of the same file.
"""

from sqlalchemy import CheckConstraint, Float, ForeignKey, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# Data invariants shared by the table definitions and the storage engine
TITLE_MAX_LENGTH = 32
LONGITUDE_RANGE = (-180.0, 180.0)
LATITUDE_RANGE = (-90.0, 90.0)
RATE_RANGE = (1, 5)
# SQLite INTEGER is a signed 64-bit value; larger ids cannot name a row
SQLITE_INTEGER_RANGE = (-(2**63), 2**63 - 1)


class Pin(Base):
    """
    A point of interest on the map.

    Lifecycle:
        1. Created by InsertPin with average_rate = 0
        2. average_rate rewritten each time a rating is added
        3. Deleted explicitly; its ratings go with it (ON DELETE CASCADE)
    """

    __tablename__ = "pins"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Free-text category label ("museum", "viewpoint", ...)
    type: Mapped[str] = mapped_column(Text, nullable=False)

    title: Mapped[str] = mapped_column(Text, nullable=False)

    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Longitude / latitude in decimal degrees
    x: Mapped[float] = mapped_column(Float, nullable=False)
    y: Mapped[float] = mapped_column(Float, nullable=False)

    # Mean of all ratings; only the average recomputation writes this column
    average_rate: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
        server_default=text("0"),
    )

    __table_args__ = (
        CheckConstraint(f"length(title) <= {TITLE_MAX_LENGTH}", name="ck_pins_title_length"),
        CheckConstraint(
            f"x BETWEEN {LONGITUDE_RANGE[0]} AND {LONGITUDE_RANGE[1]}",
            name="ck_pins_x_range",
        ),
        CheckConstraint(
            f"y BETWEEN {LATITUDE_RANGE[0]} AND {LATITUDE_RANGE[1]}",
            name="ck_pins_y_range",
        ),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Pin(id={self.id}, title='{self.title}', average_rate={self.average_rate})>"


class Rate(Base):
    """A single 1-5 score submitted against one pin. Never updated."""

    __tablename__ = "rates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    point_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("pins.id", ondelete="CASCADE"),
        nullable=False,
    )

    rate: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (
        CheckConstraint(
            f"rate BETWEEN {RATE_RANGE[0]} AND {RATE_RANGE[1]}",
            name="ck_rates_rate_range",
        ),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self) -> str:
        return f"<Rate(id={self.id}, point_id={self.point_id}, rate={self.rate})>"
