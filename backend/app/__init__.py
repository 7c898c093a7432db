"""
TouristMap Backend: Application Package
=========================================

Layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │    PinService (Access Boundary)     │  ← delegation, error normalization
    ├─────────────────────────────────────┤
    │   PinStore / SQLiteStore (Storage)  │  ← invariants, SQL, error mapping
    ├─────────────────────────────────────┤
    │     Models & Schemas (Data)         │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
