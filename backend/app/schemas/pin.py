"""
TouristMap Backend: Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models for the pin record returned by the access contract
       and for the HTTP API bodies.
How:   FastAPI validates request bodies against these models (types only;
       the data invariants are enforced by the storage engine) and
       serializes responses from them.

Request models deliberately carry no range or length constraints. A title
of 40 characters is well-formed JSON and reaches the storage engine, which
reports a ValidationError (400). Only structurally broken bodies (missing
fields, wrong types) are rejected by FastAPI with 422.
"""

from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Domain Record
# ══════════════════════════════════════════════════════════════════════════


class PinResponse(BaseModel):
    """
    What:  Full representation of a stored pin.
    Who:   Returned by PinStore.get_all_pins / get_pin_by_id and by
           GET /get_pins, GET /get_pin/{id}.
    """
    id: int = Field(description="Storage-assigned pin identifier")
    type: str = Field(description="Category label")
    title: str = Field(description="Short title (max 32 characters)")
    description: str = Field(description="Free-text description")
    x: float = Field(description="Longitude in decimal degrees")
    y: float = Field(description="Latitude in decimal degrees")
    average_rate: float = Field(description="Mean of all ratings, 0 when unrated")

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class AddPinRequest(BaseModel):
    """Body of POST /add_pin."""
    type: str
    title: str
    description: str
    x: float
    y: float


class AddRatingRequest(BaseModel):
    """Body of POST /add_rate."""
    point_id: int
    rate: int


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class MessageResponse(BaseModel):
    """Acknowledgement returned by mutating endpoints."""
    message: str = Field(description="Human-readable success message")


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Title must be at most 32 characters (got 40)",
            "details": {"field": "title"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Response of GET /health."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
