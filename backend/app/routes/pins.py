"""
TouristMap Backend: Pin Route Handlers
========================================

What:  HTTP endpoints for adding, listing, fetching, rating and deleting pins.
How:   Decodes the JSON body, calls PinService, returns JSON. Error kinds
       raised by the service are rendered by the global handlers in main.py.
Who:   Called by the map frontend.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from app.schemas.pin import (
    AddPinRequest,
    AddRatingRequest,
    ErrorResponse,
    MessageResponse,
    PinResponse,
)
from app.services.pin_service import PinService, get_pin_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pins"])


@router.get("/", summary="Liveness probe")
async def ok_handler() -> str:
    return "OK"


@router.post(
    "/add_pin",
    response_model=MessageResponse,
    responses={
        400: {"description": "Title too long or coordinates out of range", "model": ErrorResponse},
        503: {"description": "Storage unavailable", "model": ErrorResponse},
    },
    summary="Add a new pin",
)
async def add_pin(
    payload: AddPinRequest,
    service: PinService = Depends(get_pin_service),
) -> MessageResponse:
    await service.create_pin(
        pin_type=payload.type,
        title=payload.title,
        description=payload.description,
        x=payload.x,
        y=payload.y,
    )
    return MessageResponse(message="Pin added successfully.")


@router.get(
    "/get_pins",
    response_model=List[PinResponse],
    responses={503: {"description": "Storage unavailable", "model": ErrorResponse}},
    summary="List all pins",
    description="Returns every stored pin, ordered by id.",
)
async def get_pins(service: PinService = Depends(get_pin_service)) -> List[PinResponse]:
    return await service.list_pins()


@router.get(
    "/get_pin/{pin_id}",
    response_model=PinResponse,
    responses={
        404: {"description": "Pin not found", "model": ErrorResponse},
        503: {"description": "Storage unavailable", "model": ErrorResponse},
    },
    summary="Get a single pin by ID",
)
async def get_pin(
    pin_id: int,
    service: PinService = Depends(get_pin_service),
) -> PinResponse:
    return await service.get_pin(pin_id)


@router.post(
    "/add_rate",
    response_model=MessageResponse,
    responses={
        400: {"description": "Rate outside 1..5", "model": ErrorResponse},
        409: {"description": "Pin does not exist", "model": ErrorResponse},
        503: {"description": "Storage unavailable", "model": ErrorResponse},
    },
    summary="Rate a pin",
    description=(
        "Stores a 1-5 rating for the pin and recomputes the pin's "
        "average_rate from all of its ratings."
    ),
)
async def add_rate(
    payload: AddRatingRequest,
    service: PinService = Depends(get_pin_service),
) -> MessageResponse:
    await service.rate_pin(point_id=payload.point_id, rate=payload.rate)
    return MessageResponse(message="Rating added successfully.")


@router.delete(
    "/delete_pin/{pin_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={503: {"description": "Storage unavailable", "model": ErrorResponse}},
    summary="Delete a pin and its ratings",
    description="Deleting an id that does not exist also returns 204.",
)
async def delete_pin(
    pin_id: int,
    service: PinService = Depends(get_pin_service),
) -> Response:
    await service.delete_pin(pin_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
