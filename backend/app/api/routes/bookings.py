"""
Booking endpoints: create a stay, extend a stay, read one back.

Accepted outcomes return 200 with the booking. Rejected outcomes return 400
with the rejection kind and its reason text.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from app.api.deps import get_booking_repository, get_booking_service
from app.domain.outcomes import Accepted, BookingOutcome
from app.repositories.booking_repository import BookingRepository
from app.schemas.booking import BookingCreate, BookingExtend, BookingResponse, RejectionResponse
from app.services.booking_service import BookingService
from app.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/bookings", tags=["Bookings"])

REJECTION_RESPONSES = {status.HTTP_400_BAD_REQUEST: {"model": RejectionResponse}}


def _respond(outcome: BookingOutcome):
    if isinstance(outcome, Accepted):
        return BookingResponse.model_validate(outcome.booking)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=RejectionResponse(kind=outcome.kind.value, detail=outcome.reason).model_dump(),
    )


@router.post("/", response_model=BookingResponse, responses=REJECTION_RESPONSES)
async def create_booking(
    booking_data: BookingCreate,
    service: BookingService = Depends(get_booking_service),
):
    """
    Book a unit for a contiguous span of nights.

    Rejected when the check-in date is in the past, when the guest already
    holds a booking (in this unit or any other), or when the nights overlap
    an existing booking of the unit.
    """
    outcome = await service.propose_new_booking(
        booking_data.guest_name,
        booking_data.unit_id,
        booking_data.check_in_date,
        booking_data.number_of_nights,
    )
    return _respond(outcome)


@router.put("/{booking_id}", response_model=BookingResponse, responses=REJECTION_RESPONSES)
async def extend_booking(
    booking_id: int,
    extension: BookingExtend,
    service: BookingService = Depends(get_booking_service),
):
    """Add nights to the end of an existing booking."""
    outcome = await service.extend_booking(booking_id, extension.number_of_nights)
    return _respond(outcome)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: int,
    repository: BookingRepository = Depends(get_booking_repository),
):
    booking = await repository.find_by_id(booking_id)
    if booking is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Booking {booking_id} not found",
        )
    return booking
