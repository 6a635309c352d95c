from app.schemas.booking import BookingCreate, BookingExtend, BookingResponse, RejectionResponse

__all__ = [
    "BookingCreate", "BookingExtend", "BookingResponse", "RejectionResponse",
]
