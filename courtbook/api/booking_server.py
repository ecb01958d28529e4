"""
Booking API Server.

A FastAPI boundary over the booking core. Each application holds one
user's BookingStore in app.state; the booking and cancellation steps run
under a lock so the eligibility check and the insert happen together.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Callable, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, Field

from courtbook.config import FACILITIES, get_settings
from courtbook.exceptions import BookingNotFoundError, InvalidBookingStateError, UnknownFacilityError
from courtbook.models.booking import BookingView, RejectionCode
from courtbook.models.facility import Facility
from courtbook.models.slot import TimeSlot
from courtbook.services.booking import BookingService, Credential
from courtbook.services.store import BookingStore

# ============================================================================
# Data Models
# ============================================================================


class SlotListResponse(BaseModel):
    """Response model for slot queries."""

    facility_id: str
    court: int
    date: date
    slots: List[TimeSlot]
    total: int


class UserProfile(BaseModel):
    name: str
    email: str


class CreateBookingRequest(BaseModel):
    """Request to book a slot."""

    facility_id: str
    court: int = Field(default=0, ge=0)
    date: date
    slot_id: str
    participant_count: int = Field(default=1, ge=1)
    signed_in: bool = Field(default=False, description="Whether the user has signed in")
    profile: Optional[UserProfile] = None


# HTTP status for each booking refusal
REJECTION_STATUS = {
    RejectionCode.SIGN_IN_REQUIRED: status.HTTP_401_UNAUTHORIZED,
    RejectionCode.SLOT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    RejectionCode.DATE_OUT_OF_RANGE: status.HTTP_400_BAD_REQUEST,
    RejectionCode.PARTICIPANTS_BELOW_MINIMUM: 422,
    RejectionCode.PARTICIPANTS_ABOVE_MAXIMUM: 422,
}


# ============================================================================
# FastAPI Application
# ============================================================================


def create_app(
    store: Optional[BookingStore] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> FastAPI:
    """
    Build the API application.

    Args:
        store: Booking store to serve, a fresh empty one by default
        clock: Source of the current time
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        logger.info("Starting Booking API Server")
        yield
        logger.info("Shutting down Booking API Server")

    app = FastAPI(
        title="Courtbook Booking API",
        description="API for booking sports facility slots",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.booking_service = BookingService(store if store is not None else BookingStore())
    app.state.clock = clock
    app.state.lock = asyncio.Lock()

    _register_routes(app)
    return app


def _service(request: Request) -> BookingService:
    return request.app.state.booking_service


def _now(request: Request) -> datetime:
    return request.app.state.clock()


def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        return {"status": "healthy", "timestamp": _now(request).isoformat()}

    @app.get("/api/v1/facilities", response_model=List[Facility])
    async def list_facilities():
        """List the facility catalog."""
        return [Facility(**facility) for facility in FACILITIES]

    @app.get("/api/v1/dates", response_model=List[date])
    async def list_bookable_dates(request: Request):
        """Days open for booking, today first."""
        return _service(request).bookable_dates(_now(request))

    @app.get("/api/v1/facilities/{facility_id}/slots", response_model=SlotListResponse)
    async def get_slots(
        request: Request,
        facility_id: str,
        date: date = Query(..., description="Day to list, YYYY-MM-DD"),
        court: int = Query(default=0, ge=0, description="Court number"),
    ):
        """Get the slots of one court for one day."""
        try:
            slots = _service(request).get_slots(facility_id, court, date, _now(request))
        except UnknownFacilityError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        return SlotListResponse(
            facility_id=facility_id, court=court, date=date, slots=slots, total=len(slots)
        )

    @app.get("/api/v1/bookings", response_model=List[BookingView])
    async def list_bookings(request: Request, active: bool = Query(default=False)):
        """List bookings, upcoming first."""
        service = _service(request)
        now = _now(request)
        return service.active_bookings(now) if active else service.list_bookings(now)

    @app.post(
        "/api/v1/bookings", response_model=BookingView, status_code=status.HTTP_201_CREATED
    )
    async def create_booking(request: Request, body: CreateBookingRequest):
        """
        Book a slot.

        Refusals carry the rule that failed in `detail`.
        """
        service = _service(request)
        async with request.app.state.lock:
            now = _now(request)
            try:
                result = service.book(
                    body.facility_id,
                    body.court,
                    body.date,
                    body.slot_id,
                    now,
                    participant_count=body.participant_count,
                    signed_in=body.signed_in,
                )
            except UnknownFacilityError as e:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
            except ValueError as e:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        if not result.success:
            raise HTTPException(
                status_code=REJECTION_STATUS.get(result.error_code, status.HTTP_409_CONFLICT),
                detail={"code": result.error_code.value, "message": result.message},
            )
        return service.lifecycle.view(result.booking, now)

    @app.get("/api/v1/bookings/{booking_id}", response_model=BookingView)
    async def get_booking(request: Request, booking_id: str):
        try:
            return _service(request).get_booking(booking_id, _now(request))
        except BookingNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    @app.get("/join/{share_token}", response_model=BookingView)
    async def join_booking(request: Request, share_token: str):
        """Booking behind a shared join link."""
        try:
            return _service(request).get_booking_by_token(share_token, _now(request))
        except BookingNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    @app.post("/api/v1/bookings/{booking_id}/cancel", response_model=BookingView)
    async def cancel_booking(request: Request, booking_id: str):
        """Cancel a booking."""
        service = _service(request)
        async with request.app.state.lock:
            now = _now(request)
            try:
                booking = service.cancel_booking(booking_id, now)
            except BookingNotFoundError as e:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
            except InvalidBookingStateError as e:
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
        return service.lifecycle.view(booking, now)

    @app.get("/api/v1/bookings/{booking_id}/credential", response_model=Credential)
    async def get_credential(request: Request, booking_id: str):
        """Share token and QR availability for a booking."""
        try:
            return _service(request).credential(booking_id, _now(request))
        except BookingNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


app = create_app()


# ============================================================================
# Run Server
# ============================================================================


def run_server(host: Optional[str] = None, port: Optional[int] = None):
    """Run the booking API server."""
    import uvicorn

    settings = get_settings()
    # One worker: bookings live in this process's memory
    uvicorn.run(
        "courtbook.api.booking_server:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=False,
        workers=1,
    )


if __name__ == "__main__":
    run_server()
