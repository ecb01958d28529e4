"""
Booking Service - books and cancels facility slots.

Ties the slot generator, the eligibility policy, the lifecycle rules and
the booking store together for one user. Every booking is written to the
log; confirmation emails and QR images are produced elsewhere.
"""

from datetime import date, datetime
from typing import List, Optional

from loguru import logger
from pydantic import BaseModel

from courtbook.config import get_facility_by_id, get_facility_size, get_settings
from courtbook.exceptions import BookingNotFoundError, InvalidBookingStateError, UnknownFacilityError
from courtbook.models.booking import (
    Booking,
    BookingRequest,
    BookingResult,
    BookingStatus,
    BookingView,
    RejectionCode,
)
from courtbook.models.facility import Facility, SportRule
from courtbook.models.slot import TimeSlot
from courtbook.services.availability import (
    SlotAvailabilityGenerator,
    bookable_dates,
    is_bookable_date,
)
from courtbook.services.eligibility import BookingEligibilityPolicy
from courtbook.services.lifecycle import BookingLifecycle, display_date_label
from courtbook.services.store import BookingStore


class Credential(BaseModel):
    """Entry credential details handed to the QR renderer."""

    booking_id: str
    share_token: str
    share_url: str
    available: bool
    status: str


def get_facility(facility_id: str) -> Facility:
    """
    Raises:
        UnknownFacilityError: if the facility is not in the catalog
    """
    facility = get_facility_by_id(facility_id)
    if facility is None:
        raise UnknownFacilityError(facility_id)
    return Facility(**facility)


class BookingService:
    """
    Service for booking and cancelling slots on behalf of one user.
    """

    def __init__(
        self,
        store: BookingStore,
        generator: Optional[SlotAvailabilityGenerator] = None,
        policy: Optional[BookingEligibilityPolicy] = None,
        lifecycle: Optional[BookingLifecycle] = None,
    ):
        self.settings = get_settings()
        self.store = store
        self.generator = generator or SlotAvailabilityGenerator()
        self.policy = policy or BookingEligibilityPolicy()
        self.lifecycle = lifecycle or BookingLifecycle()

    def bookable_dates(self, now: datetime) -> List[date]:
        """Days open for booking, today first."""
        return bookable_dates(now, self.settings.booking_horizon_days)

    def get_slots(
        self, facility_id: str, court_index: int, day: date, now: datetime
    ) -> List[TimeSlot]:
        """Slots of a facility court for a bookable day; empty outside the horizon."""
        facility = get_facility(facility_id)
        if not is_bookable_date(day, now, self.settings.booking_horizon_days):
            return []
        return self.generator.generate_for_facility(facility, court_index, day, now)

    def book(
        self,
        facility_id: str,
        court_index: int,
        day: date,
        slot_id: str,
        now: datetime,
        participant_count: int = 1,
        signed_in: bool = True,
    ) -> BookingResult:
        """
        Book a slot - checks eligibility, stores the booking and logs it.

        Args:
            facility_id: Catalog id of the facility
            court_index: Court number (0-based)
            day: Day of the slot
            slot_id: Id of the slot as returned by get_slots
            now: Current time
            participant_count: Number of participants
            signed_in: Whether the user has signed in

        Returns:
            BookingResult with the stored booking on success

        Raises:
            UnknownFacilityError: if the facility is not in the catalog
        """
        if not signed_in:
            return BookingResult(
                success=False,
                message="Please sign in to continue with booking.",
                error_code=RejectionCode.SIGN_IN_REQUIRED,
            )

        facility = get_facility(facility_id)
        if not is_bookable_date(day, now, self.settings.booking_horizon_days):
            return BookingResult(
                success=False,
                message=(
                    f"Bookings can be made from today up to "
                    f"{self.settings.booking_horizon_days} days ahead."
                ),
                error_code=RejectionCode.DATE_OUT_OF_RANGE,
            )

        slots = self.generator.generate_for_facility(facility, court_index, day, now)
        slot = next((s for s in slots if s.id == slot_id), None)
        if slot is None:
            return BookingResult(
                success=False,
                message="This slot does not exist. Please choose another time.",
                error_code=RejectionCode.SLOT_NOT_FOUND,
            )

        decision = self.policy.can_book(
            slot, facility.sport, self.store.list(), now, participant_count=participant_count
        )
        if not decision.allowed:
            return BookingResult(success=False, message=decision.reason, error_code=decision.code)

        if not SportRule.for_sport(facility.sport).collects_participants:
            participant_count = 1
        booking = self.store.add(
            BookingRequest(
                facility_name=facility.name,
                sport=facility.sport,
                location=facility.location,
                date=display_date_label(day, now),
                time=slot.time_range,
                participant_count=participant_count,
                facility_size=get_facility_size(facility.sport),
            ),
            now=now,
        )

        logger.info("=" * 60)
        logger.info("BOOKING LOG")
        logger.info("=" * 60)
        logger.info(f"Booking ID: {booking.id}")
        logger.info(f"Share token: {booking.share_token}")
        logger.info(f"Facility: {facility.name} ({facility.location}), court {court_index}")
        logger.info(f"Date/Time: {booking.date} {booking.time}")
        logger.info(f"Participants: {booking.participants}")
        logger.info(f"Duration: {slot.duration_minutes} minutes")
        logger.info("=" * 60)

        return BookingResult(
            success=True,
            booking=booking,
            message=f"Booking confirmed for {facility.name} on {booking.date} at {booking.time}.",
        )

    def cancel_booking(self, booking_id: str, now: datetime) -> Booking:
        """
        Cancel a booking while the cancellation window is open.

        Raises:
            BookingNotFoundError: unknown booking id
            InvalidBookingStateError: already cancelled, completed, or too
                close to the start
        """
        booking = self.store.get(booking_id)
        upcoming = self.lifecycle.real_time_status(booking, now) is BookingStatus.UPCOMING
        if upcoming and not self.lifecycle.is_cancellation_allowed(booking, now):
            cutoff = int(self.lifecycle.cancellation_cutoff.total_seconds() // 60)
            raise InvalidBookingStateError(
                booking_id,
                f"Bookings can only be cancelled more than {cutoff} minutes before they start.",
            )
        return self.store.cancel(booking_id, now=now)

    def get_booking(self, booking_id: str, now: datetime) -> BookingView:
        return self.lifecycle.view(self.store.get(booking_id), now)

    def get_booking_by_token(self, share_token: str, now: datetime) -> BookingView:
        """
        Booking behind a shared join link.

        Raises:
            BookingNotFoundError: if no booking carries this share token
        """
        booking = self.store.find_by_share_token(share_token)
        if booking is None:
            raise BookingNotFoundError(share_token)
        return self.lifecycle.view(booking, now)

    def list_bookings(self, now: datetime) -> List[BookingView]:
        """All bookings, upcoming first."""
        return self.lifecycle.sort_for_display(self.store.list(), now)

    def active_bookings(self, now: datetime) -> List[BookingView]:
        return [view for view in self.list_bookings(now) if view.is_active]

    def credential(self, booking_id: str, now: datetime) -> Credential:
        """Share token, link and QR availability for a booking."""
        booking = self.store.get(booking_id)
        available = (
            booking.status is not BookingStatus.CANCELLED
            and self.lifecycle.is_credential_available(booking, now)
        )
        return Credential(
            booking_id=booking.id,
            share_token=booking.share_token,
            share_url=booking.share_url(self.settings.share_base_url),
            available=available,
            status=self.lifecycle.credential_status(booking, now),
        )
