"""
Booking Eligibility Policy.

Decides whether a user may book a slot given the bookings they already
hold. Checks run in a fixed order and the first failure is reported:

    1. active-booking cap
    2. daily cap
    3. consecutive or overlapping slot on the same day
    4. participant count for the sport
    5. slot expired or unavailable

Sign-in is checked by the caller before the policy runs. The policy has
no side effects; storing the booking is up to the caller.
"""

from datetime import datetime
from typing import Iterable, Optional

from loguru import logger

from courtbook.config import get_settings
from courtbook.exceptions import TimeFormatError
from courtbook.models.booking import Booking, BookingStatus, EligibilityDecision, RejectionCode
from courtbook.models.facility import SportRule
from courtbook.models.slot import TimeSlot, UnavailableReason
from courtbook.services.lifecycle import (
    TODAY,
    TOMORROW,
    booking_end,
    booking_start,
    bookings_on_day,
    display_date_label,
    is_upcoming_and_not_expired,
)
from courtbook.services.time_format import to_12_hour

UNAVAILABLE_MESSAGES = {
    UnavailableReason.BOOKED: "This slot is fully booked. Please choose another time.",
    UnavailableReason.BLOCKED: "This slot has been blocked by the facility administrator.",
    UnavailableReason.MAINTENANCE: "This slot is closed for maintenance.",
    UnavailableReason.NONE: "This slot has no places left.",
}


def _day_phrase(label: str) -> str:
    if label in (TODAY, TOMORROW):
        return label.lower()
    return label


class BookingEligibilityPolicy:
    """
    Booking rules applied before a booking is stored.
    """

    def __init__(
        self,
        max_active_bookings: Optional[int] = None,
        max_daily_bookings: Optional[int] = None,
        active_cap_excludes_expired: Optional[bool] = None,
    ):
        settings = get_settings()
        self.max_active_bookings = (
            settings.max_active_bookings if max_active_bookings is None else max_active_bookings
        )
        self.max_daily_bookings = (
            settings.max_daily_bookings if max_daily_bookings is None else max_daily_bookings
        )
        self.active_cap_excludes_expired = (
            settings.active_cap_excludes_expired
            if active_cap_excludes_expired is None
            else active_cap_excludes_expired
        )

    def can_book(
        self,
        candidate: TimeSlot,
        sport: str,
        existing_bookings: Iterable[Booking],
        now: datetime,
        participant_count: int = 1,
    ) -> EligibilityDecision:
        """
        Check whether the candidate slot may be booked.

        Args:
            candidate: Slot the user picked
            sport: Sport of the facility
            existing_bookings: The user's current bookings
            now: Current time
            participant_count: Number of participants in the booking

        Returns:
            EligibilityDecision with a user-facing reason when refused
        """
        existing = list(existing_bookings)
        decision = (
            self._check_active_cap(existing, now)
            or self._check_daily_cap(candidate, existing, now)
            or self._check_adjacent(candidate, existing, now)
            or self._check_participants(sport, participant_count)
            or self._check_slot(candidate)
        )
        if decision is None:
            return EligibilityDecision.allow()

        logger.info(f"Booking of slot {candidate.id} refused ({decision.code.value}): {decision.reason}")
        return decision

    def _check_active_cap(self, existing: list, now: datetime) -> Optional[EligibilityDecision]:
        active = [
            booking
            for booking in existing
            if booking.status is BookingStatus.UPCOMING
            and (not self.active_cap_excludes_expired or is_upcoming_and_not_expired(booking, now))
        ]
        if len(active) >= self.max_active_bookings:
            return EligibilityDecision.reject(
                RejectionCode.ACTIVE_BOOKING_LIMIT,
                f"You already have {len(active)} active bookings, you can schedule "
                f"another booking after a booking completes.",
            )
        return None

    def _check_daily_cap(
        self, candidate: TimeSlot, existing: list, now: datetime
    ) -> Optional[EligibilityDecision]:
        day = candidate.start_time.date()
        same_day = bookings_on_day(existing, day, now)
        if len(same_day) >= self.max_daily_bookings:
            day_phrase = _day_phrase(display_date_label(day, now))
            return EligibilityDecision.reject(
                RejectionCode.DAILY_BOOKING_LIMIT,
                f"You already have {len(same_day)} bookings for {day_phrase}. "
                f"Only {self.max_daily_bookings} bookings are allowed per day.",
            )
        return None

    def _check_adjacent(
        self, candidate: TimeSlot, existing: list, now: datetime
    ) -> Optional[EligibilityDecision]:
        day = candidate.start_time.date()
        for booking in bookings_on_day(existing, day, now):
            try:
                start = booking_start(booking, now)
                end = booking_end(booking, now)
            except TimeFormatError as e:
                logger.warning(f"Skipping booking {booking.id} in consecutive-slot check: {e}")
                continue

            booked_time = to_12_hour(booking.time)
            if end == candidate.start_time or start == candidate.end_time:
                return EligibilityDecision.reject(
                    RejectionCode.CONSECUTIVE_SLOT,
                    f"Consecutive slots cannot be booked. You already have "
                    f"{booking.facility_name} at {booked_time}.",
                )
            if start < candidate.end_time and candidate.start_time < end:
                return EligibilityDecision.reject(
                    RejectionCode.OVERLAPPING_BOOKING,
                    f"You already have {booking.facility_name} booked at {booked_time}.",
                )
        return None

    def _check_participants(self, sport: str, participant_count: int) -> Optional[EligibilityDecision]:
        rule = SportRule.for_sport(sport)
        if not rule.collects_participants:
            return None
        if participant_count < rule.min_participants:
            return EligibilityDecision.reject(
                RejectionCode.PARTICIPANTS_BELOW_MINIMUM,
                f"{sport} needs at least {rule.min_participants} participants.",
            )
        if participant_count > rule.max_participants:
            return EligibilityDecision.reject(
                RejectionCode.PARTICIPANTS_ABOVE_MAXIMUM,
                f"{sport} allows at most {rule.max_participants} participants.",
            )
        return None

    def _check_slot(self, candidate: TimeSlot) -> Optional[EligibilityDecision]:
        if candidate.is_expired or candidate.unavailable_reason is UnavailableReason.EXPIRED:
            return EligibilityDecision.reject(
                RejectionCode.SLOT_EXPIRED,
                f"The {candidate.time_range} slot has already started.",
            )
        if candidate.available <= 0:
            return EligibilityDecision.reject(
                RejectionCode.SLOT_UNAVAILABLE,
                UNAVAILABLE_MESSAGES[candidate.unavailable_reason],
            )
        return None
