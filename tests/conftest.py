"""
Shared fixtures for the booking engine tests.
"""

from datetime import date, datetime, time

import pytest

from courtbook.models.booking import Booking, BookingStatus
from courtbook.models.slot import TimeSlot, UnavailableReason
from courtbook.services.time_format import format_range

# Monday, noon
FIXED_NOW = datetime(2026, 10, 19, 12, 0)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def booking_factory():
    """Build bookings with sensible defaults."""

    def make(
        date: str = "Today",
        time: str = "2:00 PM - 2:45 PM",
        status: BookingStatus = BookingStatus.UPCOMING,
        **overrides,
    ) -> Booking:
        fields = {
            "facility_name": "Badminton Court",
            "sport": "Badminton",
            "location": "K block",
            "participant_count": 2,
            "facility_size": 480,
        }
        fields.update(overrides)
        return Booking(date=date, time=time, status=status, **fields)

    return make


@pytest.fixture
def slot_factory():
    """Build time slots on a given day from 'HH:MM' strings."""

    def make(
        day: date,
        start: str,
        end: str,
        available: int = 5,
        capacity: int = 12,
        reason: UnavailableReason = UnavailableReason.NONE,
        is_expired: bool = False,
    ) -> TimeSlot:
        start_clock = time.fromisoformat(start)
        end_clock = time.fromisoformat(end)
        return TimeSlot(
            id=f"test-{day:%Y%m%d}-{start}",
            slot_index=1,
            time_range=format_range(start_clock, end_clock),
            start_time=datetime.combine(day, start_clock),
            end_time=datetime.combine(day, end_clock),
            capacity=capacity,
            available=available,
            is_expired=is_expired,
            unavailable_reason=reason,
        )

    return make
