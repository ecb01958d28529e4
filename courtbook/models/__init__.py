"""
Data models for the Courtbook booking engine.
"""

from .booking import (
    Booking,
    BookingRequest,
    BookingResult,
    BookingStatus,
    BookingView,
    EligibilityDecision,
    RejectionCode,
)
from .facility import Facility, SportRule
from .slot import SlotTemplate, TimeSlot, UnavailableReason

__all__ = [
    "Booking",
    "BookingRequest",
    "BookingResult",
    "BookingStatus",
    "BookingView",
    "EligibilityDecision",
    "RejectionCode",
    "Facility",
    "SportRule",
    "SlotTemplate",
    "TimeSlot",
    "UnavailableReason",
]
