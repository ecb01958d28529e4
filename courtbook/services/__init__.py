"""
Services layer for the Courtbook booking engine.
"""

from .availability import SeededOccupancy, SlotAvailabilityGenerator
from .booking import BookingService
from .eligibility import BookingEligibilityPolicy
from .lifecycle import BookingLifecycle
from .schedule import SlotScheduleCatalog
from .store import BookingStore

__all__ = [
    "BookingEligibilityPolicy",
    "BookingLifecycle",
    "BookingService",
    "BookingStore",
    "SeededOccupancy",
    "SlotAvailabilityGenerator",
    "SlotScheduleCatalog",
]
