"""
Error types raised by the booking core.

Policy rejections are not errors; they are returned as
EligibilityDecision / BookingResult values. These exceptions cover
requests that target something that does not exist or cannot change.
"""


class CourtbookError(Exception):
    """Base class for booking core errors."""


class BookingNotFoundError(CourtbookError):
    """No booking with the given identifier exists."""

    def __init__(self, booking_id: str):
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id


class InvalidBookingStateError(CourtbookError):
    """The booking cannot make the requested transition."""

    def __init__(self, booking_id: str, message: str):
        super().__init__(message)
        self.booking_id = booking_id
        self.message = message


class UnknownFacilityError(CourtbookError):
    """The facility is missing from the catalog."""

    def __init__(self, facility_id: str):
        super().__init__(f"Facility {facility_id} not found")
        self.facility_id = facility_id


class TimeFormatError(ValueError):
    """A time or time-range string could not be parsed."""
