"""
Booking-related data models.
"""

import re
import secrets
import string
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

BOOKING_ID_PATTERN = re.compile(r"^BK-[A-Z0-9]{6,8}$")

_TOKEN_ALPHABET = string.ascii_uppercase + string.digits


def generate_token(length: int = 6) -> str:
    """Generate a 'BK-' prefixed token of uppercase letters and digits."""
    return "BK-" + "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


def participants_label(count: int) -> str:
    """Display string for a participant count, e.g. '3 participants'."""
    return f"{count} participant{'s' if count > 1 else ''}"


class BookingStatus(str, Enum):
    """Booking status. Only CANCELLED is ever stored after creation."""

    UPCOMING = "Upcoming"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class RejectionCode(str, Enum):
    """Why a booking attempt was turned down."""

    SIGN_IN_REQUIRED = "SIGN_IN_REQUIRED"
    ACTIVE_BOOKING_LIMIT = "ACTIVE_BOOKING_LIMIT"
    DAILY_BOOKING_LIMIT = "DAILY_BOOKING_LIMIT"
    CONSECUTIVE_SLOT = "CONSECUTIVE_SLOT"
    OVERLAPPING_BOOKING = "OVERLAPPING_BOOKING"
    PARTICIPANTS_BELOW_MINIMUM = "PARTICIPANTS_BELOW_MINIMUM"
    PARTICIPANTS_ABOVE_MAXIMUM = "PARTICIPANTS_ABOVE_MAXIMUM"
    SLOT_EXPIRED = "SLOT_EXPIRED"
    SLOT_UNAVAILABLE = "SLOT_UNAVAILABLE"
    SLOT_NOT_FOUND = "SLOT_NOT_FOUND"
    DATE_OUT_OF_RANGE = "DATE_OUT_OF_RANGE"


class BookingRequest(BaseModel):
    """
    Data needed to create a booking.
    """

    facility_name: str = Field(description="Facility display name")
    sport: str = Field(description="Sport being played")
    location: str = Field(description="Facility location label")
    date: str = Field(description="Display date: 'Today', 'Tomorrow' or e.g. 'Oct 21, 2026'")
    time: str = Field(description="Time range, e.g. '2:00 PM - 2:45 PM' or '14:00 - 14:45'")
    participant_count: int = Field(default=1, ge=1, description="Number of participants")
    facility_size: int = Field(default=500, description="Facility size shown on the booking card")

    @field_validator("date", "time", mode="before")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v


class Booking(BookingRequest):
    """
    A stored booking.

    The stored status is authoritative only for CANCELLED; whether an
    uncancelled booking is upcoming or completed is derived at read time.
    """

    id: str = Field(default_factory=generate_token, description="Booking identifier")
    share_token: str = Field(
        default_factory=lambda: generate_token(8),
        description="Token shared with participants and encoded in the QR code",
    )
    participants: str = Field(default="", description="Participant display string")
    status: BookingStatus = Field(default=BookingStatus.UPCOMING)
    created_at: datetime = Field(default_factory=datetime.now)

    @field_validator("id", "share_token")
    @classmethod
    def check_token_format(cls, v: str) -> str:
        if not BOOKING_ID_PATTERN.match(v):
            raise ValueError(f"Invalid booking token: {v}")
        return v

    def model_post_init(self, __context: Any) -> None:
        if not self.participants:
            self.participants = participants_label(self.participant_count)

    def share_url(self, base_url: str) -> str:
        """Link participants open to join the booking."""
        return f"{base_url.rstrip('/')}/join/{self.share_token}"


class EligibilityDecision(BaseModel):
    """
    Result of a booking eligibility check.
    """

    allowed: bool = Field(description="Whether the booking may proceed")
    reason: Optional[str] = Field(default=None, description="Human-readable rejection reason")
    code: Optional[RejectionCode] = Field(default=None, description="Rejection code if refused")

    @classmethod
    def allow(cls) -> "EligibilityDecision":
        return cls(allowed=True)

    @classmethod
    def reject(cls, code: RejectionCode, reason: str) -> "EligibilityDecision":
        return cls(allowed=False, reason=reason, code=code)


class BookingResult(BaseModel):
    """
    Result of a booking attempt.
    """

    success: bool = Field(description="Whether booking was successful")
    booking: Optional[Booking] = Field(default=None, description="The created booking")
    message: str = Field(description="Human-readable result message")
    error_code: Optional[RejectionCode] = Field(default=None, description="Error code if failed")


class BookingView(BaseModel):
    """
    A booking together with the flags derived from the current time.
    """

    booking: Booking
    real_time_status: BookingStatus
    is_active: bool = Field(description="Stored as upcoming and not yet finished")
    can_cancel: bool
    credential_available: bool
    credential_status: str
