"""
Time slot models.
"""

from datetime import datetime, time
from enum import Enum

from pydantic import BaseModel, Field, model_validator


class UnavailableReason(str, Enum):
    """Why a slot cannot be booked. NONE means it can."""

    NONE = "none"
    EXPIRED = "expired"
    BOOKED = "booked"
    BLOCKED = "blocked"
    MAINTENANCE = "maintenance"


class SlotTemplate(BaseModel):
    """
    A fixed (start, end) time-of-day pair in a facility schedule.
    """

    start: time
    end: time

    @property
    def duration_minutes(self) -> int:
        start = self.start.hour * 60 + self.start.minute
        end = self.end.hour * 60 + self.end.minute
        if end <= start:
            end += 24 * 60
        return end - start

    model_config = {"frozen": True}


class TimeSlot(BaseModel):
    """
    A generated slot for one facility, court and day.

    Slots are derived on every query and never stored.
    """

    id: str = Field(description="Stable slot identifier")
    slot_index: int = Field(ge=1, description="1-based position in the day's schedule")
    time_range: str = Field(description="12-hour display range, e.g. '6:45 AM - 7:30 AM'")
    start_time: datetime = Field(description="Start of the slot")
    end_time: datetime = Field(description="End of the slot")
    capacity: int = Field(ge=1, description="Maximum participants for the sport")
    available: int = Field(ge=0, description="Places still available")
    is_expired: bool = Field(default=False, description="Whether the slot has already started")
    unavailable_reason: UnavailableReason = Field(
        default=UnavailableReason.NONE,
        description="Why the slot cannot be booked",
    )

    @model_validator(mode="after")
    def check_availability(self) -> "TimeSlot":
        if self.available > self.capacity:
            raise ValueError("available cannot exceed capacity")
        if (self.available == 0) != (self.unavailable_reason is not UnavailableReason.NONE):
            raise ValueError("available must be 0 exactly when the slot has an unavailable reason")
        return self

    @property
    def duration_minutes(self) -> int:
        """Calculate duration in minutes."""
        return int((self.end_time - self.start_time).total_seconds() / 60)

    @property
    def is_bookable(self) -> bool:
        return not self.is_expired and self.available > 0
