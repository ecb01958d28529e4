"""
Facility and sport reference models.
"""

from typing import Literal

from pydantic import BaseModel, Field

from courtbook.config import (
    DEFAULT_PARTICIPANT_BOUNDS,
    SOLO_SPORTS,
    SPORT_PARTICIPANT_BOUNDS,
    get_sport_capacity,
)


class Facility(BaseModel):
    """
    A bookable sports facility from the static catalog.
    """

    id: str = Field(description="Facility identifier")
    name: str = Field(description="Display name, e.g. 'Badminton Court'")
    sport: str = Field(description="Sport played at the facility")
    location: str = Field(description="Location label, e.g. 'K block'")
    courts: int = Field(default=1, ge=1, description="Number of courts sharing the schedule")
    capacity: int = Field(ge=1, description="Advertised facility capacity")
    facility_type: Literal["indoor", "outdoor"] = Field(
        default="indoor", description="Indoor or outdoor facility"
    )

    @property
    def slot_capacity(self) -> int:
        """Maximum participants per slot, from the sport table."""
        return get_sport_capacity(self.sport)

    model_config = {"frozen": True}


class SportRule(BaseModel):
    """
    Participant rules for a sport.
    """

    sport: str
    min_participants: int = Field(ge=1)
    max_participants: int = Field(ge=1)
    collects_participants: bool = Field(
        default=True,
        description="Whether participant details are collected for this sport",
    )

    @classmethod
    def for_sport(cls, sport: str) -> "SportRule":
        """Build the rule for a sport, using the default bounds when unknown."""
        minimum, maximum = SPORT_PARTICIPANT_BOUNDS.get(sport, DEFAULT_PARTICIPANT_BOUNDS)
        return cls(
            sport=sport,
            min_participants=minimum,
            max_participants=maximum,
            collects_participants=sport not in SOLO_SPORTS,
        )

    model_config = {"frozen": True}
