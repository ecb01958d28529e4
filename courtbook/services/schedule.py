"""
Slot schedule catalog.

Each facility type runs a fixed daily timetable. A timetable is chosen by
facility name and location; all courts of one facility share it. Rules are
checked in declaration order and the first match wins. Facilities with no
rule get the generic timetable.
"""

from datetime import time
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from loguru import logger
from pydantic import BaseModel, Field

from courtbook.models.slot import SlotTemplate


def _clock(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def timetable(*pairs: Tuple[str, str]) -> Tuple[SlotTemplate, ...]:
    """Build templates from ("HH:MM", "HH:MM") pairs."""
    return tuple(SlotTemplate(start=_clock(start), end=_clock(end)) for start, end in pairs)


def consecutive(start: str, duration_minutes: int, count: int) -> Tuple[SlotTemplate, ...]:
    """Build `count` back-to-back templates of equal length from `start`."""
    first = _clock(start)
    offset = first.hour * 60 + first.minute
    templates = []
    for _ in range(count):
        end = offset + duration_minutes
        templates.append(
            SlotTemplate(
                start=time(offset // 60, offset % 60),
                end=time((end // 60) % 24, end % 60),
            )
        )
        offset = end
    return tuple(templates)


class ScheduleRule(BaseModel):
    """
    Timetable for a facility name, optionally narrowed by location.

    A rule with neither location matcher applies to every location.
    """

    facility_name: str
    location_contains: Optional[str] = None
    location_equals: Optional[str] = None
    templates: Tuple[SlotTemplate, ...] = Field(min_length=1)

    def matches(self, facility_name: str, location: str) -> bool:
        if facility_name.strip() != self.facility_name:
            return False
        location = location.strip()
        if self.location_equals is not None and location != self.location_equals:
            return False
        if self.location_contains is not None and self.location_contains not in location:
            return False
        return True

    model_config = {"frozen": True}


# 21 slots of 45 minutes, 6:45 AM to 10:30 PM, no 6:00 lead-in slot
GENERIC_TIMETABLE = consecutive("06:45", 45, 21)

SCHEDULE_RULES: List[ScheduleRule] = [
    ScheduleRule(
        facility_name="Badminton Court",
        location_contains="German",
        templates=consecutive("06:00", 75, 3) + consecutive("16:00", 75, 4),
    ),
    ScheduleRule(
        facility_name="Badminton Court",
        location_contains="C1",
        templates=consecutive("06:30", 45, 4) + consecutive("17:30", 45, 6),
    ),
    ScheduleRule(
        facility_name="Badminton Court",
        location_equals="Sports Complex",
        templates=consecutive("06:00", 60, 3) + consecutive("16:00", 60, 6),
    ),
    ScheduleRule(
        facility_name="Padel Court",
        location_contains="C1",
        templates=consecutive("07:00", 60, 3) + consecutive("16:00", 60, 6),
    ),
    ScheduleRule(
        facility_name="Gym",
        templates=timetable(
            ("06:00", "07:15"),
            ("07:15", "08:15"),
            ("08:15", "09:00"),
            ("17:00", "18:15"),
            ("18:15", "19:15"),
            ("19:15", "20:00"),
            ("20:00", "21:15"),
        ),
    ),
    ScheduleRule(
        facility_name="Swimming Pool",
        templates=consecutive("06:00", 60, 4) + consecutive("16:00", 60, 4),
    ),
    ScheduleRule(
        facility_name="Tennis Court",
        templates=consecutive("06:00", 60, 3) + consecutive("16:00", 60, 5),
    ),
    ScheduleRule(
        facility_name="Football Ground",
        templates=timetable(("06:30", "08:00"), ("16:00", "17:30"), ("17:30", "19:00")),
    ),
    ScheduleRule(
        facility_name="Cricket Ground",
        templates=timetable(("06:30", "08:00"), ("16:00", "17:30"), ("17:30", "19:00")),
    ),
]


class SlotScheduleCatalog:
    """
    Lookup of slot templates by facility, location and court.
    """

    def __init__(
        self,
        rules: Optional[Sequence[ScheduleRule]] = None,
        fallback: Optional[Sequence[SlotTemplate]] = None,
    ):
        self._rules = list(SCHEDULE_RULES if rules is None else rules)
        self._fallback = tuple(GENERIC_TIMETABLE if fallback is None else fallback)

    @property
    def fallback(self) -> Tuple[SlotTemplate, ...]:
        return self._fallback

    def find_rule(self, facility_name: str, location: str) -> Optional[ScheduleRule]:
        for rule in self._rules:
            if rule.matches(facility_name, location):
                return rule
        return None

    def templates_for(
        self, facility_name: str, location: str, court_index: int = 0
    ) -> List[SlotTemplate]:
        """
        Get the ordered slot templates for a facility.

        Args:
            facility_name: Facility display name, e.g. "Badminton Court"
            location: Location label, e.g. "German House"
            court_index: Court number; all courts share one timetable

        Returns:
            Ordered templates for one day
        """
        rule = self.find_rule(facility_name, location)
        if rule is None:
            logger.debug(
                f"No timetable for {facility_name} at {location}, using generic timetable"
            )
            return list(self._fallback)
        return list(rule.templates)


@lru_cache()
def get_schedule_catalog() -> SlotScheduleCatalog:
    """Get the shared catalog built from the static timetables."""
    return SlotScheduleCatalog()
