"""
Slot Availability Generator.

Builds the list of time slots for a facility, court and day. Occupancy is
supplied by an OccupancySource; the default SeededOccupancy fabricates a
stable picture from a seeded pseudo-random draw, so the same facility,
court, day and slot always report the same availability. Only expiry
depends on the current time.
"""

import math
import re
from datetime import date, datetime, timedelta
from typing import List, NamedTuple, Optional, Protocol

from loguru import logger

from courtbook.config import get_settings
from courtbook.models.facility import Facility
from courtbook.models.slot import TimeSlot, UnavailableReason
from courtbook.services.schedule import SlotScheduleCatalog, get_schedule_catalog
from courtbook.services.time_format import format_range

# Seeds of different courts on one day stay this far apart, which keeps
# the slot draws and the partial-availability draws (offset 1000) of up to
# 50 courts from overlapping.
COURT_SEED_STRIDE = 2000
DAY_SEED_STRIDE = 100000
PARTIAL_DRAW_OFFSET = 1000


def seeded_random(seed: int) -> float:
    """
    Reproducible pseudo-random value in [0, 1) for an integer seed.
    """
    x = math.sin(seed) * 10000
    return x - math.floor(x)


def slot_seed(day: date, court_index: int) -> int:
    """Seed for one court on one day."""
    day_key = day.year * 10000 + day.month * 100 + day.day
    return day_key * DAY_SEED_STRIDE + court_index * COURT_SEED_STRIDE


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


class Occupancy(NamedTuple):
    available: int
    reason: UnavailableReason


class OccupancySource(Protocol):
    """Where slot occupancy comes from. Swap in a live source here."""

    def occupancy(
        self,
        facility_name: str,
        location: str,
        court_index: int,
        day: date,
        slot_index: int,
        capacity: int,
    ) -> Occupancy: ...


class SeededOccupancy:
    """
    Deterministic occupancy from a seeded draw.

    Draw bands: below 0.3 fully available, below 0.6 partially available,
    below 0.8 booked, below 0.9 blocked, otherwise under maintenance.
    """

    FULL_BELOW = 0.3
    PARTIAL_BELOW = 0.6
    BOOKED_BELOW = 0.8
    BLOCKED_BELOW = 0.9

    def occupancy(
        self,
        facility_name: str,
        location: str,
        court_index: int,
        day: date,
        slot_index: int,
        capacity: int,
    ) -> Occupancy:
        seed = slot_seed(day, court_index)
        draw = seeded_random(seed + slot_index)

        if draw < self.FULL_BELOW:
            return Occupancy(capacity, UnavailableReason.NONE)
        if draw < self.PARTIAL_BELOW:
            if capacity < 2:
                # [1, capacity - 1] is empty; the only non-zero count is full
                return Occupancy(capacity, UnavailableReason.NONE)
            partial = seeded_random(seed + slot_index + PARTIAL_DRAW_OFFSET)
            return Occupancy(math.floor(partial * (capacity - 1)) + 1, UnavailableReason.NONE)
        if draw < self.BOOKED_BELOW:
            return Occupancy(0, UnavailableReason.BOOKED)
        if draw < self.BLOCKED_BELOW:
            return Occupancy(0, UnavailableReason.BLOCKED)
        return Occupancy(0, UnavailableReason.MAINTENANCE)


class SlotAvailabilityGenerator:
    """
    Produces the time slots of a facility court for a day.

    Stateless apart from its collaborators; every call recomputes.
    """

    def __init__(
        self,
        catalog: Optional[SlotScheduleCatalog] = None,
        occupancy: Optional[OccupancySource] = None,
    ):
        self._catalog = catalog or get_schedule_catalog()
        self._occupancy = occupancy or SeededOccupancy()

    def generate(
        self,
        facility_name: str,
        location: str,
        court_index: int,
        day: date,
        capacity: int,
        now: datetime,
    ) -> List[TimeSlot]:
        """
        Generate the slots of one court for one day.

        Args:
            facility_name: Facility display name
            location: Facility location label
            court_index: Court number (0-based)
            day: Calendar day to generate
            capacity: Maximum participants per slot
            now: Current time, used only for expiry

        Returns:
            Slots in timetable order
        """
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")

        templates = self._catalog.templates_for(facility_name, location, court_index)
        id_prefix = f"{_slug(facility_name)}-{_slug(location)}-c{court_index}-{day:%Y%m%d}"

        slots: List[TimeSlot] = []
        for index, template in enumerate(templates, start=1):
            start = datetime.combine(day, template.start)
            end = start + timedelta(minutes=template.duration_minutes)
            is_expired = start < now

            if is_expired:
                available, reason = 0, UnavailableReason.EXPIRED
            else:
                available, reason = self._occupancy.occupancy(
                    facility_name, location, court_index, day, index, capacity
                )

            slots.append(
                TimeSlot(
                    id=f"{id_prefix}-{index}",
                    slot_index=index,
                    time_range=format_range(template.start, template.end),
                    start_time=start,
                    end_time=end,
                    capacity=capacity,
                    available=available,
                    is_expired=is_expired,
                    unavailable_reason=reason,
                )
            )

        logger.debug(
            f"Generated {len(slots)} slots for {facility_name} ({location}) "
            f"court {court_index} on {day.isoformat()}"
        )
        return slots

    def generate_for_facility(
        self, facility: Facility, court_index: int, day: date, now: datetime
    ) -> List[TimeSlot]:
        """Generate slots using the facility's sport capacity."""
        if not 0 <= court_index < facility.courts:
            raise ValueError(
                f"{facility.name} ({facility.location}) has {facility.courts} court(s), "
                f"got court {court_index}"
            )
        return self.generate(
            facility.name, facility.location, court_index, day, facility.slot_capacity, now
        )


def bookable_dates(now: datetime, horizon_days: Optional[int] = None) -> List[date]:
    """Days that can be booked: today and the following days up to the horizon."""
    if horizon_days is None:
        horizon_days = get_settings().booking_horizon_days
    today = now.date()
    return [today + timedelta(days=offset) for offset in range(horizon_days)]


def is_bookable_date(day: date, now: datetime, horizon_days: Optional[int] = None) -> bool:
    if horizon_days is None:
        horizon_days = get_settings().booking_horizon_days
    offset = (day - now.date()).days
    return 0 <= offset < horizon_days
