"""
Configuration management for the Courtbook booking engine.

This module provides centralized configuration using Pydantic settings
for type-safe environment variable management, plus the static facility
and sport tables the booking rules read from.
"""

from functools import lru_cache
from typing import Dict, List, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Booking limits
    max_active_bookings: int = Field(default=4, alias="MAX_ACTIVE_BOOKINGS")
    max_daily_bookings: int = Field(default=2, alias="MAX_DAILY_BOOKINGS")
    active_cap_excludes_expired: bool = Field(
        default=False, alias="ACTIVE_CAP_EXCLUDES_EXPIRED"
    )
    booking_horizon_days: int = Field(default=60, alias="BOOKING_HORIZON_DAYS")

    # Time windows (minutes)
    cancellation_cutoff_minutes: int = Field(
        default=60, alias="CANCELLATION_CUTOFF_MINUTES"
    )
    credential_lead_minutes: int = Field(default=60, alias="CREDENTIAL_LEAD_MINUTES")
    credential_grace_minutes: int = Field(default=20, alias="CREDENTIAL_GRACE_MINUTES")

    # Fallbacks for gaps in the static tables
    default_capacity: int = Field(default=10, alias="DEFAULT_CAPACITY")
    default_facility_size: int = Field(default=500, alias="DEFAULT_FACILITY_SIZE")

    # Credential sharing
    share_base_url: str = Field(default="http://localhost:8080", alias="SHARE_BASE_URL")

    # Application Configuration
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8080, alias="API_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once,
    improving performance for repeated access.
    """
    return Settings()


# Facility catalog - centralized reference data
FACILITIES: List[dict] = [
    # Indoor
    {"id": "indoor-1", "name": "Badminton Court", "sport": "Badminton", "location": "K block", "courts": 3, "capacity": 12, "facility_type": "indoor"},
    {"id": "indoor-2", "name": "Squash Court", "sport": "Squash", "location": "K block", "courts": 2, "capacity": 6, "facility_type": "indoor"},
    {"id": "indoor-3", "name": "Basketball Court", "sport": "Basketball", "location": "Near K block", "courts": 1, "capacity": 20, "facility_type": "indoor"},
    {"id": "indoor-4", "name": "Gym", "sport": "Gym", "location": "DG", "courts": 1, "capacity": 40, "facility_type": "indoor"},
    {"id": "indoor-5", "name": "Gym", "sport": "Gym", "location": "K block", "courts": 1, "capacity": 40, "facility_type": "indoor"},
    {"id": "indoor-6", "name": "Badminton Court", "sport": "Badminton", "location": "German House", "courts": 2, "capacity": 10, "facility_type": "indoor"},
    {"id": "indoor-7", "name": "Padel Court", "sport": "Padel", "location": "C11-C12 Block", "courts": 2, "capacity": 8, "facility_type": "indoor"},
    {"id": "indoor-8", "name": "Chess Room", "sport": "Chess", "location": "C12 Block", "courts": 1, "capacity": 10, "facility_type": "indoor"},
    {"id": "indoor-9", "name": "Table Tennis", "sport": "Table Tennis", "location": "Hostel Blocks", "courts": 4, "capacity": 48, "facility_type": "indoor"},
    {"id": "indoor-10", "name": "Badminton Court", "sport": "Badminton", "location": "Sports Complex", "courts": 4, "capacity": 12, "facility_type": "indoor"},
    # Outdoor
    {"id": "outdoor-1", "name": "Football Ground", "sport": "Football", "location": "Near K block", "courts": 1, "capacity": 22, "facility_type": "outdoor"},
    {"id": "outdoor-2", "name": "Cricket Ground", "sport": "Cricket", "location": "Old Ground", "courts": 1, "capacity": 22, "facility_type": "outdoor"},
    {"id": "outdoor-3", "name": "Basketball Court", "sport": "Basketball", "location": "Near K block", "courts": 2, "capacity": 20, "facility_type": "outdoor"},
    {"id": "outdoor-4", "name": "Volleyball Court", "sport": "Volleyball", "location": "Near Gate No. 3", "courts": 1, "capacity": 24, "facility_type": "outdoor"},
    {"id": "outdoor-5", "name": "Tennis Court", "sport": "Tennis", "location": "Near K block", "courts": 2, "capacity": 8, "facility_type": "outdoor"},
    {"id": "outdoor-6", "name": "Swimming Pool", "sport": "Swimming", "location": "K block", "courts": 1, "capacity": 35, "facility_type": "outdoor"},
    {"id": "outdoor-7", "name": "Pickleball Courts", "sport": "Pickleball", "location": "Near H block", "courts": 4, "capacity": 40, "facility_type": "outdoor"},
    {"id": "outdoor-8", "name": "Badminton Court", "sport": "Badminton", "location": "C10-C11 block", "courts": 2, "capacity": 12, "facility_type": "outdoor"},
    {"id": "outdoor-9", "name": "Badminton Court", "sport": "Badminton", "location": "C & D block", "courts": 1, "capacity": 8, "facility_type": "outdoor"},
    {"id": "outdoor-10", "name": "Half Basketball Court", "sport": "Basketball", "location": "C & D block", "courts": 1, "capacity": 12, "facility_type": "outdoor"},
]


# Maximum participants per slot, by sport
SPORT_CAPACITY: Dict[str, int] = {
    "Football": 22,
    "Cricket": 22,
    "Basketball": 20,
    "Volleyball": 24,
    "Tennis": 8,
    "Badminton": 12,
    "Squash": 6,
    "Swimming": 35,
    "Pickleball": 40,
    "Gym": 40,
    "Field Court": 8,
    "Hockey": 10,
    "Table Tennis": 48,
    "Chess": 10,
    "Padel": 8,
    "Padel Court": 8,
    "Basket Court": 12,
}

# Sports where individual participant details are not collected; a booking
# always counts as a single participant.
SOLO_SPORTS = frozenset({"Gym", "Swimming"})

# (min, max) participants per booking
SPORT_PARTICIPANT_BOUNDS: Dict[str, Tuple[int, int]] = {
    "Football": (1, 22),
    "Cricket": (1, 22),
    "Basketball": (1, 20),
    "Volleyball": (1, 24),
    "Tennis": (1, 8),
    "Badminton": (1, 12),
    "Squash": (1, 6),
    "Pickleball": (1, 40),
    "Field Court": (1, 8),
    "Hockey": (1, 10),
    "Table Tennis": (1, 48),
    "Chess": (1, 10),
    "Padel": (1, 8),
    "Padel Court": (1, 8),
    "Basket Court": (1, 12),
    "Gym": (1, 1),
    "Swimming": (1, 1),
}

DEFAULT_PARTICIPANT_BOUNDS: Tuple[int, int] = (1, 10)

# Facility floor size shown on booking cards
SPORT_FACILITY_SIZE: Dict[str, int] = {
    "Football": 8968,
    "Cricket": 7400,
    "Volleyball": 960,
    "Tennis": 1338,
    "Badminton": 480,
    "Squash": 187,
    "Basketball": 536,
    "Swimming": 1474,
    "Pickleball": 736,
    "Gym": 382,
    "Padel": 832,
    "Table Tennis": 1200,
    "Chess": 1048,
}


def get_facility_by_id(facility_id: str) -> dict | None:
    """Get a facility by its ID."""
    for facility in FACILITIES:
        if facility["id"] == facility_id:
            return facility
    return None


def get_sport_capacity(sport: str) -> int:
    """Get the per-slot capacity for a sport, falling back to the default."""
    return SPORT_CAPACITY.get(sport, get_settings().default_capacity)


def get_facility_size(sport: str) -> int:
    """Get the displayed facility size for a sport."""
    return SPORT_FACILITY_SIZE.get(sport, get_settings().default_facility_size)
