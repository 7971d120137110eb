"""Pydantic models for the per-request configuration sent by the dashboard module."""

from __future__ import annotations

from datetime import datetime, time
from typing import List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator

TIME_FORMAT = "%H:%M"


class _DashboardModel(BaseModel):
    """Accept the dashboard's camelCase keys as well as field names; ignore display-only keys."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class Coordinates(_DashboardModel):
    """A latitude/longitude pair."""
    lat: float
    lon: float

    def as_param(self) -> str:
        """Render as the "lat,lon" string the directions API expects."""
        return f"{self.lat},{self.lon}"


class Destination(Coordinates):
    """A named commute destination."""
    name: str


class Places(_DashboardModel):
    home: Optional[Coordinates] = None
    destinations: List[Destination] = Field(default_factory=list)

    @field_validator("destinations", mode="before")
    @classmethod
    def null_destinations_mean_empty(cls, v):
        return [] if v is None else v


class ScheduleTimes(_DashboardModel):
    """Start/stop of the active window as 24-hour "HH:mm" strings."""
    start: str
    stop: str

    @field_validator("start", "stop", mode="after")
    @classmethod
    def validate_clock_time(cls, v: str) -> str:
        v = v.strip()
        try:
            datetime.strptime(v, TIME_FORMAT)
        except ValueError as exc:
            raise ValueError(f"expected 24-hour HH:mm time, got {v!r}") from exc
        return v

    def start_time(self) -> time:
        return datetime.strptime(self.start, TIME_FORMAT).time()

    def stop_time(self) -> time:
        return datetime.strptime(self.stop, TIME_FORMAT).time()


class Schedule(_DashboardModel):
    """Weekdays (0 = Sunday ... 6 = Saturday) and daily window when fetching is allowed."""
    days: Set[int]
    times: ScheduleTimes

    @field_validator("days", mode="after")
    @classmethod
    def validate_days(cls, v: Set[int]) -> Set[int]:
        bad = sorted(d for d in v if d < 0 or d > 6)
        if bad:
            raise ValueError(f"weekday numbers must be 0-6, got {bad}")
        return v


class HelperConfig(_DashboardModel):
    """Configuration payload carried by every inbound notification."""
    bus_stop_id: str = Field(alias="busStopId")
    wmata_api_key: str = Field(alias="wmataApiKey")
    google_api_key: Optional[str] = Field(default=None, alias="googleApiKey")
    schedule: Optional[Schedule] = None
    places: Optional[Places] = None

    @field_validator("bus_stop_id", mode="before")
    @classmethod
    def coerce_stop_id(cls, v):
        """Stop ids are numeric-looking codes; the dashboard config may hold them as ints."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @property
    def destinations(self) -> List[Destination]:
        if self.places is None:
            return []
        return list(self.places.destinations)
