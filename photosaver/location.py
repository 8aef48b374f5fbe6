from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class LocationFix:
    latitude: float
    """Signed decimal degrees, negative south of the equator."""

    longitude: float
    """Signed decimal degrees, negative west of Greenwich."""

    altitude: float
    """Metres above (positive) or below (negative) sea level."""

    timestamp: datetime
    """When the fix was taken. Naive datetimes are taken to be UTC."""

    @property
    def utc_timestamp(self) -> datetime:
        if self.timestamp.tzinfo is None:
            return self.timestamp.replace(tzinfo=timezone.utc)
        return self.timestamp.astimezone(timezone.utc)


@dataclass(frozen=True)
class HeadingReading:
    true_heading: float
    """Degrees clockwise from true north. Not range checked."""
