import math
from dataclasses import dataclass, field
from typing import Iterable, Optional


@dataclass(frozen=True)
class Record:
    """One decoded sample.

    `index` is the position in decode order and is the identity shared with
    GPS points and chart cursor positions. `timestamp_seconds` is NaN when
    the raw timestamp could not be parsed.
    """
    index: int
    timestamp_seconds: float
    elapsed_seconds: float = math.nan
    distance_km: Optional[float] = None
    fields: dict[str, float] = field(default_factory=dict)
    timestamp: Optional[str] = None  # ISO text of the raw value, for display

    @property
    def has_valid_time(self) -> bool:
        return math.isfinite(self.timestamp_seconds)

    def get(self, name: str) -> Optional[float]:
        """Numeric value of a field, None when absent on this record."""
        return self.fields.get(name)


@dataclass(frozen=True)
class GpsPoint:
    index: int
    latitude: float
    longitude: float
    timestamp_seconds: float

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "lat": self.latitude,
            "lon": self.longitude,
            "ts": self.timestamp_seconds if math.isfinite(self.timestamp_seconds) else None,
        }


@dataclass(frozen=True)
class BoundingRegion:
    """Axis-aligned lat/lon rectangle (no antimeridian handling)."""
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def extend(self, lat: float, lon: float) -> "BoundingRegion":
        return BoundingRegion(
            min_lat=min(self.min_lat, lat),
            max_lat=max(self.max_lat, lat),
            min_lon=min(self.min_lon, lon),
            max_lon=max(self.max_lon, lon),
        )

    @classmethod
    def around(cls, lat: float, lon: float) -> "BoundingRegion":
        return cls(min_lat=lat, max_lat=lat, min_lon=lon, max_lon=lon)

    @classmethod
    def from_points(cls, points: Iterable[GpsPoint]) -> Optional["BoundingRegion"]:
        """Bounds of the given points, None when there are none."""
        region = None
        for p in points:
            if region is None:
                region = cls.around(p.latitude, p.longitude)
            else:
                region = region.extend(p.latitude, p.longitude)
        return region

    def to_dict(self) -> dict:
        return {
            "minLat": self.min_lat,
            "maxLat": self.max_lat,
            "minLon": self.min_lon,
            "maxLon": self.max_lon,
        }
