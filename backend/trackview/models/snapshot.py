from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Optional

from trackview.models.record import BoundingRegion, GpsPoint, Record


@dataclass
class RawStructure:
    """Decoder output: attribute bags for records, laps and sessions.

    `records` is None when the source carried no record sequence at all.
    """
    records: Optional[list[dict[str, Any]]] = None
    laps: list[dict[str, Any]] = field(default_factory=list)
    sessions: list[dict[str, Any]] = field(default_factory=list)
    source: str = ""


@dataclass(frozen=True)
class ActivitySnapshot:
    """Immutable result of normalizing one file.

    Replaced wholesale on the next load; never updated in place.
    """
    filename: str
    records: tuple[Record, ...]
    gps: tuple[GpsPoint, ...]
    bounds: Optional[BoundingRegion]
    fields: tuple[str, ...]
    laps: tuple[dict[str, Any], ...] = ()
    sessions: tuple[dict[str, Any], ...] = ()
    start_seconds: Optional[float] = None
    end_seconds: Optional[float] = None
    invalid_timestamps: int = 0

    @property
    def has_gps(self) -> bool:
        return bool(self.gps)

    @cached_property
    def _gps_lookup(self) -> dict[int, GpsPoint]:
        return {p.index: p for p in self.gps}

    def gps_by_index(self, index: int) -> Optional[GpsPoint]:
        """GPS point with exactly this record index, None if that record had no fix."""
        return self._gps_lookup.get(index)
