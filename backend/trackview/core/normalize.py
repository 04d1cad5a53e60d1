"""Record normalization.

Turns a decoder's raw attribute bags into the immutable ActivitySnapshot the
selection and view layers work from:

- every record gets a dense `index` and a canonical `timestamp_seconds`
- records with a valid lat/lon pair contribute a GPS point and extend the
  bounding region
- attributes numeric on at least one record form the sorted field catalog
"""
import logging
import math
from collections.abc import Mapping
from typing import Any

from trackview.core.constants import EXCLUDED_FIELDS, LAT_RANGE, LON_RANGE
from trackview.core.errors import DecodeShapeError
from trackview.core.time_utils import timestamp_text, to_epoch_seconds
from trackview.models.record import BoundingRegion, GpsPoint, Record
from trackview.models.snapshot import ActivitySnapshot

logger = logging.getLogger(__name__)

# Kept on the record itself rather than in `fields`
_PRIVILEGED = ("timestamp", "distance")


def is_numeric(value) -> bool:
    """Finite int/float. Bools and NaN don't count."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def valid_position(lat, lon) -> bool:
    if not (is_numeric(lat) and is_numeric(lon)):
        return False
    return LAT_RANGE[0] <= lat <= LAT_RANGE[1] and LON_RANGE[0] <= lon <= LON_RANGE[1]


def _sequence(raw, name: str):
    if isinstance(raw, Mapping):
        value = raw.get(name)
    else:
        value = getattr(raw, name, None)
    if isinstance(value, (list, tuple)):
        return value
    return None


def normalize(raw, filename: str = "") -> ActivitySnapshot:
    """Build a snapshot from a RawStructure (or any object/mapping with `records`).

    Raises DecodeShapeError when there is no records sequence.
    """
    raw_records = _sequence(raw, "records")
    if raw_records is None:
        raise DecodeShapeError("Decoded file has no records")

    records: list[Record] = []
    gps: list[GpsPoint] = []
    bounds: BoundingRegion | None = None
    catalog: set[str] = set()
    invalid = 0
    start = None
    end = None

    parsed: list[tuple[float, Mapping[str, Any]]] = []
    for bag in raw_records:
        if not isinstance(bag, Mapping):
            bag = {}
        ts = to_epoch_seconds(bag.get("timestamp"))
        if math.isnan(ts):
            invalid += 1
        else:
            start = ts if start is None else min(start, ts)
            end = ts if end is None else max(end, ts)
        parsed.append((ts, bag))

    for i, (ts, bag) in enumerate(parsed):
        lat = bag.get("position_lat")
        lon = bag.get("position_long")
        if valid_position(lat, lon):
            gps.append(GpsPoint(index=i, latitude=float(lat), longitude=float(lon), timestamp_seconds=ts))
            if bounds is None:
                bounds = BoundingRegion.around(float(lat), float(lon))
            else:
                bounds = bounds.extend(float(lat), float(lon))

        fields = {}
        for key, value in bag.items():
            if key in _PRIVILEGED or not is_numeric(value):
                continue
            fields[key] = float(value)
            if key not in EXCLUDED_FIELDS:
                catalog.add(key)

        distance = bag.get("distance")
        records.append(Record(
            index=i,
            timestamp_seconds=ts,
            elapsed_seconds=(ts - start) if start is not None and not math.isnan(ts) else math.nan,
            distance_km=float(distance) if is_numeric(distance) else None,
            fields=fields,
            timestamp=timestamp_text(bag.get("timestamp")),
        ))

    if invalid:
        logger.info("%s: %d record(s) with unparseable timestamps", filename or "activity", invalid)

    return ActivitySnapshot(
        filename=filename,
        records=tuple(records),
        gps=tuple(gps),
        bounds=bounds,
        fields=tuple(sorted(catalog)),
        laps=tuple(_sequence(raw, "laps") or ()),
        sessions=tuple(_sequence(raw, "sessions") or ()),
        start_seconds=start,
        end_seconds=end,
        invalid_timestamps=invalid,
    )
