"""Decoder adapter: raw upload bytes -> RawStructure.

The binary/XML parsing itself is done by fitparse (FIT) and gpxpy (GPX).
This module only picks the decoder, converts units to the ones the rest of
the app works in (degrees, km, km/h), and turns decoder failures into
DecodeError.
"""
import io
import logging
import math
import os
from datetime import datetime
from typing import Any

import gpxpy
import gpxpy.gpx
from fitparse import FitFile

from trackview.core.config import settings
from trackview.core.constants import KM_M, MPS_TO_KMH, SEMICIRCLES_TO_DEG, SUPPORTED_EXTENSIONS
from trackview.core.errors import DecodeError
from trackview.models.snapshot import RawStructure

logger = logging.getLogger(__name__)

# GPX TrackPointExtension tags -> record attribute names
GPX_EXTENSION_FIELDS = {
    "hr": "heart_rate",
    "cad": "cadence",
    "atemp": "temperature",
    "power": "power",
}


def source_for(filename: str) -> str | None:
    """Decoder name for a filename ("fit"/"gpx"), None if unsupported."""
    ext = os.path.splitext(filename or "")[1].lower()
    return SUPPORTED_EXTENSIONS.get(ext)


def decode_activity(data: bytes, filename: str) -> RawStructure:
    """Decode one uploaded file. Raises DecodeError on malformed input."""
    source = source_for(filename)
    if source is None:
        raise DecodeError(f"Unsupported file type: {filename}")
    if not data:
        raise DecodeError("File is empty")
    if source == "gpx":
        raw = _decode_gpx(data)
    else:
        raw = _decode_fit(data)
    logger.debug(
        "Decoded %s (%s): %d records, %d laps",
        filename, source, len(raw.records or []), len(raw.laps),
    )
    return raw


# --------- FIT --------- #

def _semicircles_to_degrees(val):
    return val * SEMICIRCLES_TO_DEG if val is not None else None


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _plain(value):
    """Make decoder values JSON/CSV friendly."""
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, bytes):
        return value.hex()
    return value


def _fit_bag(message) -> dict[str, Any]:
    """Attribute bag for one FIT message with units converted."""
    bag = {}
    for f in message:
        name = f.name
        if not name or name.startswith("unknown_"):
            continue
        value = f.value
        units = getattr(f, "units", None)
        if _is_number(value):
            if units == "semicircles" or name.endswith(("position_lat", "position_long")):
                value = _semicircles_to_degrees(value)
            elif "distance" in name and units == "m":
                value = value / KM_M
            elif units == "m/s":
                value = value * MPS_TO_KMH
        bag[name] = _plain(value)
    return bag


def _decode_fit(data: bytes) -> RawStructure:
    try:
        ff = FitFile(io.BytesIO(data), check_crc=settings.fit_check_crc)
        records = [_fit_bag(m) for m in ff.get_messages("record")]
        laps = [_fit_bag(m) for m in ff.get_messages("lap")]
        sessions = [_fit_bag(m) for m in ff.get_messages("session")]
    except Exception as e:
        raise DecodeError(str(e) or e.__class__.__name__) from e
    return RawStructure(records=records, laps=laps, sessions=sessions, source="fit")


# --------- GPX --------- #

def _haversine(lat1, lon1, lat2, lon2):
    """Return great‑circle distance in meters between two WGS84 points.

    Uses the standard haversine formula; sufficient for per‑point distances
    over a typical GPS activity track.
    """
    R = 6371000.0
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return R * c


def _extension_values(point) -> dict[str, float]:
    values = {}
    for ext in point.extensions or []:
        for el in ext.iter():
            tag = str(el.tag).rsplit("}", 1)[-1].lower()
            name = GPX_EXTENSION_FIELDS.get(tag)
            if name is None or not el.text:
                continue
            try:
                values[name] = float(el.text)
            except ValueError:
                continue
    return values


def _decode_gpx(data: bytes) -> RawStructure:
    try:
        text = data.decode("utf-8-sig")
        gpx = gpxpy.parse(io.StringIO(text))
    except (UnicodeDecodeError, gpxpy.gpx.GPXException) as e:
        raise DecodeError(str(e)) from e

    records = []
    laps = []
    total_m = 0.0
    last = None

    for track in gpx.tracks:
        track_start: datetime | None = None
        track_end: datetime | None = None
        track_m = 0.0
        for segment in track.segments:
            # distance does not bridge segment gaps
            last = None
            for p in segment.points:
                if last is not None:
                    d = _haversine(last[0], last[1], p.latitude, p.longitude)
                    total_m += d
                    track_m += d
                last = (p.latitude, p.longitude)
                rec = {
                    "timestamp": p.time,
                    "position_lat": p.latitude,
                    "position_long": p.longitude,
                    "distance": total_m / KM_M,
                }
                if p.elevation is not None:
                    rec["altitude"] = float(p.elevation)
                rec.update(_extension_values(p))
                records.append(rec)
                if p.time:
                    track_start = track_start or p.time
                    track_end = p.time

        laps.append({
            "start_time": track_start,
            "total_elapsed_time": (
                (track_end - track_start).total_seconds() if track_start and track_end else None
            ),
            "total_distance": track_m / KM_M,
        })

    return RawStructure(records=records, laps=laps, sessions=[], source="gpx")
