import struct
from datetime import datetime, timedelta, timezone

import gpxpy.gpx
import pytest

from trackview.models.snapshot import RawStructure

EPOCH = datetime(1970, 1, 1)
GPX_START = datetime(2024, 5, 4, 7, 30, tzinfo=timezone.utc)

# FIT timestamps count seconds from 1989-12-31T00:00:00Z
FIT_EPOCH = 631065600
FIT_T0 = 1_000_000_000


def make_raw(n: int = 100, gps: bool = True) -> RawStructure:
    """n one-second samples starting at epoch 0.

    heart_rate on every record, power on even indices only, cadence never
    numeric (string) so it stays out of the catalog.
    """
    records = []
    for i in range(n):
        rec = {
            "timestamp": EPOCH + timedelta(seconds=i),
            "heart_rate": 100 + i,
            "distance": i * 0.01,
            "elapsed_time": float(i),
            "cadence": "n/a",
        }
        if i % 2 == 0:
            rec["power"] = 200 + i
        if gps:
            rec["position_lat"] = 45.0 + i * 0.001
            rec["position_long"] = 7.0 - i * 0.001
        records.append(rec)
    laps = [
        {"total_elapsed_time": 50.0, "total_distance": 0.5, "avg_heart_rate": 124.6, "avg_power": 249.4},
        {"total_elapsed_time": 49.0, "total_distance": 0.49, "avg_heart_rate": None},
    ]
    sessions = [{"total_elapsed_time": 99.0, "total_distance": 0.99}]
    return RawStructure(records=records, laps=laps, sessions=sessions, source="fit")


def make_gpx(n: int = 10, step_s: int = 10) -> bytes:
    gpx = gpxpy.gpx.GPX()
    track = gpxpy.gpx.GPXTrack()
    gpx.tracks.append(track)
    segment = gpxpy.gpx.GPXTrackSegment()
    track.segments.append(segment)
    for i in range(n):
        segment.points.append(gpxpy.gpx.GPXTrackPoint(
            latitude=45.0 + i * 0.001,
            longitude=7.0,
            elevation=200.0 + i,
            time=GPX_START + timedelta(seconds=i * step_s),
        ))
    return gpx.to_xml().encode("utf-8")


def make_gpx_tracks(*tracks) -> bytes:
    """GPX from nested point lists: tracks -> segments -> (lat, seconds)."""
    gpx = gpxpy.gpx.GPX()
    for segments in tracks:
        track = gpxpy.gpx.GPXTrack()
        gpx.tracks.append(track)
        for points in segments:
            segment = gpxpy.gpx.GPXTrackSegment()
            track.segments.append(segment)
            for lat, seconds in points:
                segment.points.append(gpxpy.gpx.GPXTrackPoint(
                    latitude=lat,
                    longitude=7.0,
                    time=GPX_START + timedelta(seconds=seconds),
                ))
    return gpx.to_xml().encode("utf-8")


# --------- FIT --------- #

_CRC_TABLE = (
    0x0000, 0xCC01, 0xD801, 0x1400, 0xF001, 0x3C00, 0x2800, 0xE401,
    0xA001, 0x6C00, 0x7800, 0xB401, 0x5000, 0x9C01, 0x8801, 0x4400,
)

UINT8, UINT16, SINT32, UINT32 = 0x02, 0x84, 0x85, 0x86


def _fit_crc(data: bytes) -> int:
    crc = 0
    for byte in data:
        for nibble in (byte & 0xF, byte >> 4):
            tmp = _CRC_TABLE[crc & 0xF]
            crc = (crc >> 4) & 0x0FFF
            crc = crc ^ tmp ^ _CRC_TABLE[nibble]
    return crc


def _semicircles(deg: float) -> int:
    return int(deg * 2**31 / 180)


def _definition(local: int, global_num: int, fields) -> bytes:
    out = struct.pack("<BBBHB", 0x40 | local, 0, 0, global_num, len(fields))
    for num, size, base_type in fields:
        out += struct.pack("<BBB", num, size, base_type)
    return out


def make_fit(n: int = 3) -> bytes:
    """Minimal FIT activity: n one-second records and a single lap.

    Records step 1 km (distance is m x 100 on the wire), ride at 2.5 m/s
    (mm/s on the wire), sit at 45N 7E and carry one field number the
    profile does not define.
    """
    body = _definition(0, 20, [
        (253, 4, UINT32),  # timestamp
        (0, 4, SINT32),    # position_lat
        (1, 4, SINT32),    # position_long
        (5, 4, UINT32),    # distance
        (6, 2, UINT16),    # speed
        (3, 1, UINT8),     # heart_rate
        (230, 1, UINT8),   # undefined
    ])
    for i in range(n):
        body += struct.pack(
            "<BIiiIHBB",
            0, FIT_T0 + i, _semicircles(45.0), _semicircles(7.0), i * 100000, 2500, 120 + i, 7,
        )
    body += _definition(1, 19, [
        (253, 4, UINT32),  # timestamp
        (2, 4, UINT32),    # start_time
        (3, 4, SINT32),    # start_position_lat
        (7, 4, UINT32),    # total_elapsed_time (ms)
        (9, 4, UINT32),    # total_distance
    ])
    body += struct.pack(
        "<BIIiII",
        1, FIT_T0 + n - 1, FIT_T0, _semicircles(45.0), (n - 1) * 1000, (n - 1) * 100000,
    )

    header = struct.pack("<BBHI4s", 14, 0x10, 2093, len(body), b".FIT")
    header += struct.pack("<H", _fit_crc(header))
    return header + body + struct.pack("<H", _fit_crc(body))


@pytest.fixture
def fit_factory():
    return make_fit


@pytest.fixture
def fit_start_seconds():
    return float(FIT_EPOCH + FIT_T0)


@pytest.fixture
def gpx_tracks_factory():
    return make_gpx_tracks


@pytest.fixture
def raw_factory():
    return make_raw


@pytest.fixture
def gpx_factory():
    return make_gpx


@pytest.fixture
def gpx_start_seconds():
    return GPX_START.timestamp()
