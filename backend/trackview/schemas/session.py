from typing import Optional

from pydantic import BaseModel

from trackview.schemas.view import Bounds, MapPayload, SelectionRead


class SessionRead(BaseModel):
    """Snapshot overview returned after upload and by GET /sessions/{filename}."""

    filename: str
    source: str
    active: bool
    record_count: int
    gps_count: int
    fields: list[str]
    bounds: Optional[Bounds] = None
    start_seconds: Optional[float] = None
    end_seconds: Optional[float] = None
    duration: str  # 'M:SS'
    lap_count: int
    session_count: int
    invalid_timestamps: int
    selection: SelectionRead


class SessionList(BaseModel):
    active: Optional[str] = None
    sessions: list[str]


class TrackRead(BaseModel):
    """Full trace for the initial map draw."""

    map: MapPayload
    points_count: int
