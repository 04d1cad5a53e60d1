from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from trackview.models.selection import SelectionKind


class Bounds(BaseModel):
    minLat: float
    maxLat: float
    minLon: float
    maxLon: float


class TrackPoint(BaseModel):
    index: int
    lat: float
    lon: float
    ts: Optional[float] = None


class MapAction(str, Enum):
    hidden = "hidden"        # no GPS in this file
    reset = "reset"          # clear highlight, fit to full bounds
    highlight = "highlight"  # draw highlight through points, fit to them
    keep = "keep"            # leave whatever is drawn


class MapPayload(BaseModel):
    action: MapAction
    points: list[TrackPoint] = []
    fit_to: Optional[Bounds] = None


class SummaryPayload(BaseModel):
    title: str
    record_count: int
    duration_seconds: float
    duration: str            # 'M:SS'
    distance_km: float
    averages: dict[str, float]


class TableColumn(BaseModel):
    key: str
    title: str


class TablePayload(BaseModel):
    columns: list[TableColumn]
    rows: list[dict[str, Any]]
    count: int
    placeholder: str = "-"


class SelectionRead(BaseModel):
    kind: SelectionKind
    start: Optional[float] = None
    end: Optional[float] = None


class ViewPayload(BaseModel):
    selection: SelectionRead
    map: MapPayload
    summary: SummaryPayload
    detail: Optional[TablePayload] = None  # only for a ranged selection


class SelectionResult(BaseModel):
    """Outcome of a range-select/reset. `applied` is False for an empty range."""
    applied: bool
    view: ViewPayload


class RangeSelect(BaseModel):
    """Chart drag bounds in epoch seconds. Null start/end means reset."""
    start: Optional[float] = None
    end: Optional[float] = None


class CursorPayload(BaseModel):
    index: int
    visible: bool
    point: Optional[TrackPoint] = None


class ChartPayload(BaseModel):
    x: list[Optional[float]]
    series: dict[str, list[Optional[float]]]
    labels: dict[str, str]


class LapRow(BaseModel):
    number: int
    time: str
    distance: str
    avg_heart_rate: Optional[int] = None
    avg_power: Optional[int] = None
    values: dict[str, Any] = {}


class ExplorerPage(BaseModel):
    page: int
    page_size: int
    total: int
    pages: int
    table: TablePayload
