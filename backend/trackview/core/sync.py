"""View synchronization.

Everything here is a pure function of (snapshot, selection): the map,
summary and detail payloads are recomputed from scratch after every
selection change, and the renderers on the other side only ever receive
these payloads.
"""
import math
from typing import Sequence

from trackview.core.config import settings
from trackview.core.constants import MAX_PAGE_SIZE, MISSING_PLACEHOLDER
from trackview.core.normalize import is_numeric
from trackview.core.selection import SelectionState, select_subset
from trackview.core.time_utils import format_clock, format_duration, is_valid_seconds
from trackview.models.record import BoundingRegion, GpsPoint, Record
from trackview.models.selection import HoverEvent, RangeSelectEvent, Selection
from trackview.models.snapshot import ActivitySnapshot
from trackview.schemas.view import (
    Bounds,
    ChartPayload,
    CursorPayload,
    ExplorerPage,
    LapRow,
    MapAction,
    MapPayload,
    SelectionRead,
    SelectionResult,
    SummaryPayload,
    TableColumn,
    TablePayload,
    TrackPoint,
    ViewPayload,
)


FULL_TITLE = "Activity Summary"
RANGE_TITLE = "Selection Summary"

_SHORT_LABELS = {"Cadence": "Cad", "Altitude": "Alt"}


def format_label(name: str, short: bool = False) -> str:
    """'heart_rate' -> 'HR', 'enhanced_speed' -> 'Enhanced Speed'."""
    label = " ".join(w[:1].upper() + w[1:] for w in name.replace("_", " ").split())
    label = label.replace("Heart Rate", "HR")
    if short:
        for long_name, short_name in _SHORT_LABELS.items():
            label = label.replace(long_name, short_name)
    return label


def _finite(value):
    return value if is_valid_seconds(value) else None


def _bounds(region: BoundingRegion | None) -> Bounds | None:
    return Bounds(**region.to_dict()) if region is not None else None


def _track_points(points: Sequence[GpsPoint]) -> list[TrackPoint]:
    return [TrackPoint(**p.to_dict()) for p in points]


def selection_read(selection: Selection) -> SelectionRead:
    return SelectionRead(kind=selection.kind, start=selection.start, end=selection.end)


# --------- Map --------- #

def full_trace(snapshot: ActivitySnapshot) -> MapPayload:
    """Initial map load: the whole trace, fit to the file's bounds."""
    if not snapshot.has_gps:
        return MapPayload(action=MapAction.hidden)
    return MapPayload(
        action=MapAction.reset,
        points=_track_points(snapshot.gps),
        fit_to=_bounds(snapshot.bounds),
    )


def map_payload(snapshot: ActivitySnapshot, selection: Selection) -> MapPayload:
    if not snapshot.has_gps:
        return MapPayload(action=MapAction.hidden)
    if selection.is_full:
        return MapPayload(action=MapAction.reset, fit_to=_bounds(snapshot.bounds))

    segment = [p for p in snapshot.gps if selection.contains(p.timestamp_seconds)]
    if not segment:
        # same rule as the selection itself: nothing matched, change nothing
        return MapPayload(action=MapAction.keep)
    return MapPayload(
        action=MapAction.highlight,
        points=_track_points(segment),
        fit_to=_bounds(BoundingRegion.from_points(segment)),
    )


# --------- Tables --------- #

def summarize(records: Sequence[Record], fields: Sequence[str], full: bool) -> SummaryPayload:
    """Aggregate row for a subset.

    Duration spans the first and last valid timestamps, distance is the
    difference of the end distances (absent counts as 0), and each field is
    averaged over the records where it is present (0 when it never is).
    """
    timed = [r.timestamp_seconds for r in records if r.has_valid_time]
    duration = timed[-1] - timed[0] if timed else 0.0

    distance = 0.0
    if records:
        distance = (records[-1].distance_km or 0.0) - (records[0].distance_km or 0.0)

    averages = {}
    for name in fields:
        values = [r.fields[name] for r in records if name in r.fields]
        averages[name] = sum(values) / len(values) if values else 0.0

    return SummaryPayload(
        title=FULL_TITLE if full else RANGE_TITLE,
        record_count=len(records),
        duration_seconds=duration,
        duration=format_duration(duration),
        distance_km=distance,
        averages=averages,
    )


def summary_payload(snapshot: ActivitySnapshot, selection: Selection) -> SummaryPayload:
    subset = select_subset(snapshot.records, selection)
    return summarize(subset, snapshot.fields, selection.is_full)


def table_columns(fields: Sequence[str]) -> list[TableColumn]:
    columns = [TableColumn(key="time", title="Time"), TableColumn(key="distance", title="Dist")]
    columns += [TableColumn(key=name, title=format_label(name)) for name in fields]
    return columns


def record_row(record: Record, fields: Sequence[str]) -> dict:
    row = {
        "index": record.index,
        "timestamp": record.timestamp,
        "ts": _finite(record.timestamp_seconds),
        "elapsed": _finite(record.elapsed_seconds),
        "time": format_clock(record.timestamp_seconds, settings.timezone),
        "distance": record.distance_km,
    }
    for name in fields:
        row[name] = record.get(name)
    return row


def record_table(records: Sequence[Record], fields: Sequence[str]) -> TablePayload:
    return TablePayload(
        columns=table_columns(fields),
        rows=[record_row(r, fields) for r in records],
        count=len(records),
        placeholder=MISSING_PLACEHOLDER,
    )


def detail_payload(snapshot: ActivitySnapshot, selection: Selection) -> TablePayload | None:
    """Record listing for a ranged selection; None under FULL."""
    if selection.is_full:
        return None
    return record_table(select_subset(snapshot.records, selection), snapshot.fields)


def explorer_page(snapshot: ActivitySnapshot, page: int = 1, page_size: int | None = None) -> ExplorerPage:
    """One page of the full, unfiltered record listing."""
    size = page_size or settings.explorer_page_size
    size = max(1, min(size, MAX_PAGE_SIZE))
    total = len(snapshot.records)
    pages = max(1, math.ceil(total / size))
    page = max(1, min(page, pages))
    chunk = snapshot.records[(page - 1) * size: page * size]
    return ExplorerPage(
        page=page,
        page_size=size,
        total=total,
        pages=pages,
        table=record_table(chunk, snapshot.fields),
    )


def _rounded(value):
    if is_numeric(value) and value:
        return round(value)
    return None


def lap_rows(snapshot: ActivitySnapshot) -> list[LapRow]:
    rows = []
    for n, lap in enumerate(snapshot.laps, start=1):
        dist = lap.get("total_distance")
        rows.append(LapRow(
            number=n,
            time=format_duration(lap.get("total_elapsed_time")),
            distance=f"{dist if is_numeric(dist) else 0:.2f}",
            avg_heart_rate=_rounded(lap.get("avg_heart_rate")),
            avg_power=_rounded(lap.get("avg_power")),
            values=dict(lap),
        ))
    return rows


# --------- Charts / cursor --------- #

def chart_payload(snapshot: ActivitySnapshot) -> ChartPayload:
    return ChartPayload(
        x=[_finite(r.timestamp_seconds) for r in snapshot.records],
        series={name: [r.get(name) for r in snapshot.records] for name in snapshot.fields},
        labels={name: format_label(name, short=True) for name in snapshot.fields},
    )


def cursor_payload(snapshot: ActivitySnapshot, index: int) -> CursorPayload:
    """Marker position for a hovered record; hidden when it has no GPS fix."""
    point = snapshot.gps_by_index(index)
    if point is None:
        return CursorPayload(index=index, visible=False)
    return CursorPayload(index=index, visible=True, point=TrackPoint(**point.to_dict()))


# --------- Composition --------- #

def build_view(snapshot: ActivitySnapshot, selection: Selection) -> ViewPayload:
    return ViewPayload(
        selection=selection_read(selection),
        map=map_payload(snapshot, selection),
        summary=summary_payload(snapshot, selection),
        detail=detail_payload(snapshot, selection),
    )


def dispatch(state: SelectionState, event):
    """Apply a chart event to a selection state and return what the views need.

    RangeSelectEvent -> SelectionResult (reset when either bound is None).
    HoverEvent -> CursorPayload.
    """
    if isinstance(event, HoverEvent):
        return cursor_payload(state.snapshot, event.index)
    if isinstance(event, RangeSelectEvent):
        if event.is_reset:
            state.reset()
            applied = True
        else:
            applied = state.select_range(event.start, event.end)
        return SelectionResult(applied=applied, view=build_view(state.snapshot, state.current))
    raise TypeError(f"Unsupported event: {event!r}")
