import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.concurrency import run_in_threadpool

from trackview.core.config import settings
from trackview.core.decoder import decode_activity, source_for
from trackview.core.errors import DecodeError, InvalidRangeError, SessionNotFoundError
from trackview.core.normalize import normalize
from trackview.core.sync import (
    build_view,
    chart_payload,
    dispatch,
    explorer_page,
    full_trace,
    lap_rows,
    selection_read,
)
from trackview.core.time_utils import format_duration
from trackview.models.selection import HoverEvent, RangeSelectEvent
from trackview.models.snapshot import ActivitySnapshot
from trackview.schemas.session import SessionList, SessionRead, TrackRead
from trackview.schemas.view import (
    Bounds,
    ChartPayload,
    CursorPayload,
    ExplorerPage,
    LapRow,
    RangeSelect,
    SelectionResult,
    ViewPayload,
)
from trackview.store import ActivitySession, SessionStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _load(data: bytes, filename: str) -> ActivitySnapshot:
    return normalize(decode_activity(data, filename), filename)


def _session_or_404(store: SessionStore, filename: str) -> ActivitySession:
    try:
        return store.get(filename)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _session_read(store: SessionStore, session: ActivitySession) -> SessionRead:
    snap = session.snapshot
    duration = 0.0
    if snap.start_seconds is not None and snap.end_seconds is not None:
        duration = snap.end_seconds - snap.start_seconds
    return SessionRead(
        filename=snap.filename,
        source=session.source,
        active=store.active == snap.filename,
        record_count=len(snap.records),
        gps_count=len(snap.gps),
        fields=list(snap.fields),
        bounds=Bounds(**snap.bounds.to_dict()) if snap.bounds else None,
        start_seconds=snap.start_seconds,
        end_seconds=snap.end_seconds,
        duration=format_duration(duration),
        lap_count=len(snap.laps),
        session_count=len(snap.sessions),
        invalid_timestamps=snap.invalid_timestamps,
        selection=selection_read(session.selection.current),
    )


@router.post("/", response_model=list[SessionRead])
async def upload_sessions(
    files: list[UploadFile] = File(...),
    store: SessionStore = Depends(get_store),
):
    """Decode and load one or more activity files.

    Every file is decoded before anything is installed: one bad file fails
    the whole upload and the previously loaded sessions stay in place.
    """
    max_bytes = settings.max_upload_mb * 1024 * 1024
    loaded = []
    seen = set()
    for file in files:
        filename = file.filename or "upload.fit"
        source = source_for(filename)
        if source is None:
            raise HTTPException(status_code=400, detail="Only .fit or .gpx files are supported")
        if filename in seen:
            raise HTTPException(status_code=400, detail=f"Duplicate filename in upload: {filename}")
        seen.add(filename)

        # size is known up front for spooled multipart parts
        if file.size is not None and file.size > max_bytes:
            raise HTTPException(status_code=413, detail=f"{filename} exceeds {settings.max_upload_mb} MB")
        data = await file.read()
        if len(data) > max_bytes:
            raise HTTPException(status_code=413, detail=f"{filename} exceeds {settings.max_upload_mb} MB")

        try:
            snapshot = await run_in_threadpool(_load, data, filename)
        except DecodeError as e:
            logger.warning("Failed to load %s: %s", filename, e)
            raise HTTPException(status_code=400, detail=f"Invalid file: {e}")
        loaded.append((snapshot, source))

    sessions = store.replace(loaded)
    return [_session_read(store, s) for s in sessions]


@router.get("/", response_model=SessionList)
async def list_sessions(store: SessionStore = Depends(get_store)):
    return SessionList(active=store.active, sessions=store.names())


@router.get("/{filename}", response_model=SessionRead)
async def get_session(filename: str, store: SessionStore = Depends(get_store)):
    return _session_read(store, _session_or_404(store, filename))


@router.post("/{filename}/activate", response_model=SessionRead)
async def activate_session(filename: str, store: SessionStore = Depends(get_store)):
    """Switch the active file. Its selection is kept as it was."""
    _session_or_404(store, filename)
    session = store.activate(filename)
    return _session_read(store, session)


@router.get("/{filename}/track", response_model=TrackRead)
async def get_track(filename: str, store: SessionStore = Depends(get_store)):
    snap = _session_or_404(store, filename).snapshot
    return TrackRead(map=full_trace(snap), points_count=len(snap.gps))


@router.get("/{filename}/chart", response_model=ChartPayload)
async def get_chart(filename: str, store: SessionStore = Depends(get_store)):
    return chart_payload(_session_or_404(store, filename).snapshot)


@router.get("/{filename}/laps", response_model=list[LapRow])
async def get_laps(filename: str, store: SessionStore = Depends(get_store)):
    return lap_rows(_session_or_404(store, filename).snapshot)


@router.get("/{filename}/records", response_model=ExplorerPage)
async def get_records(
    filename: str,
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1),
    store: SessionStore = Depends(get_store),
):
    return explorer_page(_session_or_404(store, filename).snapshot, page, page_size)


@router.get("/{filename}/view", response_model=ViewPayload)
async def get_view(filename: str, store: SessionStore = Depends(get_store)):
    session = _session_or_404(store, filename)
    return build_view(session.snapshot, session.selection.current)


@router.post("/{filename}/selection", response_model=SelectionResult)
async def select_range(
    filename: str,
    payload: RangeSelect,
    store: SessionStore = Depends(get_store),
):
    """Apply a chart drag. A null start or end resets to the full range."""
    session = _session_or_404(store, filename)
    try:
        return dispatch(session.selection, RangeSelectEvent(start=payload.start, end=payload.end))
    except InvalidRangeError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.delete("/{filename}/selection", response_model=SelectionResult)
async def reset_selection(filename: str, store: SessionStore = Depends(get_store)):
    session = _session_or_404(store, filename)
    return dispatch(session.selection, RangeSelectEvent())


@router.get("/{filename}/hover/{index}", response_model=CursorPayload)
async def hover(filename: str, index: int, store: SessionStore = Depends(get_store)):
    session = _session_or_404(store, filename)
    return dispatch(session.selection, HoverEvent(index=index))
