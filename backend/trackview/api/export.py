from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from trackview.core.export import EXPORT_FILENAME, build_export_zip
from trackview.store import SessionStore, get_store

router = APIRouter(prefix="/export", tags=["export"])


@router.get("")
async def export_sessions(store: SessionStore = Depends(get_store)):
    """Zip of records/laps/sessions CSVs for every loaded file."""
    if not len(store):
        raise HTTPException(status_code=404, detail="No sessions loaded")
    content = build_export_zip(s.snapshot for s in store.sessions())
    return Response(
        content=content,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
