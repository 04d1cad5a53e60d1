"""CSV/zip export of loaded sessions.

Pure serialization: one folder per file holding records.csv, laps.csv and
sessions.csv.
"""
import csv
import io
import math
import zipfile
from datetime import date, datetime
from typing import Any, Iterable, Mapping

from trackview.models.snapshot import ActivitySnapshot

EXPORT_FILENAME = "fit_export.zip"


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, float) and not math.isfinite(value):
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def to_csv(rows: Iterable[Mapping[str, Any]]) -> str:
    """CSV text for attribute bags. Columns are the union of keys in first-seen order."""
    rows = list(rows)
    if not rows:
        return ""
    headers: list[str] = []
    for row in rows:
        for key in row:
            if key not in headers:
                headers.append(key)
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=headers, lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({h: _cell(row.get(h)) for h in headers})
    return buf.getvalue()


def record_bags(snapshot: ActivitySnapshot) -> list[dict[str, Any]]:
    bags = []
    for r in snapshot.records:
        bag = {
            "index": r.index,
            "timestamp": r.timestamp,
            "ts": r.timestamp_seconds,
            "elapsed": r.elapsed_seconds,
            "distance": r.distance_km,
        }
        bag.update(r.fields)
        bags.append(bag)
    return bags


def build_export_zip(snapshots: Iterable[ActivitySnapshot]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for snapshot in snapshots:
            folder = snapshot.filename or "activity"
            zf.writestr(f"{folder}/records.csv", to_csv(record_bags(snapshot)))
            zf.writestr(f"{folder}/laps.csv", to_csv(snapshot.laps))
            zf.writestr(f"{folder}/sessions.csv", to_csv(snapshot.sessions))
    return buf.getvalue()
