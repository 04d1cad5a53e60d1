import logging
import math
from typing import Sequence

from trackview.core.errors import InvalidRangeError
from trackview.models.record import Record
from trackview.models.selection import FULL, Selection
from trackview.models.snapshot import ActivitySnapshot

logger = logging.getLogger(__name__)


def select_subset(records: Sequence[Record], selection: Selection) -> list[Record]:
    """Records covered by a selection.

    FULL -> every record (including ones with an invalid time).
    RANGE -> records with start <= timestamp_seconds <= end.
    """
    if selection.is_full:
        return list(records)
    return [r for r in records if selection.contains(r.timestamp_seconds)]


def _check_bound(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidRangeError(f"{name} must be a finite number")
    return float(value)


class SelectionState:
    """Owns the current selection for one snapshot.

    Two states only: FULL (initial) and RANGE(start, end). Transitions are
    synchronous; a range that would select nothing is ignored.
    """

    def __init__(self, snapshot: ActivitySnapshot):
        self._snapshot = snapshot
        self._selection = FULL

    @property
    def current(self) -> Selection:
        return self._selection

    @property
    def snapshot(self) -> ActivitySnapshot:
        return self._snapshot

    def select_range(self, start: float, end: float) -> bool:
        """Move to RANGE(start, end).

        Returns False (state unchanged) when no record falls in the range.
        Raises InvalidRangeError for non-finite bounds or start > end.
        """
        start = _check_bound("start", start)
        end = _check_bound("end", end)
        if start > end:
            raise InvalidRangeError("start must be <= end")

        candidate = Selection.between(start, end)
        if not any(candidate.contains(r.timestamp_seconds) for r in self._snapshot.records):
            logger.debug("Ignoring empty selection [%s, %s]", start, end)
            return False
        self._selection = candidate
        logger.debug("Selection -> [%s, %s]", start, end)
        return True

    def reset(self) -> None:
        self._selection = FULL

    def subset(self) -> list[Record]:
        return select_subset(self._snapshot.records, self._selection)
