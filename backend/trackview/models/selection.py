from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SelectionKind(str, Enum):
    full = "full"
    range = "range"


@dataclass(frozen=True)
class Selection:
    """Current time-range selection.

    FULL means "no filtering has happened". It is not the same as a RANGE
    that happens to cover every record: detail tables are only shown for
    RANGE.
    """
    kind: SelectionKind = SelectionKind.full
    start: Optional[float] = None
    end: Optional[float] = None

    @classmethod
    def full(cls) -> "Selection":
        return cls()

    @classmethod
    def between(cls, start: float, end: float) -> "Selection":
        return cls(kind=SelectionKind.range, start=float(start), end=float(end))

    @property
    def is_full(self) -> bool:
        return self.kind is SelectionKind.full

    def contains(self, ts: float) -> bool:
        if self.is_full:
            return True
        # NaN compares False both ways
        return self.start <= ts <= self.end


FULL = Selection.full()


@dataclass(frozen=True)
class HoverEvent:
    """Chart cursor moved onto record `index`."""
    index: int


@dataclass(frozen=True)
class RangeSelectEvent:
    """Chart drag ended. A None bound (double-click) means reset."""
    start: Optional[float] = None
    end: Optional[float] = None

    @property
    def is_reset(self) -> bool:
        return self.start is None or self.end is None
