import math
import re
from datetime import date, datetime, timezone

_FRACTION = re.compile(r"\.(\d+)")


def _six_digit_fraction(match: re.Match) -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def parse_iso(ts: str) -> datetime | None:
    """Parse an ISO-8601 string into a datetime.

    Accepts a trailing 'Z' for UTC and fractional seconds of any length
    (padded or truncated to microseconds). Returns None for empty or
    malformed input.
    """
    if not ts:
        return None
    text = _FRACTION.sub(_six_digit_fraction, ts.strip().replace("Z", "+00:00"), count=1)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def to_epoch_seconds(value) -> float:
    """Canonicalize a raw timestamp to float seconds since epoch.

    Accepts:
      - datetime (naive values are treated as UTC, which is how decoders
        hand back device time)
      - date (midnight UTC)
      - ISO-8601 string

    Returns NaN when the value cannot be interpreted. NaN never satisfies
    a >= / <= comparison, so such rows drop out of every range filter.
    """
    dt = None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        dt = parse_iso(value)
    if dt is None:
        return math.nan
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def timestamp_text(value) -> str | None:
    """ISO text of a raw timestamp for display; None if there is none."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, str):
        return value
    return None


def is_valid_seconds(ts) -> bool:
    return isinstance(ts, (int, float)) and not isinstance(ts, bool) and math.isfinite(ts)


def format_duration(seconds) -> str:
    """
    Format seconds as 'M:SS' (minutes are not wrapped into hours).
    Example: 2732 -> '45:32'. Returns '-' for zero/absent values.
    """
    if not seconds or not is_valid_seconds(seconds):
        return "-"
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes}:{secs:02d}"


def to_local_datetime(dt, tz_name: str | None = None):
    """Convert a datetime from source tz (assume UTC if naive) to local or given tz.

    - If `tz_name` is 'local' or None: use system local timezone.
    - If `tz_name` is IANA tz name (e.g., 'America/New_York'): use that.
    - If `dt` has no tzinfo, assume UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    if tz_name and tz_name != "local":
        from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
        try:
            return dt.astimezone(ZoneInfo(tz_name))
        except (ZoneInfoNotFoundError, ValueError):
            return dt.astimezone()
    return dt.astimezone()


def format_clock(ts_seconds, tz_name: str | None = None) -> str | None:
    """Wall-clock 'HH:MM:SS' for an epoch timestamp. None for invalid input."""
    if not is_valid_seconds(ts_seconds):
        return None
    dt = datetime.fromtimestamp(ts_seconds, tz=timezone.utc)
    return to_local_datetime(dt, tz_name).strftime("%H:%M:%S")
