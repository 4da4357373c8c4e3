import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

def new_uuid() -> str:
    return str(uuid.uuid4())

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat those as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

def round2(value: Any) -> float:
    try:
        return round(float(value), 2)
    except (TypeError, ValueError):
        return 0.0

def safe_int(value: Any, default: int = 0) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return int(default)

def mean_or_none(values: Iterable[float]) -> Optional[float]:
    """Rounded arithmetic mean; None for an empty input (no data is not zero)."""
    vals = list(values)
    if not vals:
        return None
    return round2(sum(vals) / len(vals))

def mean_or_zero(values: Iterable[float]) -> float:
    avg = mean_or_none(values)
    return 0.0 if avg is None else avg

def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
