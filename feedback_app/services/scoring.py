from __future__ import annotations

import json
import math
import re
from numbers import Number
from typing import Any, Optional, Union

from feedback_app.models import LECTURE_TYPE_LECTURE, LECTURE_TYPE_LAB, LECTURE_BATCH_MARKER

Score = Union[int, float]

# digits with an optional fraction and exponent; no underscores, no inf/nan words
_PLAIN_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

# Policy constants, not configuration
LOW_RATING_THRESHOLD = 3
SIGNIFICANT_LOW_COUNT = 5
MAX_SEMESTERS = 8

LECTURE_TYPE_LABELS = {
    LECTURE_TYPE_LECTURE: "Lecture",
    LECTURE_TYPE_LAB: "Laboratory",
}


def _as_number(value: Any) -> Optional[Score]:
    # bool is an int subclass; a checkbox answer is not a rating
    if isinstance(value, bool) or not isinstance(value, Number):
        return None
    try:
        if not math.isfinite(value):
            return None
    except TypeError:
        return None
    return value


def parse_score(raw: Any) -> Optional[Score]:
    """
    Extract a numeric rating from whatever shape was stored.

    Accepted encodings, in order:
      - a string holding a plain number ("4", "4.5")
      - a JSON string holding a number or an object with a numeric "score"
      - a dict with a numeric "score"
      - a bare number
    Everything else (booleans, text answers, NaN) yields None. Never raises.
    """
    if isinstance(raw, str):
        s = raw.strip()
        if _PLAIN_NUMBER.fullmatch(s):
            return _as_number(float(s))
        try:
            decoded = json.loads(s)
        except ValueError:
            return None
        if isinstance(decoded, dict):
            return _as_number(decoded.get("score"))
        return _as_number(decoded)

    if isinstance(raw, dict):
        return _as_number(raw.get("score"))

    return _as_number(raw)


def classify_lecture_type(category_name: Optional[str], batch: Optional[str]) -> str:
    """
    LAB when the question category names a lab, or when the question carries a
    real batch (anything but the "None" marker); LECTURE otherwise.
    """
    name = (category_name or "").lower()
    if "lab" in name:  # covers "laboratory"
        return LECTURE_TYPE_LAB
    b = (batch or "").strip()
    if b and b.lower() != LECTURE_BATCH_MARKER.lower():
        return LECTURE_TYPE_LAB
    return LECTURE_TYPE_LECTURE


def normalize_lecture_type(value: Optional[str]) -> str:
    """Allocation lecture types: anything lab-like is LAB, missing means LECTURE."""
    v = (value or "").strip().upper()
    if v in (LECTURE_TYPE_LAB, "LABORATORY"):
        return LECTURE_TYPE_LAB
    return LECTURE_TYPE_LECTURE
