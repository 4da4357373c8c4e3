import re
import uuid
from typing import Any, List

from feedback_app.errors import InvalidInputError

_TOKEN_RE = re.compile(r"^\S{1,255}$")

def clean_str(val: str | None, max_len: int = 255) -> str | None:
    """
    Collapse whitespace, trim, enforce max length. Returns None if empty after cleaning.
    """
    if val is None:
        return None
    s = re.sub(r"\s+", " ", val).strip()
    if not s:
        return None
    return s[:max_len]

def is_valid_uuid(val: Any) -> bool:
    if not isinstance(val, str):
        return False
    try:
        uuid.UUID(val)
    except ValueError:
        return False
    return True

def require_uuid(val: Any, field: str) -> str:
    if not is_valid_uuid(val):
        raise InvalidInputError(f"Invalid {field} format. Must be a UUID.")
    return val

def optional_uuid(val: Any, field: str) -> str | None:
    val = clean_str(val) if isinstance(val, str) else val
    if val is None:
        return None
    return require_uuid(val, field)

def is_valid_token(val: str | None) -> bool:
    return bool(val) and bool(_TOKEN_RE.match(val))

def validate_answers_payload(payload: Any) -> List[str]:
    """
    Body for a submission: a JSON object keyed by question UUID, at least one entry.
    Values are free-form JSON.
    """
    if not isinstance(payload, dict):
        return ["Responses must be an object where keys are question IDs and values are responses."]
    if not payload:
        return ["At least one response is required for submission."]
    bad = [k for k in payload if not is_valid_uuid(k)]
    if bad:
        return [f"Invalid question ID format in response body. Must be a UUID: {k}" for k in bad]
    return []
