"""
Domain error taxonomy shared by the submission pipeline and the analytics layer.

Every error carries a stable ``kind`` and the HTTP status the blueprints answer
with. Messages are fixed, human-readable strings; storage-engine details never
travel past this layer.
"""
from __future__ import annotations

import logging
from functools import wraps

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class ServiceError(RuntimeError):
    """Base for every error the core raises on purpose."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status(self) -> str:
        return "fail" if 400 <= self.status_code < 500 else "error"

    def to_dict(self) -> dict:
        return {"status": self.status, "error": self.kind, "message": self.message}


class NotFoundError(ServiceError):
    kind = "not_found"
    status_code = 404


class GoneError(ServiceError):
    kind = "gone"
    status_code = 410


class ForbiddenError(ServiceError):
    kind = "forbidden"
    status_code = 403


class ConflictError(ServiceError):
    kind = "conflict"
    status_code = 409


class InvalidInputError(ServiceError):
    kind = "invalid_input"
    status_code = 400


class InternalInconsistencyError(ServiceError):
    kind = "internal_inconsistency"
    status_code = 500


class InternalError(ServiceError):
    kind = "internal"
    status_code = 500


def translate_storage_errors(message: str):
    """
    Re-raise SQLAlchemy failures as InternalError(message).
    Domain errors pass through untouched.
    """
    def deco(fn):
        @wraps(fn)
        def _wrap(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except ServiceError:
                raise
            except SQLAlchemyError as e:
                logger.exception("%s failed", fn.__qualname__)
                raise InternalError(message) from e
        return _wrap
    return deco
