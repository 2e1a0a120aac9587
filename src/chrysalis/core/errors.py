"""Typed failures raised by the Chrysalis core.

Every failure carries a stable ``kind`` so API consumers can branch on it
instead of matching message text. ``message`` is the human-readable detail
and ``payload`` holds structured context (ids, field names).
"""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, ClassVar


class ChrysalisError(Exception):
    """Base class for all Chrysalis failures."""

    kind: ClassVar[str] = "error"
    status_code: ClassVar[int] = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, **payload: Any) -> None:
        super().__init__(message)
        self.message = message
        self.payload = payload

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready representation used in API responses."""
        return {"kind": self.kind, "message": self.message, **self.payload}


class Unauthenticated(ChrysalisError):
    """Raised when an operation requires a caller but none is present."""

    kind = "unauthenticated"
    status_code = HTTPStatus.UNAUTHORIZED


class AlreadyAuthenticated(ChrysalisError):
    """Raised when an anonymous-only operation is attempted by a known caller."""

    kind = "already_authenticated"
    status_code = HTTPStatus.CONFLICT


class ValidationError(ChrysalisError):
    """Raised for malformed input such as a bad email or username."""

    kind = "validation_error"
    status_code = HTTPStatus.UNPROCESSABLE_ENTITY


class DuplicateResource(ChrysalisError):
    """Raised when a unique user, email, or category already exists."""

    kind = "duplicate_resource"
    status_code = HTTPStatus.CONFLICT


class NotFound(ChrysalisError):
    """Raised when a referenced row does not exist."""

    kind = "not_found"
    status_code = HTTPStatus.NOT_FOUND


class CategoryNotFound(NotFound):
    kind = "category_not_found"

    def __init__(self, category_id: int) -> None:
        super().__init__(
            "Category does not exist",
            resource="category",
            category_id=category_id,
        )


class SubmissionNotFound(NotFound):
    kind = "submission_not_found"

    def __init__(self, submission_id: int) -> None:
        super().__init__(
            "Submission does not exist",
            resource="submission",
            submission_id=submission_id,
        )


class MetadataFetchError(ChrysalisError):
    """Raised when page metadata for a new URL cannot be fetched.

    Not retried automatically; the submission that triggered the fetch is
    aborted without writing anything.
    """

    kind = "metadata_fetch_error"
    status_code = HTTPStatus.BAD_GATEWAY


class ConfigurationError(ChrysalisError):
    """Raised when the stage table fails to classify a vote count.

    Fatal and never expected in a correctly configured deployment.
    """

    kind = "configuration_error"
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
