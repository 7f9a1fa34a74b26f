"""Error taxonomy for listing queries.

Every error carries a stable machine-readable ``kind`` plus a
human-readable ``detail``.  The API layer maps error classes to
transport status codes; the domain never does.
"""

from __future__ import annotations


class ListingError(Exception):
    """Base exception for the listing query engine."""

    default_kind = "ListingError"

    def __init__(self, detail: str, *, kind: str | None = None) -> None:
        super().__init__(detail)
        self.kind = kind or self.default_kind
        self.detail = detail

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, detail={self.detail!r})"


class ValidationError(ListingError):
    """Caller input is malformed.  Raised before any storage call."""

    default_kind = "ValidationError"


class AuthorizationError(ListingError):
    """The scope for a listing cannot be computed for this caller."""

    default_kind = "Forbidden"


class StorageError(ListingError):
    """The storage collaborator failed (timeout, connection loss, ...)."""

    default_kind = "StorageFailure"


# ---------------------------------------------------------------------------
# Error kinds
# ---------------------------------------------------------------------------

UNKNOWN_FIELD = "UnknownField"
INVALID_OPERATOR = "InvalidOperator"
INVALID_RANGE = "InvalidRange"
MISSING_BOUND = "MissingBound"
INVALID_VALUE = "InvalidValue"
INVALID_LIMIT = "InvalidLimit"
INVALID_OFFSET = "InvalidOffset"
DUPLICATE_SORT_FIELD = "DuplicateSortField"
MISSING_IDENTITY = "MissingIdentity"
FORBIDDEN = "Forbidden"
STORAGE_FAILURE = "StorageFailure"


__all__ = [
    "ListingError",
    "ValidationError",
    "AuthorizationError",
    "StorageError",
    "UNKNOWN_FIELD",
    "INVALID_OPERATOR",
    "INVALID_RANGE",
    "MISSING_BOUND",
    "INVALID_VALUE",
    "INVALID_LIMIT",
    "INVALID_OFFSET",
    "DUPLICATE_SORT_FIELD",
    "MISSING_IDENTITY",
    "FORBIDDEN",
    "STORAGE_FAILURE",
]
