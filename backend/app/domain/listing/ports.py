"""Ports (abstract interfaces) for the listing domain.

These define WHAT the listing core needs from the outside world without
specifying HOW it's provided.  Concrete implementations live in infra/.

Note: No infrastructure types (Session, Engine) appear here.
Stores receive their session through the UnitOfWork, not through
method parameters.
"""

from __future__ import annotations

import abc
from typing import Any, Sequence

from app.domain.common.predicate import Predicate
from app.domain.common.query import SortSpec

from .models import Identity, ResourceKind


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


class ListingStore(abc.ABC):
    """Execute compiled predicate trees against an entity collection."""

    @abc.abstractmethod
    def fetch_page(
        self,
        resource: ResourceKind,
        predicate: Predicate,
        sort: SortSpec,
        offset: int,
        limit: int,
    ) -> tuple[Sequence[Any], int]:
        """Return ``(rows, total_count)`` for one window of matches.

        Rows must come back in *sort* order, starting at *offset* and
        holding at most *limit* items.  ``total_count`` counts every
        match regardless of the window.

        Raises:
            StorageError: When the underlying store fails.
        """
        ...


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class IdentityProvider(abc.ABC):
    """Supply the caller's identity for ownership checks."""

    @abc.abstractmethod
    def current(self) -> Identity | None:
        """Return the authenticated caller, or None when there is none."""
        ...


__all__ = ["ListingStore", "IdentityProvider"]
