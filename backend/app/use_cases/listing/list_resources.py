"""ListResourcesUseCase: one scoped, filtered and paginated listing.

This use case owns the order of operations for every listing request:
  1. Derive the mandatory scope from the calling context and identity
     (raise AuthorizationError if the caller may not list)
  2. Build an immutable FilterSet from the sparse filter input
     (raise ValidationError before any storage call)
  3. Compile the FilterSet under the scope into one predicate tree
  4. Execute it through the store and return a Page

The use case depends ONLY on domain ports, never on SQLAlchemy,
FastAPI, or any other infrastructure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from app.domain.common.query import PageSpec, SortKey
from app.domain.common.uow import UnitOfWork
from app.domain.listing.compiler import PredicateCompiler
from app.domain.listing.executor import PagedQueryExecutor
from app.domain.listing.filter_builder import build_filter_set
from app.domain.listing.models import Page, ResourceKind, ScopeContext
from app.domain.listing.ports import ListingStore
from app.domain.listing.scope import Clock, ScopeGuard

logger = logging.getLogger(__name__)

SortInput = Sequence[str | tuple[str, str] | SortKey]


# ── Limits ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ListingLimits:
    """Paging defaults; the wiring layer fills these from settings."""

    default_limit: int = 20
    max_limit: int = 100
    default_sort: str = "-created_at"

    @classmethod
    def from_settings(cls, settings: Any) -> ListingLimits:
        return cls(
            default_limit=settings.listing_default_limit,
            max_limit=settings.listing_max_limit,
            default_sort=settings.listing_default_sort,
        )


# ── Entry point ──────────────────────────────────────────────────────────


def compile_and_execute(
    raw_filter_input: Any,
    scope_context: ScopeContext,
    pagination: PageSpec | None,
    *,
    resource: ResourceKind,
    store: ListingStore,
    sort: SortInput | None = None,
    limits: ListingLimits | None = None,
    clock: Clock | None = None,
) -> Page:
    """Run one listing request end to end.

    *raw_filter_input* is either a mapping of the supplied inputs or an
    input model exposing ``supplied()`` (see ``app.schemas.listing``).

    Raises:
        AuthorizationError: the scope cannot be established.
        ValidationError: the input, sort or page window is malformed.
        StorageError: the store failed.
    """
    limits = limits or ListingLimits()
    scope = ScopeGuard(clock=clock).constrain(resource, scope_context)

    filters = build_filter_set(
        resource,
        _supplied(raw_filter_input),
        sort=sort or [limits.default_sort],
        page=pagination or PageSpec(limit=limits.default_limit),
        now=clock,
    )
    compiled = PredicateCompiler.for_resource(resource).compile(filters, scope)
    return PagedQueryExecutor(store, max_limit=limits.max_limit).execute(compiled)


def _supplied(raw: Any) -> Mapping[str, Any]:
    if raw is None:
        return {}
    if hasattr(raw, "supplied"):
        return raw.supplied()
    return raw


# ── Query (input) ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class ListResourcesQuery:
    """Immutable value object describing what the caller wants to list."""

    resource: ResourceKind
    scope_context: ScopeContext
    filters: Mapping[str, Any] = field(default_factory=dict)
    sort: tuple[str, ...] | None = None
    page: PageSpec | None = None


# ── Result (output) ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class ListResourcesResult:
    """What the use case returns to the caller."""

    page: Page


# ── Use Case ────────────────────────────────────────────────────────────


class ListResourcesUseCase:
    """List jobs or applications through the unit of work's store."""

    def __init__(
        self, limits: ListingLimits | None = None, clock: Clock | None = None
    ) -> None:
        self._limits = limits or ListingLimits()
        self._clock = clock

    def execute(self, uow: UnitOfWork, query: ListResourcesQuery) -> ListResourcesResult:
        with uow:
            page = compile_and_execute(
                query.filters,
                query.scope_context,
                query.page,
                resource=query.resource,
                store=uow.listings,
                sort=query.sort,
                limits=self._limits,
                clock=self._clock,
            )
        logger.debug(
            "Listed %d of %d %s (%s)",
            len(page.items),
            page.total_count,
            query.resource.value,
            query.scope_context.context.value,
        )
        return ListResourcesResult(page=page)


__all__ = [
    "ListingLimits",
    "compile_and_execute",
    "ListResourcesQuery",
    "ListResourcesResult",
    "ListResourcesUseCase",
]
