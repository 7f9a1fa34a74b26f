"""Filter, sort, and pagination specifications for listing queries.

These types express query intent in domain terms, independent of
any persistence mechanism.  Adapters translate compiled predicate
trees into SQL WHERE clauses, in-memory predicates, or whatever the
infra layer requires.

Every type here is immutable.  A new filtered view is made with the
``with_*`` helpers, which return a fresh value and never touch the
original.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from .errors import (
    INVALID_LIMIT,
    INVALID_OFFSET,
    INVALID_RANGE,
    INVALID_VALUE,
    ValidationError,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class Operator(str, Enum):
    """Criterion operators."""

    EQ = "eq"
    IN = "in"
    RANGE = "range"
    CONTAINS = "contains"
    GTE = "gte"
    LTE = "lte"
    EXISTS = "exists"


# ---------------------------------------------------------------------------
# Criterion
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Criterion:
    """One optional filter condition on a single field.

    ``values`` is ``None`` when the source field was not supplied; such a
    criterion is inert and never compiled.  RANGE criteria hold exactly
    two values ``(lower, upper)``, either of which may be ``None``.
    """

    field: str
    operator: Operator
    values: tuple[Any, ...] | None = None

    def __post_init__(self) -> None:
        if self.values is not None and not isinstance(self.values, tuple):
            object.__setattr__(self, "values", tuple(self.values))
        if self.operator == Operator.RANGE and self.values is not None:
            self._check_range()

    def _check_range(self) -> None:
        if len(self.values) != 2:
            raise ValidationError(
                f"range on '{self.field}' needs exactly two bounds, got {len(self.values)}",
                kind=INVALID_VALUE,
            )
        lower, upper = self.values
        if lower is None or upper is None:
            return
        try:
            inverted = lower > upper
        except TypeError as exc:
            raise ValidationError(
                f"range bounds on '{self.field}' are not comparable: {lower!r}, {upper!r}",
                kind=INVALID_VALUE,
            ) from exc
        if inverted:
            raise ValidationError(
                f"range on '{self.field}' has min {lower!r} greater than max {upper!r}",
                kind=INVALID_RANGE,
            )

    def is_inert(self) -> bool:
        if self.values is None:
            return True
        if self.operator == Operator.RANGE:
            return all(v is None for v in self.values)
        if self.operator == Operator.CONTAINS:
            return len(self.values) == 0
        return False


# ---------------------------------------------------------------------------
# Sort
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SortKey:
    """One ``(field, direction)`` pair of a sort sequence."""

    field: str
    order: SortOrder = SortOrder.ASC

    @classmethod
    def parse(cls, raw: str | tuple[str, str] | SortKey) -> SortKey:
        """Accept ``"field"``, ``"-field"``, ``"field:desc"`` or a pair."""
        if isinstance(raw, SortKey):
            return raw
        if isinstance(raw, tuple):
            name, direction = raw
            return cls(field=name, order=_parse_order(direction))
        text = raw.strip()
        if text.startswith("-"):
            return cls(field=text[1:], order=SortOrder.DESC)
        if ":" in text:
            name, direction = text.split(":", 1)
            return cls(field=name.strip(), order=_parse_order(direction))
        return cls(field=text, order=SortOrder.ASC)


def _parse_order(raw: str | SortOrder) -> SortOrder:
    try:
        return SortOrder(raw.lower() if isinstance(raw, str) else raw)
    except ValueError as exc:
        raise ValidationError(
            f"sort direction must be 'asc' or 'desc', got {raw!r}",
            kind=INVALID_VALUE,
        ) from exc


@dataclass(frozen=True)
class SortSpec:
    """Ordered sort sequence; the last key is the unique tie-break."""

    keys: tuple[SortKey, ...] = ()

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(k.field for k in self.keys)

    def with_tie_break(self, tie_break: str) -> SortSpec:
        """Return a copy that ends with exactly one *tie_break* key.

        If the tie-break field is already present it stays where the
        caller put it (with the caller's direction) and any keys after it
        are dropped, since a unique key leaves nothing for them to order.
        """
        kept: list[SortKey] = []
        for key in self.keys:
            kept.append(key)
            if key.field == tie_break:
                return SortSpec(keys=tuple(kept))
        kept.append(SortKey(field=tie_break, order=SortOrder.ASC))
        return SortSpec(keys=tuple(kept))


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PageSpec:
    """Offset/limit window with validation.

    The limit is a caller hint: the executor clamps it to the configured
    maximum, so only non-positive values are rejected here.
    """

    offset: int = 0
    limit: int = 20

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValidationError(
                f"offset must be >= 0, got {self.offset}", kind=INVALID_OFFSET
            )
        if self.limit <= 0:
            raise ValidationError(
                f"limit must be > 0, got {self.limit}", kind=INVALID_LIMIT
            )

    @classmethod
    def from_page(cls, page: int, per_page: int) -> PageSpec:
        """Build from 1-based page numbers."""
        if page < 1:
            raise ValidationError(f"page must be >= 1, got {page}", kind=INVALID_OFFSET)
        if per_page <= 0:
            raise ValidationError(
                f"per_page must be > 0, got {per_page}", kind=INVALID_LIMIT
            )
        return cls(offset=(page - 1) * per_page, limit=per_page)

    def clamped(self, max_limit: int) -> PageSpec:
        if self.limit <= max_limit:
            return self
        return replace(self, limit=max_limit)


# ---------------------------------------------------------------------------
# FilterSet
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FilterSet:
    """Named criteria + sort + page window for one listing query."""

    criteria: Mapping[str, Criterion] = field(default_factory=dict)
    sort: SortSpec = field(default_factory=SortSpec)
    page: PageSpec = field(default_factory=PageSpec)

    def __post_init__(self) -> None:
        # Snapshot so later changes to the caller's dict are not visible.
        object.__setattr__(self, "criteria", MappingProxyType(dict(self.criteria)))

    def __hash__(self) -> int:
        return hash((tuple(sorted(self.criteria.items())), self.sort, self.page))

    def active_criteria(self) -> tuple[tuple[str, Criterion], ...]:
        """Non-inert criteria in alphabetical key order."""
        return tuple(
            (key, crit)
            for key, crit in sorted(self.criteria.items())
            if not crit.is_inert()
        )

    # -- Functional "with" composition ------------------------------------

    def with_criterion(self, key: str, criterion: Criterion) -> FilterSet:
        merged = dict(self.criteria)
        merged[key] = criterion
        return replace(self, criteria=merged)

    def without_criterion(self, key: str) -> FilterSet:
        remaining = {k: v for k, v in self.criteria.items() if k != key}
        return replace(self, criteria=remaining)

    def with_sort(self, sort: SortSpec) -> FilterSet:
        return replace(self, sort=sort)

    def with_page(self, page: PageSpec) -> FilterSet:
        return replace(self, page=page)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "SortOrder",
    "Operator",
    "Criterion",
    "SortKey",
    "SortSpec",
    "PageSpec",
    "FilterSet",
]
