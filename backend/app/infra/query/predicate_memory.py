"""In-memory evaluation of listing predicate trees.

Evaluates compiled predicates directly against record objects
(``JobRecord`` / ``ApplicationRecord`` or anything with the same
attributes) and sorts them the way the SQL store does: NULLs sort
before any value ascending and after any value descending.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from app.domain.common.predicate import And, Const, Leaf, Or, Predicate
from app.domain.common.query import Operator, SortOrder, SortSpec
from app.domain.listing.models import ResourceKind
from app.domain.listing.ports import ListingStore

logger = logging.getLogger(__name__)


def matches(node: Predicate, record: Any) -> bool:
    """Return True when *record* satisfies *node*."""
    if isinstance(node, Const):
        return node.value
    if isinstance(node, And):
        return all(matches(c, record) for c in node.children)
    if isinstance(node, Or):
        return any(matches(c, record) for c in node.children)
    return _leaf_matches(node, getattr(record, node.field))


def sort_records(records: Iterable[Any], sort: SortSpec) -> list[Any]:
    """Sort by every key in *sort*, first key most significant."""
    rows = list(records)
    # Stable sorts applied from the least significant key upwards.
    for key in reversed(sort.keys):
        rows.sort(
            key=lambda r, f=key.field: _nulls_first_key(getattr(r, f)),
            reverse=key.order == SortOrder.DESC,
        )
    return rows


class InMemoryListingStore(ListingStore):
    """ListingStore over plain record sequences, one per resource."""

    def __init__(self, records: Mapping[ResourceKind, Sequence[Any]] | None = None) -> None:
        self._records: dict[ResourceKind, list[Any]] = {
            kind: list(rows) for kind, rows in (records or {}).items()
        }

    def add(self, resource: ResourceKind, *records: Any) -> None:
        self._records.setdefault(resource, []).extend(records)

    def fetch_page(self, resource, predicate, sort, offset, limit):
        hits = [r for r in self._records.get(resource, ()) if matches(predicate, r)]
        ordered = sort_records(hits, sort)
        logger.debug(
            "In-memory %s: %d of %d rows match",
            resource.value,
            len(hits),
            len(self._records.get(resource, ())),
        )
        return ordered[offset : offset + limit], len(hits)


# ── Private helpers ─────────────────────────────────────────────────────


def _leaf_matches(leaf: Leaf, actual: Any) -> bool:
    op = leaf.op
    if op == Operator.EXISTS:
        return (actual is not None) == bool(leaf.value)
    if isinstance(actual, (tuple, list, set, frozenset)):
        names = {str(_plain(v)).lower() for v in actual}
        if op == Operator.IN:
            return any(str(_plain(v)).lower() in names for v in leaf.values)
        if op == Operator.CONTAINS:
            return str(_plain(leaf.value)).lower() in names
        raise ValueError(f"operator {op.value} cannot apply to collection '{leaf.field}'")

    if actual is None:
        return False
    actual = _normalise(actual)
    if op == Operator.EQ:
        return actual == _normalise(leaf.value)
    if op == Operator.IN:
        return any(actual == _normalise(v) for v in leaf.values)
    if op == Operator.GTE:
        return actual >= _normalise(leaf.value)
    if op == Operator.LTE:
        return actual <= _normalise(leaf.value)
    if op == Operator.CONTAINS:
        return str(leaf.value).lower() in str(actual).lower()
    raise ValueError(f"operator {op.value} cannot apply to field '{leaf.field}'")


def _normalise(value: Any) -> Any:
    value = _plain(value)
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _nulls_first_key(value: Any) -> tuple:
    if value is None:
        return (0, None)
    return (1, _normalise(value))


__all__ = ["matches", "sort_records", "InMemoryListingStore"]
