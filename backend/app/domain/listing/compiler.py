"""Compile a FilterSet into a storage-agnostic predicate tree.

Rules:
  1. The root is an AND group whose first child is the scope predicate.
     It is always present, even when the user part is constant.
  2. Each non-inert criterion becomes one child, appended in
     alphabetical order of its criterion key.  Equal FilterSets
     therefore compile to structurally equal trees.
  3. An IN criterion with no values is constant-false.  Because the
     user part is a conjunction, compilation stops there and the user
     part collapses to a single FALSE child.
  4. The sort sequence is re-validated against the resource's sortable
     fields; the tie-break is always last.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.domain.common.errors import INVALID_VALUE, ValidationError
from app.domain.common.predicate import (
    FALSE,
    And,
    Leaf,
    Predicate,
    and_,
    describe,
    or_,
)
from app.domain.common.query import Criterion, FilterSet, Operator, PageSpec, SortSpec

from .fields import EntitySchema, FieldDef, schema_for
from .models import ResourceKind
from .scope import ScopeConstraint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompiledQuery:
    """Everything a store needs to run one listing query."""

    resource: ResourceKind
    predicate: Predicate
    sort: SortSpec
    page: PageSpec


class PredicateCompiler:
    """Translate FilterSets for one resource into predicate trees."""

    def __init__(self, schema: EntitySchema) -> None:
        self._schema = schema

    @classmethod
    def for_resource(cls, resource: ResourceKind) -> PredicateCompiler:
        return cls(schema_for(resource))

    @property
    def resource(self) -> ResourceKind:
        return self._schema.resource

    def compile(self, filters: FilterSet, scope: ScopeConstraint) -> CompiledQuery:
        if scope.resource != self._schema.resource:
            raise ValueError(
                f"scope for {scope.resource.value} cannot guard a "
                f"{self._schema.resource.value} query"
            )
        predicate = And(children=(scope.predicate, *self.compile_criteria(filters)))
        sort = self.compile_sort(filters.sort)
        logger.debug(
            "Compiled %s query: %s", self._schema.resource.value, describe(predicate)
        )
        return CompiledQuery(
            resource=self._schema.resource,
            predicate=predicate,
            sort=sort,
            page=filters.page,
        )

    def compile_criteria(self, filters: FilterSet) -> tuple[Predicate, ...]:
        """Compile the user-supplied criteria (scope excluded)."""
        children: list[Predicate] = []
        for _key, criterion in filters.active_criteria():
            node = self.compile_criterion(criterion)
            if node == FALSE:
                return (FALSE,)
            children.append(node)
        return tuple(children)

    def compile_criterion(self, criterion: Criterion) -> Predicate:
        fd = self._schema.check(criterion)
        op = criterion.operator
        values = criterion.values or ()

        if op == Operator.IN:
            if not values:
                return FALSE
            return Leaf(fd.name, Operator.IN, values)
        if op == Operator.RANGE:
            return self._compile_range(fd, values)
        if op == Operator.CONTAINS:
            return self._compile_contains(fd, values)

        if len(values) != 1:
            raise ValidationError(
                f"{op.value} on '{fd.name}' takes exactly one value, got {len(values)}",
                kind=INVALID_VALUE,
            )
        if op == Operator.EXISTS:
            return Leaf(fd.name, Operator.EXISTS, (bool(values[0]),))
        return Leaf(fd.name, op, values)

    def compile_sort(self, sort: SortSpec) -> SortSpec:
        for key in sort.keys:
            self._schema.sortable_field(key.field)
        return sort.with_tie_break(self._schema.tie_break)

    # -- Private helpers ---------------------------------------------------

    @staticmethod
    def _compile_range(fd: FieldDef, values: tuple) -> Predicate:
        lower, upper = values
        lower_field, upper_field = fd.band or (fd.name, fd.name)
        bounds: list[Predicate] = []
        if lower is not None:
            bounds.append(Leaf(lower_field, Operator.GTE, (lower,)))
        if upper is not None:
            bounds.append(Leaf(upper_field, Operator.LTE, (upper,)))
        return and_(*bounds)

    @staticmethod
    def _compile_contains(fd: FieldDef, values: tuple) -> Predicate:
        if not fd.search_columns:
            return or_(*(Leaf(fd.name, Operator.CONTAINS, (v,)) for v in values))
        # Every word must appear in at least one searchable column.
        words: list[str] = []
        for value in values:
            for word in str(value).lower().split():
                if word not in words:
                    words.append(word)
        return and_(*(
            or_(*(Leaf(col, Operator.CONTAINS, (word,)) for col in fd.search_columns))
            for word in words
        ))


__all__ = ["CompiledQuery", "PredicateCompiler"]
