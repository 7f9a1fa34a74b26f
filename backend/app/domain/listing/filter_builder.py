"""Build an immutable FilterSet from a sparse filter input.

The input is a mapping holding only the keys the caller actually
supplied (``JobFilterInput.supplied()`` produces one).  A key that is
absent adds no criterion.  A key that is present always adds one, even
when its value is an empty collection, so "no constraint" and "match
nothing" stay distinguishable.

Each resource declares its recognised inputs as :class:`InputRule`
rows.  A rule names the criterion key it produces, the schema field it
targets, the input shape, and the input names that feed it.  Several
input names feeding one rule (``status`` + ``statuses``) are merged
into a single IN criterion over the union of their values.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Mapping, Sequence
from uuid import UUID

from app.domain.common.errors import (
    DUPLICATE_SORT_FIELD,
    INVALID_VALUE,
    MISSING_BOUND,
    UNKNOWN_FIELD,
    ValidationError,
)
from app.domain.common.query import (
    Criterion,
    FilterSet,
    Operator,
    PageSpec,
    SortKey,
    SortSpec,
)

from .fields import EntitySchema, FieldDef, FieldType, schema_for
from .models import ResourceKind

logger = logging.getLogger(__name__)


class InputShape(str, Enum):
    """How a raw input value turns into a criterion."""

    SCALAR = "scalar"            # one value -> EQ
    MULTI = "multi"              # one or many values, merged -> IN
    TERMS = "terms"              # list of terms -> CONTAINS (any of)
    TEXT = "text"                # free text -> CONTAINS
    RANGE = "range"              # {"min", "max"} -> RANGE
    WITHIN_DAYS = "within_days"  # N days back from now -> GTE
    PRESENCE = "presence"        # bool -> EXISTS


_OPERATOR_FOR_SHAPE: dict[InputShape, Operator] = {
    InputShape.SCALAR: Operator.EQ,
    InputShape.MULTI: Operator.IN,
    InputShape.TERMS: Operator.CONTAINS,
    InputShape.TEXT: Operator.CONTAINS,
    InputShape.RANGE: Operator.RANGE,
    InputShape.WITHIN_DAYS: Operator.GTE,
    InputShape.PRESENCE: Operator.EXISTS,
}


@dataclass(frozen=True)
class InputRule:
    key: str
    field: str
    shape: InputShape
    sources: tuple[str, ...]

    @property
    def operator(self) -> Operator:
        return _OPERATOR_FOR_SHAPE[self.shape]


def _rule(key: str, field: str, shape: InputShape, *sources: str) -> InputRule:
    return InputRule(key=key, field=field, shape=shape, sources=sources or (key,))


# ---------------------------------------------------------------------------
# Recognised inputs per resource
# ---------------------------------------------------------------------------

JOB_INPUT_RULES: tuple[InputRule, ...] = (
    _rule("search", "text", InputShape.TEXT),
    _rule("status", "status", InputShape.MULTI, "status", "statuses"),
    _rule(
        "employment_type", "employment_type", InputShape.MULTI,
        "employment_type", "employment_types",
    ),
    _rule(
        "workplace_type", "workplace_type", InputShape.MULTI,
        "workplace_type", "workplace_types",
    ),
    _rule("salary_range", "salary", InputShape.RANGE),
    _rule("created_range", "created_at", InputShape.RANGE),
    _rule("posted_within_days", "created_at", InputShape.WITHIN_DAYS),
    _rule("visible_range", "visible_until", InputShape.RANGE),
    _rule("skills", "skills", InputShape.TERMS),
    _rule("tags", "tags", InputShape.TERMS),
    _rule("city", "city", InputShape.TEXT),
    _rule("country", "country", InputShape.TEXT),
    _rule("currency", "currency", InputShape.SCALAR),
    _rule("owner_id", "created_by_id", InputShape.SCALAR),
    _rule("has_deadline", "visible_until", InputShape.PRESENCE),
)

APPLICATION_INPUT_RULES: tuple[InputRule, ...] = (
    _rule("search", "text", InputShape.TEXT),
    _rule("status", "status", InputShape.MULTI, "status", "statuses"),
    _rule("job_ids", "job_id", InputShape.MULTI),
    _rule("applicant_email", "applicant_email", InputShape.SCALAR),
    _rule("skills", "skills", InputShape.TERMS),
    _rule("submitted_range", "created_at", InputShape.RANGE),
    _rule("job_created_range", "job_created_at", InputShape.RANGE),
    _rule("job_status", "job_status", InputShape.MULTI, "job_status", "job_statuses"),
    _rule(
        "job_employment_type", "job_employment_type", InputShape.MULTI,
        "job_employment_type", "job_employment_types",
    ),
    _rule(
        "job_workplace_type", "job_workplace_type", InputShape.MULTI,
        "job_workplace_type", "job_workplace_types",
    ),
    _rule("job_salary_range", "job_salary", InputShape.RANGE),
    _rule("has_resume", "resume_url", InputShape.PRESENCE),
)

INPUT_RULES: Mapping[ResourceKind, tuple[InputRule, ...]] = {
    ResourceKind.JOBS: JOB_INPUT_RULES,
    ResourceKind.APPLICATIONS: APPLICATION_INPUT_RULES,
}


def recognised_inputs(resource: ResourceKind) -> frozenset[str]:
    return frozenset(src for rule in INPUT_RULES[resource] for src in rule.sources)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_filter_set(
    resource: ResourceKind,
    supplied: Mapping[str, Any],
    *,
    sort: Sequence[str | tuple[str, str] | SortKey] | None = None,
    page: PageSpec | None = None,
    now: Callable[[], datetime] | None = None,
) -> FilterSet:
    """Return a new FilterSet for *resource* built from *supplied* inputs.

    Raises:
        ValidationError: on unknown input or sort fields, malformed
            values, missing or inverted range bounds.
    """
    schema = schema_for(resource)
    unknown = sorted(set(supplied) - recognised_inputs(resource))
    if unknown:
        raise ValidationError(
            f"unknown filter field(s) for {resource.value}: {', '.join(unknown)}",
            kind=UNKNOWN_FIELD,
        )

    criteria: dict[str, Criterion] = {}
    for rule in INPUT_RULES[resource]:
        present = [supplied[src] for src in rule.sources if src in supplied]
        if not present:
            continue
        criterion = _build_criterion(schema, rule, present, now)
        if criterion is None:
            continue
        schema.check(criterion)
        criteria[rule.key] = criterion

    filters = FilterSet(
        criteria=criteria,
        sort=resolve_sort(schema, sort),
        page=page or PageSpec(),
    )
    logger.debug(
        "Built %s filter set: criteria=%s sort=%s",
        resource.value,
        sorted(criteria),
        [(k.field, k.order.value) for k in filters.sort.keys],
    )
    return filters


def resolve_sort(
    schema: EntitySchema,
    raw: Sequence[str | tuple[str, str] | SortKey] | None,
) -> SortSpec:
    """Validate the caller's sort keys and append the tie-break."""
    keys = [SortKey.parse(item) for item in raw] if raw else list(schema.default_sort)
    seen: set[str] = set()
    for key in keys:
        schema.sortable_field(key.field)
        if key.field in seen:
            raise ValidationError(
                f"sort field '{key.field}' given more than once",
                kind=DUPLICATE_SORT_FIELD,
            )
        seen.add(key.field)
    return SortSpec(keys=tuple(keys)).with_tie_break(schema.tie_break)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _build_criterion(
    schema: EntitySchema,
    rule: InputRule,
    present: list[Any],
    now: Callable[[], datetime] | None,
) -> Criterion | None:
    fd = schema.field(rule.field)
    values = [v for v in present if v is not None]
    if not values:
        return None

    if rule.shape == InputShape.MULTI:
        merged: set[Any] = set()
        for value in values:
            for item in _as_iterable(value):
                merged.add(_coerce(fd, item))
        return Criterion(rule.field, Operator.IN, tuple(sorted(merged, key=_sort_token)))

    value = values[0]
    if rule.shape == InputShape.SCALAR:
        return Criterion(rule.field, Operator.EQ, (_coerce(fd, value),))

    if rule.shape == InputShape.TERMS:
        terms = {str(t).strip().lower() for t in _as_iterable(value)}
        terms.discard("")
        return Criterion(rule.field, Operator.CONTAINS, tuple(sorted(terms)))

    if rule.shape == InputShape.TEXT:
        text = str(value).strip()
        return Criterion(rule.field, Operator.CONTAINS, (text,) if text else ())

    if rule.shape == InputShape.RANGE:
        return _range_criterion(rule, fd, value)

    if rule.shape == InputShape.WITHIN_DAYS:
        days = _coerce_int(rule.key, value)
        if days < 0:
            raise ValidationError(
                f"'{rule.key}' must be >= 0, got {days}", kind=INVALID_VALUE
            )
        clock = now or _utcnow
        return Criterion(rule.field, Operator.GTE, (clock() - timedelta(days=days),))

    if rule.shape == InputShape.PRESENCE:
        if not isinstance(value, bool):
            raise ValidationError(
                f"'{rule.key}' must be a boolean, got {value!r}", kind=INVALID_VALUE
            )
        return Criterion(rule.field, Operator.EXISTS, (value,))

    raise ValueError(f"unhandled input shape {rule.shape}")  # pragma: no cover


def _range_criterion(rule: InputRule, fd: FieldDef, value: Any) -> Criterion:
    if not isinstance(value, Mapping):
        raise ValidationError(
            f"'{rule.key}' must be an object with 'min' and 'max'", kind=INVALID_VALUE
        )
    extra = sorted(set(value) - {"min", "max"})
    if extra:
        raise ValidationError(
            f"'{rule.key}' has unknown bound(s): {', '.join(extra)}", kind=UNKNOWN_FIELD
        )
    for bound in ("min", "max"):
        if bound not in value:
            raise ValidationError(
                f"'{rule.key}' is missing its '{bound}' bound (use null for open-ended)",
                kind=MISSING_BOUND,
            )
    lower = None if value["min"] is None else _coerce(fd, value["min"])
    upper = None if value["max"] is None else _coerce(fd, value["max"], upper=True)
    return Criterion(rule.field, Operator.RANGE, (lower, upper))


def _coerce(fd: FieldDef, value: Any, *, upper: bool = False) -> Any:
    """Normalise *value* to the Python type the field compares with."""
    try:
        if fd.type == FieldType.ENUM and fd.enum is not None:
            return fd.enum(value.value if isinstance(value, Enum) else str(value).strip().upper())
        if fd.type == FieldType.ID:
            return value if isinstance(value, UUID) else UUID(str(value))
        if fd.type == FieldType.NUMBER:
            if isinstance(value, bool):
                raise TypeError("booleans are not numbers")
            if isinstance(value, (int, Decimal)):
                return value
            return Decimal(str(value))
        if fd.type == FieldType.DATETIME:
            return _coerce_datetime(value, upper=upper)
        if fd.type == FieldType.BOOLEAN:
            if not isinstance(value, bool):
                raise TypeError("expected a boolean")
            return value
        return str(value)
    except (ValueError, TypeError, InvalidOperation) as exc:
        raise ValidationError(
            f"invalid value {value!r} for {fd.type.value} field '{fd.name}'",
            kind=INVALID_VALUE,
        ) from exc


def _coerce_datetime(value: Any, *, upper: bool) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        # A bare date covers the whole day on the upper bound.
        parsed = datetime.combine(value, time.max if upper else time.min)
    else:
        text = str(value).strip()
        if len(text) == 10:
            return _coerce_datetime(date.fromisoformat(text), upper=upper)
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    # Stores compare wall-clock UTC; SQLite drops the offset on bind.
    return parsed.astimezone(timezone.utc)


def _coerce_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValidationError(f"'{key}' must be an integer, got {value!r}", kind=INVALID_VALUE)
    try:
        return int(value)
    except ValueError as exc:
        raise ValidationError(
            f"'{key}' must be an integer, got {value!r}", kind=INVALID_VALUE
        ) from exc


def _as_iterable(value: Any) -> Iterable[Any]:
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        return (value,)
    return value


def _sort_token(value: Any) -> str:
    return str(value.value) if isinstance(value, Enum) else str(value)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


__all__ = [
    "InputShape",
    "InputRule",
    "JOB_INPUT_RULES",
    "APPLICATION_INPUT_RULES",
    "INPUT_RULES",
    "recognised_inputs",
    "build_filter_set",
    "resolve_sort",
]
