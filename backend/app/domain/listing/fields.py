"""Field catalogue for each listable resource.

An :class:`EntitySchema` declares which fields a resource exposes to
filtering and sorting, their types, and therefore which criterion
operators each field accepts.  Both the filter builder and the
predicate compiler validate against it, so a field or operator that
is not declared here can never reach a store.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from app.domain.common.errors import INVALID_OPERATOR, UNKNOWN_FIELD, ValidationError
from app.domain.common.query import Criterion, Operator, SortKey, SortOrder

from .models import (
    ApplicationStatus,
    EmploymentType,
    JobStatus,
    ResourceKind,
    WorkplaceType,
)


class FieldType(str, Enum):
    TEXT = "text"
    ENUM = "enum"
    NUMBER = "number"
    DATETIME = "datetime"
    BOOLEAN = "boolean"
    ID = "id"
    COLLECTION = "collection"


_OPERATORS_BY_TYPE: dict[FieldType, frozenset[Operator]] = {
    FieldType.TEXT: frozenset({Operator.EQ, Operator.IN, Operator.CONTAINS}),
    FieldType.ENUM: frozenset({Operator.EQ, Operator.IN}),
    FieldType.NUMBER: frozenset(
        {Operator.EQ, Operator.IN, Operator.RANGE, Operator.GTE, Operator.LTE}
    ),
    FieldType.DATETIME: frozenset(
        {Operator.EQ, Operator.RANGE, Operator.GTE, Operator.LTE}
    ),
    FieldType.BOOLEAN: frozenset({Operator.EQ}),
    FieldType.ID: frozenset({Operator.EQ, Operator.IN}),
    FieldType.COLLECTION: frozenset({Operator.IN, Operator.CONTAINS}),
}


@dataclass(frozen=True)
class FieldDef:
    """One filterable/sortable field.

    ``search_columns`` marks a virtual free-text field that spans several
    text columns.  ``band`` marks a virtual range field whose lower bound
    applies to one column and upper bound to another.
    """

    name: str
    type: FieldType
    nullable: bool = False
    sortable: bool = False
    enum: type[Enum] | None = None
    search_columns: tuple[str, ...] = ()
    band: tuple[str, str] | None = None

    @property
    def operators(self) -> frozenset[Operator]:
        if self.search_columns:
            return frozenset({Operator.CONTAINS})
        if self.band is not None:
            return frozenset({Operator.RANGE})
        ops = _OPERATORS_BY_TYPE[self.type]
        if self.nullable:
            ops = ops | {Operator.EXISTS}
        return ops


@dataclass(frozen=True)
class EntitySchema:
    resource: ResourceKind
    fields: Mapping[str, FieldDef]
    default_sort: tuple[SortKey, ...] = ()
    tie_break: str = "id"

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def field(self, name: str) -> FieldDef:
        try:
            return self.fields[name]
        except KeyError:
            raise ValidationError(
                f"unknown field '{name}' for {self.resource.value}", kind=UNKNOWN_FIELD
            ) from None

    def sortable_field(self, name: str) -> FieldDef:
        fd = self.fields.get(name)
        if fd is None or not fd.sortable:
            raise ValidationError(
                f"cannot sort {self.resource.value} by '{name}'", kind=UNKNOWN_FIELD
            )
        return fd

    def check(self, criterion: Criterion) -> FieldDef:
        """Validate that *criterion* names a known field with a legal operator."""
        fd = self.field(criterion.field)
        if criterion.operator not in fd.operators:
            raise ValidationError(
                f"operator {criterion.operator.value} is not supported on "
                f"{fd.type.value} field '{fd.name}'",
                kind=INVALID_OPERATOR,
            )
        return fd

    @property
    def sortable_fields(self) -> tuple[str, ...]:
        return tuple(sorted(name for name, fd in self.fields.items() if fd.sortable))


def _schema(resource: ResourceKind, *defs: FieldDef, default_sort=()) -> EntitySchema:
    return EntitySchema(
        resource=resource,
        fields={d.name: d for d in defs},
        default_sort=tuple(default_sort),
    )


# ---------------------------------------------------------------------------
# Catalogues
# ---------------------------------------------------------------------------

JOB_SCHEMA = _schema(
    ResourceKind.JOBS,
    FieldDef("id", FieldType.ID, sortable=True),
    FieldDef("title", FieldType.TEXT, sortable=True),
    FieldDef("company_name", FieldType.TEXT, sortable=True),
    FieldDef("description", FieldType.TEXT, nullable=True),
    FieldDef("requirements", FieldType.TEXT, nullable=True),
    FieldDef("status", FieldType.ENUM, enum=JobStatus),
    FieldDef("employment_type", FieldType.ENUM, nullable=True, enum=EmploymentType),
    FieldDef("workplace_type", FieldType.ENUM, nullable=True, enum=WorkplaceType),
    FieldDef("min_salary", FieldType.NUMBER, nullable=True, sortable=True),
    FieldDef("max_salary", FieldType.NUMBER, nullable=True, sortable=True),
    FieldDef("salary", FieldType.NUMBER, band=("min_salary", "max_salary")),
    FieldDef("currency", FieldType.TEXT, nullable=True),
    FieldDef("city", FieldType.TEXT, nullable=True, sortable=True),
    FieldDef("country", FieldType.TEXT, nullable=True, sortable=True),
    FieldDef("created_by_id", FieldType.ID),
    FieldDef("created_at", FieldType.DATETIME, sortable=True),
    FieldDef("updated_at", FieldType.DATETIME, nullable=True, sortable=True),
    FieldDef("visible_until", FieldType.DATETIME, nullable=True, sortable=True),
    FieldDef("skills", FieldType.COLLECTION),
    FieldDef("tags", FieldType.COLLECTION),
    FieldDef(
        "text",
        FieldType.TEXT,
        search_columns=("title", "description", "requirements", "company_name"),
    ),
    default_sort=[SortKey("created_at", SortOrder.DESC)],
)

APPLICATION_SCHEMA = _schema(
    ResourceKind.APPLICATIONS,
    FieldDef("id", FieldType.ID, sortable=True),
    FieldDef("job_id", FieldType.ID),
    FieldDef("job_owner_id", FieldType.ID),
    FieldDef("applicant_id", FieldType.ID, nullable=True),
    FieldDef("job_title", FieldType.TEXT, sortable=True),
    FieldDef("job_status", FieldType.ENUM, sortable=True, enum=JobStatus),
    FieldDef("job_employment_type", FieldType.ENUM, nullable=True, enum=EmploymentType),
    FieldDef("job_workplace_type", FieldType.ENUM, nullable=True, enum=WorkplaceType),
    FieldDef("job_min_salary", FieldType.NUMBER, nullable=True, sortable=True),
    FieldDef("job_max_salary", FieldType.NUMBER, nullable=True, sortable=True),
    FieldDef("job_salary", FieldType.NUMBER, band=("job_min_salary", "job_max_salary")),
    FieldDef("applicant_name", FieldType.TEXT, sortable=True),
    FieldDef("applicant_email", FieldType.TEXT, sortable=True),
    FieldDef("phone_number", FieldType.TEXT, nullable=True),
    FieldDef("resume_url", FieldType.TEXT, nullable=True),
    FieldDef("status", FieldType.ENUM, sortable=True, enum=ApplicationStatus),
    FieldDef("created_at", FieldType.DATETIME, sortable=True),
    FieldDef("job_created_at", FieldType.DATETIME, nullable=True, sortable=True),
    FieldDef("updated_at", FieldType.DATETIME, nullable=True, sortable=True),
    FieldDef("skills", FieldType.COLLECTION),
    FieldDef(
        "text",
        FieldType.TEXT,
        search_columns=("applicant_name", "applicant_email", "phone_number", "job_title"),
    ),
    default_sort=[SortKey("created_at", SortOrder.DESC)],
)

SCHEMAS: Mapping[ResourceKind, EntitySchema] = MappingProxyType({
    ResourceKind.JOBS: JOB_SCHEMA,
    ResourceKind.APPLICATIONS: APPLICATION_SCHEMA,
})


def schema_for(resource: ResourceKind) -> EntitySchema:
    return SCHEMAS[resource]


__all__ = [
    "FieldType",
    "FieldDef",
    "EntitySchema",
    "JOB_SCHEMA",
    "APPLICATION_SCHEMA",
    "SCHEMAS",
    "schema_for",
]
