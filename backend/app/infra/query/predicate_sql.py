"""SQLAlchemy rendering of listing predicate trees.

Translates a compiled predicate tree into one SQLAlchemy boolean
expression, and a SortSpec into ORDER BY clauses.  Plain fields map to
columns; collection fields (skills, tags) map to a relationship plus the
name column of the related table and render as ``EXISTS`` subqueries.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from sqlalchemy import and_, asc, desc, false, func, or_, true

from app.domain.common.predicate import And, Const, Leaf, Or, Predicate
from app.domain.common.query import Operator, SortOrder, SortSpec
from app.domain.listing.models import ResourceKind
from app.models.application import Application
from app.models.job import Job, Skill, Tag


@dataclass(frozen=True)
class CollectionColumn:
    """A to-many relationship filtered by the related row's name."""

    relationship: Any
    name_column: Any


@dataclass(frozen=True)
class ColumnMap:
    columns: Mapping[str, Any]
    collections: Mapping[str, CollectionColumn]

    def column(self, name: str) -> Any:
        try:
            return self.columns[name]
        except KeyError:
            raise KeyError(f"no column mapped for field '{name}'") from None


# ── Column resolution ───────────────────────────────────────────────────

JOB_COLUMNS = ColumnMap(
    columns={
        "id": Job.id,
        "title": Job.title,
        "company_name": Job.company_name,
        "description": Job.description,
        "requirements": Job.requirements,
        "status": Job.status,
        "employment_type": Job.employment_type,
        "workplace_type": Job.workplace_type,
        "min_salary": Job.min_salary,
        "max_salary": Job.max_salary,
        "currency": Job.currency,
        "city": Job.city,
        "country": Job.country,
        "created_by_id": Job.created_by_id,
        "created_at": Job.created_at,
        "updated_at": Job.updated_at,
        "visible_until": Job.visible_until,
    },
    collections={
        "skills": CollectionColumn(Job.skills, Skill.name),
        "tags": CollectionColumn(Job.tags, Tag.name),
    },
)

# Application queries join jobs, so job-side fields resolve to Job columns.
APPLICATION_COLUMNS = ColumnMap(
    columns={
        "id": Application.id,
        "job_id": Application.job_id,
        "job_owner_id": Job.created_by_id,
        "applicant_id": Application.applicant_id,
        "job_title": Job.title,
        "job_status": Job.status,
        "job_employment_type": Job.employment_type,
        "job_workplace_type": Job.workplace_type,
        "job_min_salary": Job.min_salary,
        "job_max_salary": Job.max_salary,
        "job_created_at": Job.created_at,
        "applicant_name": Application.applicant_name,
        "applicant_email": Application.applicant_email,
        "phone_number": Application.phone_number,
        "resume_url": Application.resume_url,
        "status": Application.status,
        "created_at": Application.created_at,
        "updated_at": Application.updated_at,
    },
    collections={
        "skills": CollectionColumn(Application.skills, Skill.name),
    },
)

COLUMN_MAPS: Mapping[ResourceKind, ColumnMap] = {
    ResourceKind.JOBS: JOB_COLUMNS,
    ResourceKind.APPLICATIONS: APPLICATION_COLUMNS,
}


# ── Public API ──────────────────────────────────────────────────────────


def to_sql(node: Predicate, cmap: ColumnMap):
    """Render *node* as a SQLAlchemy boolean clause."""
    if isinstance(node, Const):
        return true() if node.value else false()
    if isinstance(node, And):
        if not node.children:
            return true()
        return and_(*(to_sql(c, cmap) for c in node.children))
    if isinstance(node, Or):
        if not node.children:
            return false()
        return or_(*(to_sql(c, cmap) for c in node.children))
    if node.field in cmap.collections:
        return _collection_leaf(node, cmap.collections[node.field])
    return _column_leaf(node, cmap.column(node.field))


def order_by_clauses(sort: SortSpec, cmap: ColumnMap) -> list:
    """Map each sort key to ``asc(col)`` / ``desc(col)``, in order."""
    clauses = []
    for key in sort.keys:
        order_fn = asc if key.order == SortOrder.ASC else desc
        clauses.append(order_fn(cmap.column(key.field)))
    return clauses


# ── Private helpers ─────────────────────────────────────────────────────


def _column_leaf(leaf: Leaf, col):
    values = tuple(_bind(v) for v in leaf.values)
    op = leaf.op
    if op == Operator.EQ:
        return col.is_(None) if values[0] is None else col == values[0]
    if op == Operator.IN:
        return col.in_(values)
    if op == Operator.GTE:
        return col >= values[0]
    if op == Operator.LTE:
        return col <= values[0]
    if op == Operator.CONTAINS:
        return col.icontains(str(values[0]), autoescape=True)
    if op == Operator.EXISTS:
        return col.isnot(None) if values[0] else col.is_(None)
    raise ValueError(f"operator {op.value} cannot be rendered on column '{leaf.field}'")


def _collection_leaf(leaf: Leaf, coll: CollectionColumn):
    names = tuple(str(_bind(v)).lower() for v in leaf.values)
    name_col = func.lower(coll.name_column)
    if leaf.op == Operator.IN:
        return coll.relationship.any(name_col.in_(names))
    if leaf.op == Operator.CONTAINS:
        return coll.relationship.any(name_col == names[0])
    raise ValueError(f"operator {leaf.op.value} cannot be rendered on collection '{leaf.field}'")


def _bind(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


__all__ = [
    "CollectionColumn",
    "ColumnMap",
    "JOB_COLUMNS",
    "APPLICATION_COLUMNS",
    "COLUMN_MAPS",
    "to_sql",
    "order_by_clauses",
]
