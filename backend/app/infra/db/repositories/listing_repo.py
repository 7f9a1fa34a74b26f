"""SQLAlchemy implementation of ListingStore."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, contains_eager

from app.domain.common.errors import StorageError
from app.domain.common.predicate import Predicate
from app.domain.common.query import SortSpec
from app.domain.listing.models import (
    ApplicationRecord,
    ApplicationStatus,
    EmploymentType,
    JobRecord,
    JobStatus,
    ResourceKind,
    WorkplaceType,
)
from app.domain.listing.ports import ListingStore
from app.infra.query.predicate_sql import COLUMN_MAPS, order_by_clauses, to_sql
from app.models.application import Application
from app.models.job import Job

logger = logging.getLogger(__name__)


def _aware(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo on read; stored values are UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _enum(enum_cls, value):
    return enum_cls(value) if value else None


def _job_to_record(row: Job) -> JobRecord:
    return JobRecord(
        id=row.id,
        title=row.title,
        company_name=row.company_name,
        status=JobStatus(row.status),
        created_by_id=row.created_by_id,
        created_at=_aware(row.created_at),
        description=row.description,
        requirements=row.requirements,
        employment_type=_enum(EmploymentType, row.employment_type),
        workplace_type=_enum(WorkplaceType, row.workplace_type),
        min_salary=row.min_salary,
        max_salary=row.max_salary,
        currency=row.currency,
        city=row.city,
        country=row.country,
        visible_until=_aware(row.visible_until),
        updated_at=_aware(row.updated_at),
        skills=tuple(sorted(s.name for s in row.skills)),
        tags=tuple(sorted(t.name for t in row.tags)),
    )


def _application_to_record(row: Application) -> ApplicationRecord:
    return ApplicationRecord(
        id=row.id,
        job_id=row.job_id,
        job_owner_id=row.job.created_by_id,
        job_title=row.job.title,
        applicant_name=row.applicant_name,
        applicant_email=row.applicant_email,
        status=ApplicationStatus(row.status),
        created_at=_aware(row.created_at),
        applicant_id=row.applicant_id,
        job_status=JobStatus(row.job.status),
        job_employment_type=_enum(EmploymentType, row.job.employment_type),
        job_workplace_type=_enum(WorkplaceType, row.job.workplace_type),
        job_min_salary=row.job.min_salary,
        job_max_salary=row.job.max_salary,
        job_created_at=_aware(row.job.created_at),
        phone_number=row.phone_number,
        resume_url=row.resume_url,
        updated_at=_aware(row.updated_at),
        skills=tuple(sorted(s.name for s in row.skills)),
    )


class SqlListingStore(ListingStore):
    """Run compiled listing predicates as one COUNT and one windowed SELECT."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def fetch_page(
        self,
        resource: ResourceKind,
        predicate: Predicate,
        sort: SortSpec,
        offset: int,
        limit: int,
    ) -> tuple[list, int]:
        cmap = COLUMN_MAPS[resource]
        try:
            query = self._base_query(resource).filter(to_sql(predicate, cmap))
            total = query.count()
            rows = (
                query.order_by(*order_by_clauses(sort, cmap))
                .offset(offset)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as exc:
            logger.error("Listing %s failed", resource.value, exc_info=True)
            raise StorageError(f"failed to list {resource.value}: {exc}") from exc

        if resource == ResourceKind.JOBS:
            return [_job_to_record(r) for r in rows], total
        return [_application_to_record(r) for r in rows], total

    def _base_query(self, resource: ResourceKind):
        if resource == ResourceKind.JOBS:
            return self._session.query(Job)
        return (
            self._session.query(Application)
            .join(Application.job)
            .options(contains_eager(Application.job))
        )


__all__ = ["SqlListingStore"]
