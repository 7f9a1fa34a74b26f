"""Domain models for the listing bounded context.

Pure value objects and enums that represent job-board concepts
independently of any infrastructure (ORM, HTTP, caching).
All dataclasses use frozen=True for immutability.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Generic, TypeVar
from uuid import UUID

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ResourceKind(str, Enum):
    """Entity collections that can be listed."""

    JOBS = "jobs"
    APPLICATIONS = "applications"


class ListingContext(str, Enum):
    """Which endpoint is asking; decides the mandatory scope."""

    PUBLIC_FEED = "public_feed"
    OWNER_DASHBOARD = "owner_dashboard"
    APPLICANT_DASHBOARD = "applicant_dashboard"


class Role(str, Enum):
    ANONYMOUS = "ANONYMOUS"
    CANDIDATE = "CANDIDATE"
    RECRUITER = "RECRUITER"
    ADMIN = "ADMIN"


class JobStatus(str, Enum):
    """Canonical job lifecycle vocabulary."""

    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"
    FILLED = "FILLED"


class ApplicationStatus(str, Enum):
    """Canonical application lifecycle vocabulary."""

    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    SHORTLISTED = "SHORTLISTED"
    IN_INTERVIEW = "IN_INTERVIEW"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"


class EmploymentType(str, Enum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    INTERNSHIP = "INTERNSHIP"


class WorkplaceType(str, Enum):
    ONSITE = "ONSITE"
    REMOTE = "REMOTE"
    HYBRID = "HYBRID"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Identity:
    """The caller, as supplied by the identity provider."""

    principal_id: UUID | None
    role: Role = Role.ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return self.principal_id is not None and self.role != Role.ANONYMOUS


@dataclass(frozen=True)
class ScopeContext:
    """Where a listing request comes from and who is making it."""

    context: ListingContext
    identity: Identity | None = None


@dataclass(frozen=True)
class JobRecord:
    """One job as returned by a listing store.

    Collections use tuples so the record stays hashable.
    """

    id: UUID
    title: str
    company_name: str
    status: JobStatus
    created_by_id: UUID
    created_at: datetime
    description: str | None = None
    requirements: str | None = None
    employment_type: EmploymentType | None = None
    workplace_type: WorkplaceType | None = None
    min_salary: Decimal | None = None
    max_salary: Decimal | None = None
    currency: str | None = None
    city: str | None = None
    country: str | None = None
    visible_until: datetime | None = None
    updated_at: datetime | None = None
    skills: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class ApplicationRecord:
    """One application as returned by a listing store.

    The ``job_*`` attributes are denormalised from the job so that owner
    scoping, search and job-side filters work on a single record.
    ``applicant_id`` is the submitting candidate's account, if any.
    """

    id: UUID
    job_id: UUID
    job_owner_id: UUID
    job_title: str
    applicant_name: str
    applicant_email: str
    status: ApplicationStatus
    created_at: datetime
    applicant_id: UUID | None = None
    job_status: JobStatus | None = None
    job_employment_type: EmploymentType | None = None
    job_workplace_type: WorkplaceType | None = None
    job_min_salary: Decimal | None = None
    job_max_salary: Decimal | None = None
    job_created_at: datetime | None = None
    phone_number: str | None = None
    resume_url: str | None = None
    updated_at: datetime | None = None
    skills: tuple[str, ...] = ()


@dataclass(frozen=True)
class Page(Generic[T]):
    """One window of a listing plus the full match count."""

    items: tuple[T, ...] = field(default_factory=tuple)
    total_count: int = 0
    offset: int = 0
    limit: int = 0

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total_count


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "ResourceKind",
    "ListingContext",
    "Role",
    "JobStatus",
    "ApplicationStatus",
    "EmploymentType",
    "WorkplaceType",
    "Identity",
    "ScopeContext",
    "JobRecord",
    "ApplicationRecord",
    "Page",
]
