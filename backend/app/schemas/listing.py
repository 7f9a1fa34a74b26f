"""Pydantic schemas for the job and application listing endpoints.

Filter inputs are sparse: ``supplied()`` returns only the fields the
caller actually set, so an omitted field adds no criterion while an
explicitly empty list still does.  Enum-valued fields stay plain strings
here; the filter builder normalises them and reports unknown values as
``InvalidValue``.
"""

from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..domain.listing.models import Page

BoundT = TypeVar("BoundT")
ItemT = TypeVar("ItemT")


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RangeInput(BaseModel, Generic[BoundT]):
    """Closed or open-ended range; a null bound is open-ended.

    Both keys must be present.  Because ``supplied()`` drops unset keys
    recursively, ``{"min": 5}`` reaches the builder without ``max`` and
    is rejected as ``MissingBound``.
    """

    model_config = ConfigDict(extra="forbid")

    min: Optional[BoundT] = None
    max: Optional[BoundT] = None


class _FilterInput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def supplied(self) -> Dict[str, Any]:
        """Only the explicitly set fields, nested ranges included."""
        return self.model_dump(exclude_unset=True)


class JobFilterInput(_FilterInput):
    """Filters accepted by the job listings."""

    search: Optional[str] = Field(default=None, description="Words matched in title, description, requirements, company")
    status: Optional[str] = None
    statuses: Optional[List[str]] = None
    employment_type: Optional[str] = None
    employment_types: Optional[List[str]] = None
    workplace_type: Optional[str] = None
    workplace_types: Optional[List[str]] = None
    salary_range: Optional[RangeInput[Decimal]] = Field(
        default=None, description="Lower bound applies to min_salary, upper bound to max_salary"
    )
    created_range: Optional[RangeInput[datetime]] = None
    posted_within_days: Optional[int] = None
    visible_range: Optional[RangeInput[datetime]] = None
    skills: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    city: Optional[str] = None
    country: Optional[str] = None
    currency: Optional[str] = None
    owner_id: Optional[UUID] = None
    has_deadline: Optional[bool] = None


class ApplicationFilterInput(_FilterInput):
    """Filters accepted by the application listings."""

    search: Optional[str] = Field(default=None, description="Words matched in applicant name, email, phone, job title")
    status: Optional[str] = None
    statuses: Optional[List[str]] = None
    job_ids: Optional[List[UUID]] = None
    applicant_email: Optional[str] = None
    skills: Optional[List[str]] = None
    submitted_range: Optional[RangeInput[datetime]] = None
    job_created_range: Optional[RangeInput[datetime]] = None
    job_status: Optional[str] = None
    job_statuses: Optional[List[str]] = None
    job_employment_type: Optional[str] = None
    job_employment_types: Optional[List[str]] = None
    job_workplace_type: Optional[str] = None
    job_workplace_types: Optional[List[str]] = None
    job_salary_range: Optional[RangeInput[Decimal]] = Field(
        default=None, description="Lower bound applies to the job's min_salary, upper bound to its max_salary"
    )
    has_resume: Optional[bool] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class JobItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    company_name: str
    status: str
    description: Optional[str] = None
    requirements: Optional[str] = None
    employment_type: Optional[str] = None
    workplace_type: Optional[str] = None
    min_salary: Optional[Decimal] = None
    max_salary: Optional[Decimal] = None
    currency: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    visible_until: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    skills: List[str] = []
    tags: List[str] = []


class ApplicationItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    job_id: UUID
    job_title: str
    job_status: Optional[str] = None
    applicant_id: Optional[UUID] = None
    applicant_name: str
    applicant_email: str
    phone_number: Optional[str] = None
    resume_url: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    skills: List[str] = []


class PageResponse(BaseModel, Generic[ItemT]):
    """One page of a listing."""

    items: List[ItemT]
    total_count: int
    offset: int
    limit: int
    has_more: bool

    @classmethod
    def from_page(cls, page: Page, item_model: type[BaseModel]) -> "PageResponse":
        return cls(
            items=[item_model.model_validate(_plain(item)) for item in page.items],
            total_count=page.total_count,
            offset=page.offset,
            limit=page.limit,
            has_more=page.has_more,
        )


def _plain(record: Any) -> Dict[str, Any]:
    """Record fields with enums flattened to their values."""
    return {
        key: value.value if isinstance(value, Enum) else value
        for key, value in asdict(record).items()
    }
