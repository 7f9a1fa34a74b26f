"""Reusable FastAPI dependencies for listing filter/sort/page parsing.

Turns flat query parameters into the sparse filter input models of
``app.schemas.listing``.  A parameter that is absent stays unset; a
comma-separated parameter given as an empty string becomes an empty
list, which for status or job filters matches nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID

from dateutil.relativedelta import relativedelta
from fastapi import HTTPException, Query

from app.schemas.listing import ApplicationFilterInput, JobFilterInput


# ---------------------------------------------------------------------------
# Posted-within preset parsing
# ---------------------------------------------------------------------------

_POSTED_WITHIN_PRESETS = {
    "1d": relativedelta(days=1),
    "3d": relativedelta(days=3),
    "1w": relativedelta(weeks=1),
    "2w": relativedelta(weeks=2),
    "1m": relativedelta(months=1),
    "3m": relativedelta(months=3),
    "6m": relativedelta(months=6),
}


def parse_posted_within_preset(preset: str, today: date | None = None) -> int:
    """Convert a preset (1d, 3d, 1w, 2w, 1m, 3m, 6m) to a day count.

    Month presets are calendar months back from *today*, so ``1m`` is
    28 to 31 days depending on the date.
    """
    delta = _POSTED_WITHIN_PRESETS.get(preset.strip().lower())
    if delta is None:
        raise HTTPException(
            status_code=400,
            detail={
                "kind": "InvalidValue",
                "message": f"posted_within must be one of {', '.join(_POSTED_WITHIN_PRESETS)}",
            },
        )
    today = today or date.today()
    return (today - (today - delta)).days


def _csv(raw: Optional[str]) -> Optional[list[str]]:
    if raw is None:
        return None
    return [part.strip() for part in raw.split(",") if part.strip()]


def _range(low: Any, high: Any) -> Optional[dict[str, Any]]:
    if low is None and high is None:
        return None
    # Both keys present, so an absent bound is open-ended rather than missing.
    return {"min": low, "max": high}


def _set(**params: Any) -> dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


# ---------------------------------------------------------------------------
# Filter parsing dependencies
# ---------------------------------------------------------------------------


def parse_job_filters(
    search: Optional[str] = Query(None, description="Words to find in title, description, requirements or company"),
    status: Optional[str] = Query(None, description="Job status"),
    statuses: Optional[str] = Query(None, description="Job statuses (comma-separated)"),
    employment_type: Optional[str] = Query(None, description="FULL_TIME, PART_TIME, CONTRACT, INTERNSHIP"),
    employment_types: Optional[str] = Query(None, description="Employment types (comma-separated)"),
    workplace_type: Optional[str] = Query(None, description="ONSITE, REMOTE, HYBRID"),
    workplace_types: Optional[str] = Query(None, description="Workplace types (comma-separated)"),
    min_salary: Optional[Decimal] = Query(None, description="Lowest acceptable minimum salary"),
    max_salary: Optional[Decimal] = Query(None, description="Highest acceptable maximum salary"),
    created_after: Optional[datetime] = Query(None, description="Posted at or after"),
    created_before: Optional[datetime] = Query(None, description="Posted at or before"),
    posted_within_days: Optional[int] = Query(None, description="Posted in the last N days"),
    posted_within: Optional[str] = Query(None, description="Posted within preset: 1d, 3d, 1w, 2w, 1m, 3m, 6m"),
    visible_after: Optional[datetime] = Query(None, description="Visible until at or after"),
    visible_before: Optional[datetime] = Query(None, description="Visible until at or before"),
    skills: Optional[str] = Query(None, description="Any of these skills (comma-separated)"),
    tags: Optional[str] = Query(None, description="Any of these tags (comma-separated)"),
    city: Optional[str] = Query(None, description="City substring"),
    country: Optional[str] = Query(None, description="Country substring"),
    currency: Optional[str] = Query(None, description="Salary currency code"),
    owner_id: Optional[UUID] = Query(None, description="Posting owner"),
    has_deadline: Optional[bool] = Query(None, description="Only jobs with (true) or without (false) a visibility deadline"),
) -> JobFilterInput:
    """Build a JobFilterInput from HTTP query parameters."""
    if posted_within_days is None and posted_within is not None:
        posted_within_days = parse_posted_within_preset(posted_within)
    return JobFilterInput(**_set(
        search=search,
        status=status,
        statuses=_csv(statuses),
        employment_type=employment_type,
        employment_types=_csv(employment_types),
        workplace_type=workplace_type,
        workplace_types=_csv(workplace_types),
        salary_range=_range(min_salary, max_salary),
        created_range=_range(created_after, created_before),
        posted_within_days=posted_within_days,
        visible_range=_range(visible_after, visible_before),
        skills=_csv(skills),
        tags=_csv(tags),
        city=city,
        country=country,
        currency=currency,
        owner_id=owner_id,
        has_deadline=has_deadline,
    ))


def parse_application_filters(
    search: Optional[str] = Query(None, description="Words to find in applicant name, email, phone or job title"),
    status: Optional[str] = Query(None, description="Application status"),
    statuses: Optional[str] = Query(None, description="Application statuses (comma-separated)"),
    job_ids: Optional[str] = Query(None, description="Job ids (comma-separated)"),
    applicant_email: Optional[str] = Query(None, description="Exact applicant email"),
    skills: Optional[str] = Query(None, description="Any of these skills (comma-separated)"),
    submitted_after: Optional[datetime] = Query(None, description="Submitted at or after"),
    submitted_before: Optional[datetime] = Query(None, description="Submitted at or before"),
    job_created_after: Optional[datetime] = Query(None, description="Job posted at or after"),
    job_created_before: Optional[datetime] = Query(None, description="Job posted at or before"),
    job_status: Optional[str] = Query(None, description="Status of the applied-to job"),
    job_statuses: Optional[str] = Query(None, description="Job statuses (comma-separated)"),
    job_employment_type: Optional[str] = Query(None, description="Employment type of the applied-to job"),
    job_employment_types: Optional[str] = Query(None, description="Job employment types (comma-separated)"),
    job_workplace_type: Optional[str] = Query(None, description="Workplace type of the applied-to job"),
    job_workplace_types: Optional[str] = Query(None, description="Job workplace types (comma-separated)"),
    job_min_salary: Optional[Decimal] = Query(None, description="Lowest acceptable job minimum salary"),
    job_max_salary: Optional[Decimal] = Query(None, description="Highest acceptable job maximum salary"),
    has_resume: Optional[bool] = Query(None, description="Only applications with (true) or without (false) a resume"),
) -> ApplicationFilterInput:
    """Build an ApplicationFilterInput from HTTP query parameters."""
    parsed_job_ids = None
    if job_ids is not None:
        try:
            parsed_job_ids = [UUID(j) for j in _csv(job_ids)]
        except ValueError:
            raise HTTPException(
                status_code=400,
                detail={"kind": "InvalidValue", "message": "job_ids must be UUIDs"},
            ) from None
    return ApplicationFilterInput(**_set(
        search=search,
        status=status,
        statuses=_csv(statuses),
        job_ids=parsed_job_ids,
        applicant_email=applicant_email,
        skills=_csv(skills),
        submitted_range=_range(submitted_after, submitted_before),
        job_created_range=_range(job_created_after, job_created_before),
        job_status=job_status,
        job_statuses=_csv(job_statuses),
        job_employment_type=job_employment_type,
        job_employment_types=_csv(job_employment_types),
        job_workplace_type=job_workplace_type,
        job_workplace_types=_csv(job_workplace_types),
        job_salary_range=_range(job_min_salary, job_max_salary),
        has_resume=has_resume,
    ))


# ---------------------------------------------------------------------------
# Sort + pagination parsing dependency
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ListingParams:
    """Raw window and sort; validated by the domain, not here."""

    offset: int = 0
    limit: Optional[int] = None
    sort: Optional[tuple[str, ...]] = None


def parse_listing_params(
    offset: int = Query(0, description="Rows to skip"),
    limit: Optional[int] = Query(None, description="Rows per page (clamped to the configured maximum)"),
    sort: Optional[str] = Query(
        None, description="Comma-separated sort keys; '-field' or 'field:desc' for descending"
    ),
) -> ListingParams:
    """Collect window and sort parameters from the query string."""
    keys = _csv(sort)
    return ListingParams(offset=offset, limit=limit, sort=tuple(keys) if keys else None)
