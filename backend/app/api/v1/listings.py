"""
Job and application listing endpoints.

Every endpoint picks its listing context here, never from query
parameters: the public feed is visibility-scoped, the recruiter
dashboards are owner-scoped to the caller, and the candidate
dashboard is scoped to the applications the caller submitted.
"""
import logging
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from ...config import settings
from ...domain.common.errors import (
    MISSING_IDENTITY,
    AuthorizationError,
    StorageError,
    ValidationError,
)
from ...domain.common.query import PageSpec
from ...domain.listing.models import Identity, ListingContext, ResourceKind, ScopeContext
from ...infra.db.uow import SqlUnitOfWork
from ...schemas.listing import (
    ApplicationFilterInput,
    ApplicationItem,
    JobFilterInput,
    JobItem,
    PageResponse,
)
from ...use_cases.listing.list_resources import ListResourcesQuery, ListResourcesUseCase
from ...wiring.bootstrap import get_identity, get_list_resources_use_case, get_uow
from .listing_params import (
    ListingParams,
    parse_application_filters,
    parse_job_filters,
    parse_listing_params,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _page_spec(params: ListingParams) -> Optional[PageSpec]:
    if params.offset == 0 and params.limit is None:
        return None
    limit = params.limit if params.limit is not None else settings.listing_default_limit
    return PageSpec(offset=params.offset, limit=limit)


def _list(
    use_case: ListResourcesUseCase,
    uow: SqlUnitOfWork,
    *,
    resource: ResourceKind,
    context: ListingContext,
    identity: Optional[Identity],
    supplied: Dict[str, Any],
    params: ListingParams,
    item_model,
) -> PageResponse:
    try:
        query = ListResourcesQuery(
            resource=resource,
            scope_context=ScopeContext(context=context, identity=identity),
            filters=supplied,
            sort=params.sort,
            page=_page_spec(params),
        )
        result = use_case.execute(uow, query)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail={"kind": e.kind, "message": e.detail})
    except AuthorizationError as e:
        status_code = 401 if e.kind == MISSING_IDENTITY else 403
        raise HTTPException(status_code=status_code, detail={"kind": e.kind, "message": e.detail})
    except StorageError as e:
        raise HTTPException(status_code=503, detail={"kind": e.kind, "message": "Listing storage unavailable"})
    except Exception as e:
        logger.error("Error listing %s: %s", resource.value, e, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Error listing {resource.value}")

    return PageResponse[item_model].from_page(result.page, item_model)


@router.get("/jobs/feed", response_model=PageResponse[JobItem])
def job_feed(
    filters: JobFilterInput = Depends(parse_job_filters),
    params: ListingParams = Depends(parse_listing_params),
    identity: Optional[Identity] = Depends(get_identity),
    uow: SqlUnitOfWork = Depends(get_uow),
    use_case: ListResourcesUseCase = Depends(get_list_resources_use_case),
):
    """Active, currently visible jobs; open to anonymous callers."""
    return _list(
        use_case, uow,
        resource=ResourceKind.JOBS,
        context=ListingContext.PUBLIC_FEED,
        identity=identity,
        supplied=filters.supplied(),
        params=params,
        item_model=JobItem,
    )


@router.get("/jobs/mine", response_model=PageResponse[JobItem])
def my_jobs(
    filters: JobFilterInput = Depends(parse_job_filters),
    params: ListingParams = Depends(parse_listing_params),
    identity: Optional[Identity] = Depends(get_identity),
    uow: SqlUnitOfWork = Depends(get_uow),
    use_case: ListResourcesUseCase = Depends(get_list_resources_use_case),
):
    """Every job the caller posted, in any status."""
    return _list(
        use_case, uow,
        resource=ResourceKind.JOBS,
        context=ListingContext.OWNER_DASHBOARD,
        identity=identity,
        supplied=filters.supplied(),
        params=params,
        item_model=JobItem,
    )


@router.get("/jobs/{job_id}/applications", response_model=PageResponse[ApplicationItem])
def job_applications(
    job_id: UUID,
    filters: ApplicationFilterInput = Depends(parse_application_filters),
    params: ListingParams = Depends(parse_listing_params),
    identity: Optional[Identity] = Depends(get_identity),
    uow: SqlUnitOfWork = Depends(get_uow),
    use_case: ListResourcesUseCase = Depends(get_list_resources_use_case),
):
    """Applications to one of the caller's jobs.

    A job the caller does not own yields an empty page, not a 404, so the
    endpoint does not reveal which job ids exist.
    """
    supplied = filters.supplied()
    supplied["job_ids"] = [job_id]
    return _list(
        use_case, uow,
        resource=ResourceKind.APPLICATIONS,
        context=ListingContext.OWNER_DASHBOARD,
        identity=identity,
        supplied=supplied,
        params=params,
        item_model=ApplicationItem,
    )


@router.get("/applications/received", response_model=PageResponse[ApplicationItem])
def received_applications(
    filters: ApplicationFilterInput = Depends(parse_application_filters),
    params: ListingParams = Depends(parse_listing_params),
    identity: Optional[Identity] = Depends(get_identity),
    uow: SqlUnitOfWork = Depends(get_uow),
    use_case: ListResourcesUseCase = Depends(get_list_resources_use_case),
):
    """Applications to any of the caller's jobs."""
    return _list(
        use_case, uow,
        resource=ResourceKind.APPLICATIONS,
        context=ListingContext.OWNER_DASHBOARD,
        identity=identity,
        supplied=filters.supplied(),
        params=params,
        item_model=ApplicationItem,
    )


@router.get("/applications", response_model=PageResponse[ApplicationItem])
def my_applications(
    filters: ApplicationFilterInput = Depends(parse_application_filters),
    params: ListingParams = Depends(parse_listing_params),
    identity: Optional[Identity] = Depends(get_identity),
    uow: SqlUnitOfWork = Depends(get_uow),
    use_case: ListResourcesUseCase = Depends(get_list_resources_use_case),
):
    """Applications the caller submitted as a candidate."""
    return _list(
        use_case, uow,
        resource=ResourceKind.APPLICATIONS,
        context=ListingContext.APPLICANT_DASHBOARD,
        identity=identity,
        supplied=filters.supplied(),
        params=params,
        item_model=ApplicationItem,
    )
