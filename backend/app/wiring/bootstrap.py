"""Dependency injection bootstrap: the single place that binds ports to adapters.

Every factory function here can be used as a FastAPI ``Depends()`` target.
Routers never import concrete implementations directly; they depend on
the abstractions returned by these factories.

Example usage in a router::

    from app.wiring.bootstrap import get_uow, get_list_resources_use_case

    @router.get("/jobs/feed")
    async def job_feed(
        uow: SqlUnitOfWork = Depends(get_uow),
        use_case: ListResourcesUseCase = Depends(get_list_resources_use_case),
    ):
        result = use_case.execute(uow, query)
"""

from __future__ import annotations

from typing import Iterator

from fastapi import Header

from app.config import settings
from app.database import SessionLocal
from app.domain.listing.models import Identity
from app.infra.auth.header_identity import HeaderIdentityProvider
from app.infra.db.uow import SqlUnitOfWork
from app.use_cases.listing.list_resources import ListingLimits, ListResourcesUseCase


# ── Unit of Work ─────────────────────────────────────────────────────────


def get_uow() -> Iterator[SqlUnitOfWork]:
    """Yield a SqlUnitOfWork bound to SessionLocal.

    Designed for FastAPI Depends()::

        uow: SqlUnitOfWork = Depends(get_uow)
    """
    uow = SqlUnitOfWork(SessionLocal)
    yield uow


# ── Identity ─────────────────────────────────────────────────────────────


def get_identity(
    x_user_id: str = Header(default=None, alias="X-User-Id"),
    x_user_role: str = Header(default=None, alias="X-User-Role"),
) -> Identity | None:
    """Resolve the caller from gateway headers (None when anonymous)."""
    return HeaderIdentityProvider(x_user_id, x_user_role).current()


# ── Use Cases ────────────────────────────────────────────────────────────

_list_resources_use_case: ListResourcesUseCase | None = None


def get_list_resources_use_case() -> ListResourcesUseCase:
    """Return a singleton ListResourcesUseCase configured from settings."""
    global _list_resources_use_case
    if _list_resources_use_case is None:
        _list_resources_use_case = ListResourcesUseCase(
            limits=ListingLimits.from_settings(settings)
        )
    return _list_resources_use_case
