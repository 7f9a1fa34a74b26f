"""Mandatory authorization scope for listing queries.

The scope is chosen by the calling context and the caller's identity,
never by filter input.  The compiler places the scope predicate first
under the root AND, so no user-supplied criterion can widen it: a forged
``owner_id`` filter only narrows an owner scope further.

Two principal-bound scopes exist.  The owner dashboard shows what the
caller posted (jobs, and applications to those jobs); the applicant
dashboard shows the applications the caller submitted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable
from uuid import UUID

from app.domain.common.errors import FORBIDDEN, MISSING_IDENTITY, AuthorizationError
from app.domain.common.predicate import Leaf, Predicate, and_, or_
from app.domain.common.query import Operator

from .models import JobStatus, ListingContext, ResourceKind, ScopeContext

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class ScopeKind(str, Enum):
    OWNER = "owner"
    APPLICANT = "applicant"
    VISIBILITY = "visibility"


_SCOPE_BY_CONTEXT = {
    ListingContext.PUBLIC_FEED: ScopeKind.VISIBILITY,
    ListingContext.OWNER_DASHBOARD: ScopeKind.OWNER,
    ListingContext.APPLICANT_DASHBOARD: ScopeKind.APPLICANT,
}

# Field holding the bound principal, per scope kind and resource.
_PRINCIPAL_FIELD = {
    (ScopeKind.OWNER, ResourceKind.JOBS): "created_by_id",
    (ScopeKind.OWNER, ResourceKind.APPLICATIONS): "job_owner_id",
    (ScopeKind.APPLICANT, ResourceKind.APPLICATIONS): "applicant_id",
}


@dataclass(frozen=True)
class ScopeConstraint:
    kind: ScopeKind
    resource: ResourceKind
    predicate: Predicate
    principal_id: UUID | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScopeGuard:
    """Derive the ScopeConstraint for a listing request."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or _utcnow

    def constrain(
        self, resource: ResourceKind, scope_context: ScopeContext
    ) -> ScopeConstraint:
        kind = _SCOPE_BY_CONTEXT[scope_context.context]
        if kind == ScopeKind.VISIBILITY:
            return self._visibility_scope(resource)
        return self._principal_scope(kind, resource, scope_context)

    def _principal_scope(
        self, kind: ScopeKind, resource: ResourceKind, scope_context: ScopeContext
    ) -> ScopeConstraint:
        field = _PRINCIPAL_FIELD.get((kind, resource))
        if field is None:
            logger.warning("Denied %s listing of %s", kind.value, resource.value)
            raise AuthorizationError(
                f"{resource.value} cannot be listed from the {kind.value} dashboard",
                kind=FORBIDDEN,
            )
        identity = scope_context.identity
        if identity is None or not identity.is_authenticated:
            logger.warning(
                "Denied %s %s listing: no authenticated identity",
                kind.value,
                resource.value,
            )
            raise AuthorizationError(
                f"listing your own {resource.value} requires an authenticated identity",
                kind=MISSING_IDENTITY,
            )
        principal = identity.principal_id
        return ScopeConstraint(
            kind=kind,
            resource=resource,
            predicate=Leaf(field, Operator.EQ, (principal,)),
            principal_id=principal,
        )

    def _visibility_scope(self, resource: ResourceKind) -> ScopeConstraint:
        if resource != ResourceKind.JOBS:
            logger.warning("Denied public listing of %s", resource.value)
            raise AuthorizationError(
                f"{resource.value} cannot be listed publicly", kind=FORBIDDEN
            )
        now = self._clock()
        predicate = and_(
            Leaf("status", Operator.EQ, (JobStatus.ACTIVE,)),
            or_(
                Leaf("visible_until", Operator.EXISTS, (False,)),
                Leaf("visible_until", Operator.GTE, (now,)),
            ),
        )
        return ScopeConstraint(
            kind=ScopeKind.VISIBILITY, resource=resource, predicate=predicate
        )


__all__ = ["Clock", "ScopeKind", "ScopeConstraint", "ScopeGuard"]
