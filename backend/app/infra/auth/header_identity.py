"""Identity supplied by a trusted upstream gateway in request headers.

The gateway authenticates the caller and forwards ``X-User-Id`` (a UUID)
and ``X-User-Role``.  Missing or malformed headers mean no identity.
"""

from __future__ import annotations

import logging
from uuid import UUID

from app.domain.listing.models import Identity, Role
from app.domain.listing.ports import IdentityProvider

logger = logging.getLogger(__name__)


class HeaderIdentityProvider(IdentityProvider):
    def __init__(self, user_id: str | None, role: str | None) -> None:
        self._user_id = user_id
        self._role = role

    def current(self) -> Identity | None:
        if not self._user_id:
            return None
        try:
            principal = UUID(self._user_id.strip())
        except ValueError:
            logger.warning("Ignoring malformed X-User-Id header")
            return None
        try:
            role = Role((self._role or Role.CANDIDATE.value).strip().upper())
        except ValueError:
            logger.warning("Ignoring unknown X-User-Role %r", self._role)
            return None
        return Identity(principal_id=principal, role=role)
