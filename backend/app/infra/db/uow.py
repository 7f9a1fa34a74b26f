"""SQLAlchemy Unit of Work for listing requests.

One Session per ``with`` block, with the listing store bound to it.
Listing only reads, so leaving the block always ends the transaction
with a rollback unless the caller committed explicitly; nothing a
request touched lingers in the session's transaction.
"""

from __future__ import annotations

from typing import Self

from sqlalchemy.orm import Session, sessionmaker

from app.domain.common.uow import UnitOfWork
from app.infra.db.repositories.listing_repo import SqlListingStore


class SqlUnitOfWork(UnitOfWork):
    """Request-scoped Session exposing ``listings``."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None
        self._committed = False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError("SqlUnitOfWork used outside its 'with' block")
        return self._session

    def __enter__(self) -> Self:
        self._session = self._session_factory()
        self._committed = False
        self.listings = SqlListingStore(self._session)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            if exc_type is not None or not self._committed:
                self.rollback()
        finally:
            self._session.close()
            self._session = None

    def commit(self) -> None:
        self.session.commit()
        self._committed = True

    def rollback(self) -> None:
        self.session.rollback()
