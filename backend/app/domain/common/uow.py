"""Unit of Work port.

A use case opens the UoW with ``with uow:``; every repository it reaches
through the UoW shares one underlying session.  Concrete implementations
live in ``app.infra.db.uow``.
"""

from __future__ import annotations

import abc

from app.domain.listing.ports import ListingStore


class UnitOfWork(abc.ABC):
    """Transactional boundary exposing the listing store."""

    listings: ListingStore

    @abc.abstractmethod
    def __enter__(self) -> UnitOfWork:
        ...

    @abc.abstractmethod
    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        ...

    @abc.abstractmethod
    def commit(self) -> None:
        ...

    @abc.abstractmethod
    def rollback(self) -> None:
        ...


__all__ = ["UnitOfWork"]
