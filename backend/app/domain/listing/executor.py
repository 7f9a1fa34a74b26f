"""Run a compiled listing query against a store and shape the page."""

from __future__ import annotations

import logging
from typing import Any, Callable

from .compiler import CompiledQuery
from .models import Page
from .ports import ListingStore

logger = logging.getLogger(__name__)


class PagedQueryExecutor:
    """Clamp the window, call the store once, wrap the result in a Page.

    Store failures propagate unchanged.  An empty result is an empty
    page, never an error.
    """

    def __init__(
        self,
        store: ListingStore,
        *,
        max_limit: int,
        normalize: Callable[[Any], Any] | None = None,
    ) -> None:
        if max_limit <= 0:
            raise ValueError(f"max_limit must be > 0, got {max_limit}")
        self._store = store
        self._max_limit = max_limit
        self._normalize = normalize

    def execute(self, compiled: CompiledQuery) -> Page:
        page = compiled.page.clamped(self._max_limit)
        if page.limit != compiled.page.limit:
            logger.info(
                "Clamped %s limit from %d to %d",
                compiled.resource.value,
                compiled.page.limit,
                page.limit,
            )
        logger.debug(
            "Listing %s offset=%d limit=%d sort=%s",
            compiled.resource.value,
            page.offset,
            page.limit,
            ",".join(f"{k.field}:{k.order.value}" for k in compiled.sort.keys),
        )

        rows, total = self._store.fetch_page(
            compiled.resource,
            compiled.predicate,
            compiled.sort,
            page.offset,
            page.limit,
        )

        items = tuple(rows)
        if self._normalize is not None:
            items = tuple(self._normalize(row) for row in items)
        return Page(
            items=items,
            total_count=total,
            offset=page.offset,
            limit=page.limit,
        )


__all__ = ["PagedQueryExecutor"]
