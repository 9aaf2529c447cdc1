"""Fetch-more-on-demand pagination into a grid."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from synapse_tui.fields import EditableField
from synapse_tui.grid import Grid
from synapse_tui.models import SyncState

_logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 32

FetchPage = Callable[[int, int], Sequence[Any]]
RowFactory = Callable[[Any], Sequence[EditableField]]


class PaginatedSync:
    """Appends remote pages to a grid until a short page is seen.

    Errors raised by *fetch_page* propagate unchanged and leave both the grid
    and the pagination state untouched.
    """

    def __init__(self, grid: Grid, row_factory: RowFactory, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError("page_size must be positive")
        self.grid = grid
        self.row_factory = row_factory
        self.page_size = page_size
        self.state = SyncState.HAS_MORE

    @property
    def exhausted(self) -> bool:
        return self.state is SyncState.EXHAUSTED

    def load_more(self, fetch_page: FetchPage) -> int:
        """Fetch the next page and append it. Returns the number of records fetched."""
        if self.state is SyncState.EXHAUSTED:
            return 0
        offset = self.grid.row_count
        records = fetch_page(offset, self.page_size)
        rows = [self.row_factory(record) for record in records]
        for row in rows:
            if len(row) != self.grid.col_count:
                raise ValueError(f"row has {len(row)} cells, expected {self.grid.col_count}")
        for row in rows:
            self.grid.append_row(row)
        if len(records) < self.page_size:
            self.state = SyncState.EXHAUSTED
            _logger.info("Pagination exhausted after %d rows", self.grid.row_count)
        return len(records)

    def refresh(self, fetch_page: FetchPage) -> int:
        """Drop every row, reset focus and pagination, then load one page."""
        self.grid.clear()
        self.state = SyncState.HAS_MORE
        _logger.info("Refreshing from offset 0")
        return self.load_more(fetch_page)
