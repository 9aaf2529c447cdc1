"""Clamped cursor arithmetic shared by every navigable collection."""

from __future__ import annotations

from dataclasses import dataclass, field


def clamp_index(index: int, limit: int) -> int:
    """Clamp *index* into ``[0, limit - 1]`` (0 when *limit* is 0)."""
    if limit <= 0:
        return 0
    return max(0, min(index, limit - 1))


def shift_index(index: int, delta: int, limit: int) -> int:
    """Move *index* by *delta*, saturating at both ends. Never wraps."""
    if delta == 0:
        return index
    if delta > 0:
        return clamp_index(index + delta, limit)
    return clamp_index(max(0, index + delta), limit)


@dataclass
class FocusCursor:
    """1-D focus position bounded by a live maximum.

    The maximum is passed on every call because the backing collection can
    grow or shrink between calls.
    """

    index: int = 0

    def clamp(self, limit: int) -> int:
        self.index = clamp_index(self.index, limit)
        return self.index

    def shift(self, delta: int, limit: int) -> int:
        self.index = shift_index(self.index, delta, limit)
        return self.index

    def reset(self) -> None:
        self.index = 0


@dataclass
class GridFocus:
    """Row/column focus made of two independent cursors."""

    row: FocusCursor = field(default_factory=FocusCursor)
    col: FocusCursor = field(default_factory=FocusCursor)

    @property
    def position(self) -> tuple[int, int]:
        return self.row.index, self.col.index

    def clamp(self, row_count: int, col_count: int) -> tuple[int, int]:
        self.row.clamp(row_count)
        self.col.clamp(col_count)
        return self.position

    def shift(self, row_delta: int, col_delta: int, row_count: int, col_count: int) -> tuple[int, int]:
        self.row.shift(row_delta, row_count)
        self.col.shift(col_delta, col_count)
        return self.position

    def reset(self) -> None:
        self.row.reset()
        self.col.reset()
