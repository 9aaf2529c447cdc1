"""Editable grid: rows of fields with a 2-D focus and an edit mode."""

from __future__ import annotations

from collections.abc import Sequence

from synapse_tui.fields import EditableField
from synapse_tui.focus import GridFocus
from synapse_tui.models import HandleResult, KeyPress, KeyResult

PAGE_STEP = 5

# key -> (row delta, column delta)
_MOVES: dict[str, tuple[int, int]] = {
    "up": (-1, 0),
    "down": (1, 0),
    "pageup": (-PAGE_STEP, 0),
    "pagedown": (PAGE_STEP, 0),
    "left": (0, -1),
    "right": (0, 1),
}


class Grid:
    """Ordered rows of fixed arity, one column schema for all rows."""

    def __init__(self, columns: Sequence[str]) -> None:
        if not columns:
            raise ValueError("a grid needs at least one column")
        self.columns: tuple[str, ...] = tuple(columns)
        self.rows: list[list[EditableField]] = []
        self.focus = GridFocus()
        self.edit_mode = False

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def col_count(self) -> int:
        return len(self.columns)

    # ── Rows ────────────────────────────────────────────────────

    def append_row(self, row: Sequence[EditableField]) -> None:
        if len(row) != self.col_count:
            raise ValueError(f"row has {len(row)} cells, expected {self.col_count}")
        self.rows.append(list(row))

    def clear(self) -> None:
        """Drop all rows and reset focus to the origin."""
        self.rows.clear()
        self.focus.reset()
        self.edit_mode = False

    def cell(self, row: int, col: int) -> EditableField | None:
        if 0 <= row < self.row_count and 0 <= col < self.col_count:
            return self.rows[row][col]
        return None

    def focused_cell(self) -> EditableField | None:
        row, col = self.focus.clamp(self.row_count, self.col_count)
        return self.cell(row, col)

    def editing_cell(self) -> EditableField | None:
        if not self.edit_mode:
            return None
        return self.focused_cell()

    def is_focused(self, row: int, col: int) -> bool:
        return self.focus.position == (row, col)

    def on_last_row(self) -> bool:
        return self.row_count > 0 and self.focus.row.index >= self.row_count - 1

    # ── Editing ─────────────────────────────────────────────────

    def begin_edit(self) -> bool:
        """Enter edit mode if the focused cell accepts edits."""
        cell = self.focused_cell()
        self.edit_mode = cell is not None and cell.is_editable()
        return self.edit_mode

    def end_edit(self) -> None:
        self.edit_mode = False

    def move_focus(self, row_delta: int, col_delta: int) -> bool:
        """Shift focus on both axes. Returns True if the position changed.

        Any move while editing leaves edit mode; the edit itself is kept.
        """
        old = self.focus.clamp(self.row_count, self.col_count)
        new = self.focus.shift(row_delta, col_delta, self.row_count, self.col_count)
        if self.edit_mode and (new != old or not self._focused_editable()):
            self.edit_mode = False
        return new != old

    def count_dirty(self) -> int:
        return sum(1 for row in self.rows for cell in row if cell.is_dirty())

    # ── Keys ────────────────────────────────────────────────────

    def handle_key(self, key: KeyPress) -> HandleResult:
        editing = self.editing_cell()
        if editing is not None:
            result = editing.handle_key(key)
            if result is KeyResult.CONTINUE:
                return HandleResult.REDRAW
            if result is KeyResult.STOP:
                self.edit_mode = False
                return HandleResult.REDRAW

        if key.key in _MOVES:
            row_delta, col_delta = _MOVES[key.key]
            was_editing = self.edit_mode
            moved = self.move_focus(row_delta, col_delta)
            if moved or was_editing != self.edit_mode:
                return HandleResult.REDRAW
            return HandleResult.HANDLED
        if key.key == "home" and not self.edit_mode:
            return self._jump_row(0)
        if key.key == "end" and not self.edit_mode:
            return self._jump_row(self.row_count - 1)
        if key.key == "enter":
            if self.edit_mode:
                self.edit_mode = False
                return HandleResult.REDRAW
            if self.begin_edit():
                return HandleResult.REDRAW
            return HandleResult.HANDLED
        if key.key == "escape" and self.edit_mode:
            self.edit_mode = False
            return HandleResult.REDRAW
        return HandleResult.IGNORED

    def _jump_row(self, row: int) -> HandleResult:
        old = self.focus.row.index
        self.focus.row.index = row
        self.focus.clamp(self.row_count, self.col_count)
        return HandleResult.REDRAW if self.focus.row.index != old else HandleResult.HANDLED

    def _focused_editable(self) -> bool:
        cell = self.focused_cell()
        return cell is not None and cell.is_editable()
