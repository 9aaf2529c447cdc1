"""Declarative frame description built with rich.

Nothing here talks to a terminal: every function turns model state plus a
RenderConfig into a rich renderable that the Textual widgets display.
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from synapse_tui.fields import EditableField
from synapse_tui.grid import Grid
from synapse_tui.prompt import PromptOverlay
from synapse_tui.theme import RenderConfig


def field_text(field: EditableField, editing: bool, config: RenderConfig) -> Text:
    """A field as styled text; dirty values are recoloured."""
    text = Text.assemble(*field.render_spans(editing, config.active))
    if field.is_dirty() and config.dirty:
        text.stylize(config.dirty)
    return text


def visible_rows(total: int, focused: int, height: int | None) -> range:
    """Window of row indices that fits *height* and contains *focused*."""
    if height is None or height <= 0 or total <= height:
        return range(total)
    start = min(max(0, focused - height + 1), total - height)
    return range(start, start + height)


def grid_cell(grid: Grid, row: int, col: int, config: RenderConfig) -> Text:
    cell = grid.rows[row][col]
    focused = grid.is_focused(row, col)
    text = field_text(cell, focused and grid.edit_mode, config)
    if not focused:
        return Text.assemble(" ", text, " ")
    if not cell.is_editable():
        bracket = config.focus_readonly
    elif grid.edit_mode:
        bracket = config.focus_editing
    else:
        bracket = config.focus_editable
    return Text.assemble(("[", bracket), text, ("]", bracket))


def render_grid(grid: Grid, config: RenderConfig, height: int | None = None) -> Table:
    """The grid as a table; *height* limits the number of body rows."""
    table = Table(
        box=None,
        show_edge=False,
        pad_edge=False,
        expand=False,
        header_style=config.header,
    )
    for title in grid.columns:
        table.add_column(f" {title}", min_width=config.min_column_width, no_wrap=True)

    row_index, _ = grid.focus.clamp(grid.row_count, grid.col_count)
    body_height = None if height is None else max(1, height - 1)
    for y in visible_rows(grid.row_count, row_index, body_height):
        cells = [grid_cell(grid, y, x, config) for x in range(grid.col_count)]
        style = config.focus_row if y == row_index else None
        table.add_row(*cells, style=style)
    return table


def render_prompt(prompt: PromptOverlay, config: RenderConfig) -> Group:
    """Message, then fields and buttons, then the error text."""
    parts: list[RenderableType] = []
    if prompt.message:
        parts.append(Text(prompt.message, style=config.prompt_message))

    cursor = prompt.cursor.clamp(prompt.item_count)
    if prompt.item_count:
        form = Table.grid(padding=(0, 1))
        form.add_column(no_wrap=True)
        form.add_column(width=1)
        form.add_column()
        for idx, (label, field) in enumerate(prompt.fields):
            focused = idx == cursor
            label_style = config.prompt_highlight if focused else config.prompt_label
            form.add_row(Text(label, style=label_style), ":", field_text(field, focused, config))
        for idx, action in enumerate(prompt.buttons, start=len(prompt.fields)):
            style = config.prompt_highlight if idx == cursor else config.prompt_button
            form.add_row(Text(action.label, style=style), "", "")
        parts.append(form)

    if prompt.error:
        parts.append(Text(prompt.error, style=config.prompt_error))
    return Group(*parts)


def render_info(items: Sequence[str], config: RenderConfig) -> Text:
    """Footer hints; a leading ``[key]`` is highlighted."""
    text = Text(style=config.info_text)
    for i, item in enumerate(items):
        if i:
            text.append(config.info_divider)
        end = item.find("]") if item.startswith("[") else -1
        if end > 0:
            text.append(item[: end + 1], style=config.info_key)
            text.append(item[end + 1 :])
        else:
            text.append(item)
    return text


def render_tabs(titles: Sequence[str], active: int, suspended: bool, config: RenderConfig) -> Text:
    """Tab strip; the active tab turns red while a prompt suspends it."""
    text = Text()
    highlight = config.tab_suspended if suspended else config.tab_active
    for i, title in enumerate(titles):
        if i:
            text.append(config.tab_divider)
        text.append(f" {title} ", style=highlight if i == active else "")
    return text


def render_summary(pairs: Sequence[tuple[str, str]], config: RenderConfig) -> Table:
    table = Table.grid(padding=(0, 2))
    table.add_column(style=config.summary_label, no_wrap=True)
    table.add_column(style=config.summary_value)
    for label, value in pairs:
        table.add_row(label, value)
    return table
