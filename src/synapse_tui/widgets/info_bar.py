"""Help / hint strip docked at the bottom."""

from __future__ import annotations

from collections.abc import Sequence

from textual.widgets import Static

from synapse_tui.render import render_info
from synapse_tui.theme import RenderConfig


class InfoBar(Static):
    DEFAULT_CSS = """
    InfoBar {
        dock: bottom;
        height: 1;
        padding: 0 1;
        background: $primary-background;
    }
    """

    def __init__(self, render_config: RenderConfig) -> None:
        super().__init__("", id="info-bar")
        self.render_config = render_config
        self.items: list[str] = []

    def set_items(self, items: Sequence[str]) -> None:
        self.items = list(items)
        self.update(render_info(self.items, self.render_config))
