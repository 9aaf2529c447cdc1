"""Tab strip widget."""

from __future__ import annotations

from collections.abc import Sequence

from textual.widgets import Static

from synapse_tui.render import render_tabs
from synapse_tui.theme import RenderConfig


class TabBar(Static):
    """Shows the view titles; the active one is highlighted."""

    DEFAULT_CSS = """
    TabBar {
        height: 1;
        padding: 0 1;
        background: $surface-darken-1;
    }
    """

    def __init__(self, render_config: RenderConfig) -> None:
        super().__init__("", id="tab-bar")
        self.render_config = render_config
        self.titles: list[str] = []
        self.active = 0
        self.suspended = False

    def set_tabs(self, titles: Sequence[str], active: int, suspended: bool) -> None:
        self.titles = list(titles)
        self.active = active
        self.suspended = suspended
        self.update(render_tabs(self.titles, active, suspended, self.render_config))
