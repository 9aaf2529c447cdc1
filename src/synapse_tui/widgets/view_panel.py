"""Main content area showing the active view."""

from __future__ import annotations

from rich.console import RenderableType
from textual import events
from textual.widget import Widget

from synapse_tui.models import KeyPress
from synapse_tui.render import render_grid, render_summary
from synapse_tui.theme import RenderConfig
from synapse_tui.views import HomeView, Shell, UsersView


class ViewPanel(Widget):
    """Renders the shell's active view and forwards every key to the app."""

    can_focus = True

    DEFAULT_CSS = """
    ViewPanel {
        height: 1fr;
        padding: 0 1;
        border: round $surface-lighten-2;
        border-title-align: left;
    }
    ViewPanel:focus {
        border: round $accent;
        border-title-color: $accent;
    }
    """

    def __init__(self, shell: Shell, render_config: RenderConfig) -> None:
        super().__init__(id="view-panel")
        self.shell = shell
        self.render_config = render_config

    def render(self) -> RenderableType:
        view = self.shell.active_view
        if isinstance(view, UsersView):
            return render_grid(view.grid, self.render_config, self.content_size.height)
        if isinstance(view, HomeView):
            return render_summary(view.summary(), self.render_config)
        return ""

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self.app.handle_keypress(KeyPress.from_event(event))
