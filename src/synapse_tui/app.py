"""Main Textual application for synapse-tui."""

from __future__ import annotations

import logging

from textual.app import App, ComposeResult

from synapse_tui.models import HandleResult, KeyPress
from synapse_tui.screens.prompt_screen import PromptScreen
from synapse_tui.theme import RenderConfig
from synapse_tui.views import Shell
from synapse_tui.widgets.info_bar import InfoBar
from synapse_tui.widgets.tab_bar import TabBar
from synapse_tui.widgets.view_panel import ViewPanel

_logger = logging.getLogger(__name__)


class AdminApp(App):
    """Synapse admin TUI.

    The app is a thin surface: every key goes to ``Shell.dispatch`` and the
    widgets are redrawn from the shell's state afterwards. The prompt overlay
    on top of the view stack is mirrored as a ``PromptScreen``.
    """

    TITLE = "Synapse Admin"

    def __init__(self, shell: Shell, render_config: RenderConfig | None = None) -> None:
        super().__init__()
        self.shell = shell
        self.render_config = render_config or RenderConfig()
        # Held directly: while a PromptScreen is on top, queries hit that screen
        self.tab_bar = TabBar(self.render_config)
        self.view_panel = ViewPanel(shell, self.render_config)
        self.info_bar = InfoBar(self.render_config)

    def compose(self) -> ComposeResult:
        yield self.tab_bar
        yield self.view_panel
        yield self.info_bar

    def on_mount(self) -> None:
        self.shell.start()
        self.view_panel.focus()
        self.sync_ui()

    def handle_keypress(self, key: KeyPress) -> HandleResult:
        """Route one key through the shell and redraw."""
        result = self.shell.dispatch(key)
        if result is HandleResult.EXIT:
            _logger.info("Exit requested")
            self.exit()
            return result
        self.sync_ui()
        return result

    # ── UI Refresh ──

    def sync_ui(self) -> None:
        self._sync_prompt_screen()
        shell = self.shell
        self.tab_bar.set_tabs(
            [view.title for view in shell.tabs],
            shell.tab_cursor.index,
            shell.active_prompt is not None,
        )
        self.info_bar.display = shell.show_help
        self.info_bar.set_items(shell.info_items())
        self.view_panel.border_title = shell.active_view.title
        self.view_panel.refresh()

    def _sync_prompt_screen(self) -> None:
        overlay = self.shell.active_prompt
        screen = self.screen if isinstance(self.screen, PromptScreen) else None
        if screen is not None and screen.overlay is not overlay:
            self.pop_screen()
            screen = None
        if overlay is None:
            return
        if screen is None:
            self.push_screen(PromptScreen(overlay, self.render_config))
        else:
            screen.redraw()
