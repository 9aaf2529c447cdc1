"""Modal screen mirroring the shell's active prompt overlay."""

from __future__ import annotations

from rich.console import RenderableType
from textual import events
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widget import Widget

from synapse_tui.models import KeyPress
from synapse_tui.prompt import PromptOverlay
from synapse_tui.render import render_prompt
from synapse_tui.theme import RenderConfig


class PromptView(Widget):
    """Draws a PromptOverlay. Keys go back to the app, which owns routing."""

    can_focus = True

    DEFAULT_CSS = """
    PromptView {
        width: auto;
        height: auto;
        min-width: 40;
        max-width: 90;
    }
    """

    def __init__(self, overlay: PromptOverlay, render_config: RenderConfig) -> None:
        super().__init__(id="prompt-view")
        self.overlay = overlay
        self.render_config = render_config

    def render(self) -> RenderableType:
        return render_prompt(self.overlay, self.render_config)

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self.app.handle_keypress(KeyPress.from_event(event))


class PromptScreen(ModalScreen[None]):
    """Shows one overlay on top of the suspended view."""

    DEFAULT_CSS = """
    PromptScreen {
        align: center middle;
    }
    #prompt-container {
        width: auto;
        height: auto;
        background: $surface;
        border: thick $warning;
        padding: 1 2;
    }
    """

    def __init__(self, overlay: PromptOverlay, render_config: RenderConfig) -> None:
        super().__init__()
        self.overlay = overlay
        self.render_config = render_config

    def compose(self) -> ComposeResult:
        with Container(id="prompt-container"):
            yield PromptView(self.overlay, self.render_config)

    def on_mount(self) -> None:
        self.query_one(PromptView).focus()

    def redraw(self) -> None:
        self.query_one(PromptView).refresh(layout=True)
