"""Modal prompt overlay: message, labelled fields and action buttons.

Fields occupy the low indices of the prompt cursor and buttons the high ones,
so that field and button navigation behave like one continuous list.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from synapse_tui.fields import EditableField
from synapse_tui.focus import FocusCursor
from synapse_tui.models import HandleResult, KeyPress, KeyResult

PAGE_STEP = 5


class Action(Enum):
    """Buttons a prompt can offer."""

    YES = "Yes"
    NO = "No"
    OK = "Ok"
    CANCEL = "Cancel"
    EXIT = "Exit"

    @property
    def label(self) -> str:
        return f"[{self.value}]"

    @property
    def is_exit(self) -> bool:
        return self in (Action.EXIT, Action.CANCEL)


_MOVES: dict[str, int] = {
    "up": -1,
    "down": 1,
    "pageup": -PAGE_STEP,
    "pagedown": PAGE_STEP,
}


class PromptOverlay:
    """A modal form that owns all keyboard input while it is shown."""

    def __init__(
        self,
        message: str = "",
        error: str = "",
        fields: Iterable[tuple[str, EditableField]] | None = None,
        buttons: Iterable[Action] | None = None,
        cursor: int = 0,
    ) -> None:
        self.message = message
        self.error = error
        self.fields: list[tuple[str, EditableField]] = list(fields or [])
        self.buttons: list[Action] = list(buttons or [])
        self.cursor = FocusCursor(cursor)
        self.cursor.clamp(self.item_count)
        self.result: Action | None = None

    def __repr__(self) -> str:
        return f"PromptOverlay(message={self.message!r}, error={self.error!r}, result={self.result})"

    @property
    def item_count(self) -> int:
        return len(self.fields) + len(self.buttons)

    @property
    def dismissed(self) -> bool:
        return self.result is not None

    def focused_field(self) -> EditableField | None:
        index = self.cursor.clamp(self.item_count)
        if index < len(self.fields):
            return self.fields[index][1]
        return None

    def focused_button(self) -> Action | None:
        index = self.cursor.clamp(self.item_count) - len(self.fields)
        if 0 <= index < len(self.buttons):
            return self.buttons[index]
        return None

    def default_action(self) -> Action:
        return self.buttons[0] if self.buttons else Action.OK

    def field_text(self, index: int) -> str:
        return self.fields[index][1].as_text()

    def focus(self, index: int) -> None:
        self.cursor.index = index
        self.cursor.clamp(self.item_count)

    def reopen(self, error: str, focus: int | None = None) -> None:
        """Keep the overlay open with a new error instead of dismissing it."""
        self.result = None
        self.error = error
        if focus is not None:
            self.focus(focus)

    def handle_key(self, key: KeyPress) -> HandleResult:
        field = self.focused_field()
        if field is not None and field.handle_key(key) is KeyResult.CONTINUE:
            return HandleResult.REDRAW

        if key.key in _MOVES:
            old = self.cursor.index
            self.cursor.shift(_MOVES[key.key], self.item_count)
            return HandleResult.REDRAW if self.cursor.index != old else HandleResult.HANDLED
        if key.key == "enter":
            self.result = self.focused_button() or self.default_action()
            return HandleResult.DISMISS
        if key.key == "escape":
            self.result = Action.EXIT
            return HandleResult.DISMISS
        # The overlay swallows everything else
        return HandleResult.HANDLED

    def info_items(self) -> list[str]:
        return ["[Esc] Back", f"[Enter] {self.default_action().value}"]


def notice(error: str, message: str = "") -> PromptOverlay:
    """Overlay showing an error with a single acknowledgement button."""
    return PromptOverlay(message=message, error=error, buttons=[Action.OK])


def confirm(message: str) -> PromptOverlay:
    return PromptOverlay(message=message, buttons=[Action.YES, Action.NO])
