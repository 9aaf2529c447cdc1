"""Shared data models for synapse-tui."""

from __future__ import annotations

from enum import Enum
from typing import Any, NamedTuple


class KeyResult(Enum):
    """Outcome of feeding a key to an editable field."""

    CONTINUE = "continue"
    STOP = "stop"
    NOT_HANDLED = "not_handled"


class HandleResult(Enum):
    """Outcome of feeding a key to a view or overlay."""

    IGNORED = "ignored"
    HANDLED = "handled"  # consumed, nothing changed
    REDRAW = "redraw"  # consumed, state changed
    DISMISS = "dismiss"  # overlay resolved to an action
    EXIT = "exit"

    @property
    def consumed(self) -> bool:
        return self is not HandleResult.IGNORED


class KeyPress(NamedTuple):
    """A single key event.

    ``key`` uses Textual key names ("enter", "pageup", "shift+tab", "f5", "a").
    ``character`` is only set for printable input.
    """

    key: str
    character: str | None = None

    @classmethod
    def char(cls, ch: str) -> KeyPress:
        return cls("space" if ch == " " else ch, ch)

    @classmethod
    def from_event(cls, event: Any) -> KeyPress:
        """Build from a ``textual.events.Key``."""
        character = event.character if event.is_printable else None
        return cls(event.key, character)


class SyncState(Enum):
    """Pagination state of a remote collection."""

    HAS_MORE = "has_more"
    EXHAUSTED = "exhausted"
