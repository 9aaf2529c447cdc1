"""Editable fields: the atomic unit of user-editable state.

A field is one of four variants. The constant variants are read-only and never
dirty; the mutable variants capture a baseline lazily on their first mutation
so that ``revert()`` can restore it and ``is_dirty()`` can compare against it.

Text cursors are kept as a character index, which makes it impossible to land
inside a multi-byte code point. The ``cursor`` property exposes the same
position as a UTF-8 byte offset.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from synapse_tui.models import KeyPress, KeyResult

Span = tuple[str, str]

CURSOR_PLACEHOLDER = " "
DEFAULT_ACTIVE_STYLE = "underline"

EDITING_TEXT_FOOTER = ("[Esc] Restore", "[Enter] Save")
EDITING_FLAG_FOOTER = ("[Esc] Stop editing", "[Enter] Toggle")

# Keys that end editing of a flag without touching it
_FLAG_STOP_KEYS = frozenset({"escape", "q", "Q"})


def _flag_text(value: bool) -> str:
    return "true" if value else "false"


@dataclass
class ConstantText:
    """Read-only text."""

    value: str

    def as_text(self) -> str:
        return self.value

    def render_spans(self, is_editing: bool, active_style: str = DEFAULT_ACTIVE_STYLE) -> list[Span]:
        return [(self.value, "")]

    def handle_key(self, key: KeyPress) -> KeyResult:
        return KeyResult.NOT_HANDLED

    def is_dirty(self) -> bool:
        return False

    def is_editable(self) -> bool:
        return False

    def revert(self) -> None:
        pass

    def forget_baseline(self) -> None:
        pass

    def editing_footer(self) -> tuple[str, ...]:
        return ()


@dataclass
class ConstantFlag:
    """Read-only boolean."""

    value: bool

    def as_text(self) -> str:
        return _flag_text(self.value)

    def render_spans(self, is_editing: bool, active_style: str = DEFAULT_ACTIVE_STYLE) -> list[Span]:
        return [(self.as_text(), "")]

    def handle_key(self, key: KeyPress) -> KeyResult:
        return KeyResult.NOT_HANDLED

    def is_dirty(self) -> bool:
        return False

    def is_editable(self) -> bool:
        return False

    def revert(self) -> None:
        pass

    def forget_baseline(self) -> None:
        pass

    def editing_footer(self) -> tuple[str, ...]:
        return ()


@dataclass
class MutableFlag:
    """Boolean toggled with Enter."""

    current: bool
    original: bool | None = None

    def as_text(self) -> str:
        return _flag_text(self.current)

    def render_spans(self, is_editing: bool, active_style: str = DEFAULT_ACTIVE_STYLE) -> list[Span]:
        if not is_editing:
            return [(self.as_text(), "")]
        return [(self.as_text(), active_style)]

    def handle_key(self, key: KeyPress) -> KeyResult:
        if key.key == "enter":
            if self.original is None:
                self.original = self.current
            self.current = not self.current
            return KeyResult.CONTINUE
        if key.key in _FLAG_STOP_KEYS:
            return KeyResult.STOP
        return KeyResult.NOT_HANDLED

    def is_dirty(self) -> bool:
        return self.original is not None and self.original != self.current

    def is_editable(self) -> bool:
        return True

    def revert(self) -> None:
        if self.original is not None:
            self.current = self.original

    def forget_baseline(self) -> None:
        self.original = None

    def editing_footer(self) -> tuple[str, ...]:
        return EDITING_FLAG_FOOTER


@dataclass
class MutableText:
    """Single-line text with an insertion cursor."""

    current: str
    original: str | None = None
    _index: int = field(default=-1, repr=False)

    def __post_init__(self) -> None:
        if not 0 <= self._index <= len(self.current):
            self._index = len(self.current)

    # ── Cursor ──────────────────────────────────────────────────

    @property
    def index(self) -> int:
        """Cursor position in characters."""
        return self._index

    @property
    def cursor(self) -> int:
        """Cursor position as a UTF-8 byte offset into ``current``."""
        return len(self.current[: self._index].encode("utf-8"))

    def set_cursor(self, offset: int) -> None:
        """Move the cursor to a UTF-8 byte offset.

        Raises ValueError if *offset* is out of range or splits a character.
        """
        encoded = self.current.encode("utf-8")
        if not 0 <= offset <= len(encoded):
            raise ValueError(f"cursor offset {offset} outside 0..{len(encoded)}")
        try:
            prefix = encoded[:offset].decode("utf-8")
        except UnicodeDecodeError:
            raise ValueError(f"cursor offset {offset} is not a character boundary") from None
        self._index = len(prefix)

    # ── Field protocol ──────────────────────────────────────────

    def as_text(self) -> str:
        return self.current

    def render_spans(self, is_editing: bool, active_style: str = DEFAULT_ACTIVE_STYLE) -> list[Span]:
        if not is_editing:
            return [(self.current, "")]
        before = self.current[: self._index]
        if self._index < len(self.current):
            at = self.current[self._index]
            after = self.current[self._index + 1 :]
        else:
            at = CURSOR_PLACEHOLDER
            after = ""
        return [(before, ""), (at, active_style), (after, "")]

    def handle_key(self, key: KeyPress) -> KeyResult:
        name = key.key
        if name == "escape":
            self.revert()
            return KeyResult.STOP
        if name == "enter":
            return KeyResult.STOP
        if name == "delete":
            if self._index < len(self.current):
                self._snapshot()
                self.current = self.current[: self._index] + self.current[self._index + 1 :]
            return KeyResult.CONTINUE
        if name == "backspace":
            if self._index > 0:
                self._snapshot()
                self.current = self.current[: self._index - 1] + self.current[self._index :]
                self._index -= 1
            return KeyResult.CONTINUE
        if name == "left":
            self._index = max(0, self._index - 1)
            return KeyResult.CONTINUE
        if name == "right":
            self._index = min(len(self.current), self._index + 1)
            return KeyResult.CONTINUE
        if name == "home":
            self._index = 0
            return KeyResult.CONTINUE
        if name == "end":
            self._index = len(self.current)
            return KeyResult.CONTINUE
        if key.character:
            self._snapshot()
            self.current = self.current[: self._index] + key.character + self.current[self._index :]
            self._index += len(key.character)
            return KeyResult.CONTINUE
        return KeyResult.NOT_HANDLED

    def is_dirty(self) -> bool:
        return self.original is not None and self.original != self.current

    def is_editable(self) -> bool:
        return True

    def revert(self) -> None:
        if self.original is not None:
            self.current = self.original
        self._index = len(self.current)

    def forget_baseline(self) -> None:
        self.original = None

    def editing_footer(self) -> tuple[str, ...]:
        return EDITING_TEXT_FOOTER

    def _snapshot(self) -> None:
        if self.original is None:
            self.original = self.current


EditableField = Union[ConstantText, ConstantFlag, MutableText, MutableFlag]


def field_from_value(value: str | bool, editable: bool = True) -> EditableField:
    """Wrap a raw record value in the matching field variant."""
    if isinstance(value, bool):
        return MutableFlag(value) if editable else ConstantFlag(value)
    return MutableText(str(value)) if editable else ConstantText(str(value))
