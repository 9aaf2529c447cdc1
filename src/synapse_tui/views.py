"""Top-level views, the view stack and key routing."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, Union

from synapse_tui.auth import CredentialFlow
from synapse_tui.backend import BackendError, SynapseClient, UserRecord
from synapse_tui.fields import EditableField, field_from_value
from synapse_tui.focus import FocusCursor
from synapse_tui.grid import PAGE_STEP, Grid
from synapse_tui.models import HandleResult, KeyPress
from synapse_tui.prompt import Action, PromptOverlay, confirm, notice
from synapse_tui.sync import DEFAULT_PAGE_SIZE, PaginatedSync

_logger = logging.getLogger(__name__)

USER_COLUMNS = ("ID", "Name", "Admin", "Guest", "Active")

DEFAULT_INFO = ["[F1] Hide Help", "[Esc/Q] Exit", "[Tab/Shift+Tab] Switch Tabs"]

_QUIT_KEYS = frozenset({"q", "Q", "escape"})


class View(Protocol):
    title: str

    def enter(self) -> None: ...

    def handle_key(self, key: KeyPress) -> HandleResult: ...

    def info_items(self) -> list[str]: ...


class PromptActiveError(RuntimeError):
    """Raised when an overlay is opened while another one is active."""


PromptCallback = Callable[[PromptOverlay], HandleResult]


@dataclass
class PromptLayer:
    overlay: PromptOverlay
    on_result: PromptCallback | None = None


class ViewStack:
    """A base view with at most one prompt overlay suspended on top of it."""

    MAX_DEPTH = 2

    def __init__(self, base: View) -> None:
        self._layers: list[Union[View, PromptLayer]] = [base]

    @property
    def depth(self) -> int:
        return len(self._layers)

    @property
    def base(self) -> View:
        return self._layers[0]  # type: ignore[return-value]

    @property
    def top_prompt(self) -> PromptLayer | None:
        top = self._layers[-1]
        return top if isinstance(top, PromptLayer) else None

    @property
    def active_prompt(self) -> PromptOverlay | None:
        layer = self.top_prompt
        return layer.overlay if layer is not None else None

    def replace_base(self, view: View) -> None:
        if self.top_prompt is not None:
            raise PromptActiveError("cannot switch views while a prompt is active")
        self._layers[0] = view

    def push_prompt(self, overlay: PromptOverlay, on_result: PromptCallback | None = None) -> None:
        if self.depth >= self.MAX_DEPTH:
            raise PromptActiveError("a prompt is already active")
        self._layers.append(PromptLayer(overlay, on_result))
        _logger.debug("Prompt opened: %r", overlay)

    def pop_prompt(self) -> PromptLayer:
        layer = self.top_prompt
        if layer is None:
            raise PromptActiveError("no prompt to close")
        self._layers.pop()
        _logger.debug("Prompt closed: %r", layer.overlay)
        return layer


# ── Views ─────────────────────────────────────────────────────────


def user_row(user: UserRecord) -> list[EditableField]:
    """Map a user record onto the users grid columns."""
    return [
        field_from_value(user.name, editable=False),
        field_from_value(user.displayname),
        field_from_value(user.admin),
        field_from_value(user.is_guest),
        field_from_value(not user.deactivated),
    ]


class UsersView:
    """Paginated, editable list of homeserver users."""

    title = "Users"

    def __init__(
        self,
        client: SynapseClient,
        open_prompt: Callable[[PromptOverlay], None],
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.client = client
        self.open_prompt = open_prompt
        self.grid = Grid(USER_COLUMNS)
        self.sync = PaginatedSync(self.grid, user_row, page_size)
        self.entered = False

    def enter(self) -> None:
        if self.entered:
            return
        self.entered = True
        self.load_more()

    def load_more(self) -> HandleResult:
        return self._load(self.sync.load_more)

    def refresh(self) -> HandleResult:
        return self._load(self.sync.refresh)

    def handle_key(self, key: KeyPress) -> HandleResult:
        if key.key == "f5":
            return self.refresh()

        at_end = self.grid.on_last_row()
        result = self.grid.handle_key(key)
        if key.key in ("down", "pagedown") and at_end and not self.sync.exhausted:
            before = self.grid.row_count
            result = self.load_more()
            if self.grid.row_count > before:
                # Finish the move on the freshly loaded rows
                step = PAGE_STEP if key.key == "pagedown" else 1
                self.grid.move_focus(step, 0)
        return result

    def info_items(self) -> list[str]:
        editing = self.grid.editing_cell()
        if editing is not None:
            return ["[EDITING]", *editing.editing_footer()]
        items = ["[F5] Refresh"]
        focused = self.grid.focused_cell()
        if focused is not None and focused.is_editable():
            items.append("[Enter] Edit")
        dirty = self.grid.count_dirty()
        if dirty:
            items.append(f"Pending changes ({dirty})")
        return items

    def _load(self, operation: Callable[..., int]) -> HandleResult:
        try:
            operation(self.client.list_users)
        except BackendError as e:
            _logger.warning("Loading users failed (%s): %s", e.kind.value, e.message)
            self.open_prompt(notice(e.message))
        return HandleResult.REDRAW


class HomeView:
    """Summary of the session and the loaded data."""

    title = "Summary"

    def __init__(self, client: SynapseClient, users: UsersView) -> None:
        self.client = client
        self.users = users

    def enter(self) -> None:
        pass

    def handle_key(self, key: KeyPress) -> HandleResult:
        return HandleResult.IGNORED

    def info_items(self) -> list[str]:
        return []

    def summary(self) -> list[tuple[str, str]]:
        sync = self.users.sync
        if not self.users.entered:
            loaded = "not loaded"
        elif sync.exhausted:
            loaded = f"{self.users.grid.row_count} (all)"
        else:
            loaded = f"{self.users.grid.row_count} (more available)"
        return [
            ("Server", self.client.host or "-"),
            ("Session", "authenticated" if self.client.token_valid else "not authenticated"),
            ("Users loaded", loaded),
            ("Pending changes", str(self.users.grid.count_dirty())),
        ]


# ── Shell ─────────────────────────────────────────────────────────


class Shell:
    """Owns the tabs and the view stack and routes every key event.

    Routing order: an active prompt takes every key; otherwise the active view
    sees it first and unhandled keys fall through to the global bindings.
    """

    def __init__(
        self,
        client: SynapseClient,
        page_size: int = DEFAULT_PAGE_SIZE,
        show_help: bool = True,
        on_login: Callable[[SynapseClient], None] | None = None,
    ) -> None:
        self.client = client
        self.credentials = CredentialFlow(client, on_success=on_login)
        self.show_help = show_help
        self.tab_cursor = FocusCursor()
        self.users = UsersView(client, self.open_prompt, page_size)
        self.home = HomeView(client, self.users)
        self.tabs: list[View] = [self.home, self.users]
        self.stack = ViewStack(self.home)

    @property
    def active_view(self) -> View:
        return self.stack.base

    @property
    def active_prompt(self) -> PromptOverlay | None:
        return self.stack.active_prompt

    def start(self) -> None:
        self.ensure_session()
        if self.active_prompt is None:
            self.active_view.enter()

    def open_prompt(self, overlay: PromptOverlay, on_result: PromptCallback | None = None) -> None:
        self.stack.push_prompt(overlay, on_result)

    def ensure_session(self) -> None:
        """Force the credential prompt while the session is not authenticated."""
        if self.client.requires_setup and self.active_prompt is None:
            self.open_prompt(self.credentials.build_prompt(), self._on_credentials)

    def dispatch(self, key: KeyPress) -> HandleResult:
        self.ensure_session()
        if key.key == "f1":
            # The help strip belongs to the shell, not to any view
            self.show_help = not self.show_help
            return HandleResult.REDRAW
        layer = self.stack.top_prompt
        if layer is not None:
            result = layer.overlay.handle_key(key)
            if result is HandleResult.DISMISS:
                result = self._resolve(layer)
        else:
            result = self.active_view.handle_key(key)
            if not result.consumed:
                result = self._handle_global(key)
        if result is not HandleResult.EXIT:
            self.ensure_session()
        return result

    def switch_tab(self, delta: int) -> HandleResult:
        if self.active_prompt is not None:
            return HandleResult.HANDLED
        old = self.tab_cursor.index
        self.tab_cursor.shift(delta, len(self.tabs))
        if self.tab_cursor.index == old:
            return HandleResult.HANDLED
        view = self.tabs[self.tab_cursor.index]
        self.stack.replace_base(view)
        view.enter()
        return HandleResult.REDRAW

    def info_items(self) -> list[str]:
        prompt = self.active_prompt
        if prompt is not None:
            return ["[F1] Hide Help", *prompt.info_items()]
        return self.active_view.info_items() or list(DEFAULT_INFO)

    def _handle_global(self, key: KeyPress) -> HandleResult:
        if key.key == "tab":
            return self.switch_tab(1)
        if key.key == "shift+tab":
            return self.switch_tab(-1)
        if key.key in _QUIT_KEYS:
            return self._request_exit()
        return HandleResult.IGNORED

    def _request_exit(self) -> HandleResult:
        dirty = self.users.grid.count_dirty()
        if not dirty:
            return HandleResult.EXIT
        self.open_prompt(
            confirm(f"Discard {dirty} pending change(s) and exit?"),
            self._on_quit_confirmed,
        )
        return HandleResult.REDRAW

    def _resolve(self, layer: PromptLayer) -> HandleResult:
        """Close a resolved prompt and hand its result to the owner.

        The owner may reopen the overlay (e.g. to show a validation error), in
        which case it goes straight back on the stack.
        """
        self.stack.pop_prompt()
        outcome = HandleResult.REDRAW
        if layer.on_result is not None:
            outcome = layer.on_result(layer.overlay)
        if not layer.overlay.dismissed:
            self.stack.push_prompt(layer.overlay, layer.on_result)
        return outcome

    def _on_credentials(self, prompt: PromptOverlay) -> HandleResult:
        if not self.credentials.submit(prompt):
            return HandleResult.EXIT
        # Session restored after expiry: fill an empty users tab
        if prompt.dismissed and self.active_view is self.users and self.users.grid.row_count == 0:
            return self.users.load_more()
        return HandleResult.REDRAW

    def _on_quit_confirmed(self, prompt: PromptOverlay) -> HandleResult:
        if prompt.result is Action.YES:
            return HandleResult.EXIT
        return HandleResult.REDRAW
