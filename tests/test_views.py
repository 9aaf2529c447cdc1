"""Tests for views, the view stack and shell key routing."""

import httpx
import pytest

from synapse_tui.backend import SynapseClient, UserRecord
from synapse_tui.fields import ConstantText, MutableFlag, MutableText
from synapse_tui.models import HandleResult, KeyPress
from synapse_tui.prompt import Action, PromptOverlay, notice
from synapse_tui.views import (
    DEFAULT_INFO,
    HomeView,
    PromptActiveError,
    Shell,
    UsersView,
    ViewStack,
    user_row,
)

HOST = "https://hs.example"
TOKEN = "secret"


class FakeHomeserver:
    """Minimal admin API: token check plus a paginated user list."""

    def __init__(self, user_count=40):
        self.users = [
            {"name": f"@user{i}:hs.example", "displayname": f"User {i}", "admin": 0, "is_guest": 0, "deactivated": 0}
            for i in range(user_count)
        ]
        self.fail_status = None
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        if self.fail_status is not None:
            return httpx.Response(self.fail_status)
        if request.headers.get("Authorization") != f"Bearer {TOKEN}":
            return httpx.Response(401, json={"errcode": "M_UNKNOWN_TOKEN"})
        if request.url.path.endswith("/username_available"):
            return httpx.Response(200, json={"available": False})
        offset = int(request.url.params["from"])
        limit = int(request.url.params["limit"])
        page = self.users[offset : offset + limit]
        return httpx.Response(200, json={"users": page, "total": len(self.users)})

    def list_requests(self):
        return [r for r in self.requests if r.url.path.endswith("/users")]


def key(name):
    return KeyPress.char(name) if len(name) == 1 else KeyPress(name)


def press(shell, *names):
    result = None
    for name in names:
        result = shell.dispatch(key(name))
    return result


def type_text(shell, text):
    for ch in text:
        shell.dispatch(KeyPress.char(ch))


@pytest.fixture
def server():
    return FakeHomeserver()


@pytest.fixture
def make_shell(server):
    def factory(logged_in=True, page_size=32, **kwargs):
        client = SynapseClient(HOST, access_token=TOKEN if logged_in else "", transport=httpx.MockTransport(server))
        client.token_valid = logged_in
        shell = Shell(client, page_size=page_size, **kwargs)
        shell.start()
        return shell

    return factory


class TestViewStack:
    def test_single_overlay(self):
        stack = ViewStack(object())
        stack.push_prompt(notice("a"))
        with pytest.raises(PromptActiveError):
            stack.push_prompt(notice("b"))
        assert stack.depth == 2

    def test_replace_base_blocked_by_prompt(self):
        stack = ViewStack(object())
        stack.push_prompt(notice("a"))
        with pytest.raises(PromptActiveError):
            stack.replace_base(object())

    def test_pop_without_prompt(self):
        with pytest.raises(PromptActiveError):
            ViewStack(object()).pop_prompt()

    def test_active_prompt(self):
        stack = ViewStack(object())
        assert stack.active_prompt is None
        overlay = notice("a")
        stack.push_prompt(overlay)
        assert stack.active_prompt is overlay
        assert stack.pop_prompt().overlay is overlay
        assert stack.depth == 1


class TestUserRow:
    def test_columns(self):
        row = user_row(UserRecord("@a:hs", "Alice", admin=True, deactivated=True))
        assert [cell.as_text() for cell in row] == ["@a:hs", "Alice", "true", "false", "false"]
        assert not row[0].is_editable()
        assert all(cell.is_editable() for cell in row[1:])
        assert isinstance(row[0], ConstantText)
        assert isinstance(row[1], MutableText)
        assert all(isinstance(cell, MutableFlag) for cell in row[2:])


class TestLogin:
    def test_credentials_forced_on_start(self, make_shell):
        shell = make_shell(logged_in=False)
        prompt = shell.active_prompt
        assert prompt is not None
        assert prompt.field_text(0) == HOST
        assert shell.active_view is shell.home

    def test_login_success(self, make_shell):
        logins = []
        shell = make_shell(logged_in=False, on_login=logins.append)
        type_text(shell, TOKEN)
        assert press(shell, "enter") is HandleResult.REDRAW
        assert shell.active_prompt is None
        assert shell.client.token_valid
        assert logins == [shell.client]

    def test_wrong_token_reopens_prompt(self, make_shell):
        shell = make_shell(logged_in=False)
        prompt = shell.active_prompt
        type_text(shell, "nope")
        press(shell, "enter")
        assert shell.active_prompt is prompt
        assert "401" in prompt.error
        assert prompt.cursor.index == 1

    @pytest.mark.parametrize(
        "host, token, focus",
        [("http://[::1", TOKEN, 0), (HOST, "sécret", 1)],
    )
    def test_bad_input_stays_in_prompt(self, make_shell, host, token, focus):
        shell = make_shell(logged_in=False)
        prompt = shell.active_prompt
        prompt.fields[0][1].current = host
        prompt.fields[1][1].current = token
        assert press(shell, "enter") is HandleResult.REDRAW
        assert shell.active_prompt is prompt
        assert prompt.error
        assert prompt.cursor.index == focus

    def test_exit_from_credentials(self, make_shell):
        shell = make_shell(logged_in=False)
        assert press(shell, "escape") is HandleResult.EXIT

    def test_exit_button(self, make_shell):
        shell = make_shell(logged_in=False)
        assert press(shell, "down", "down", "enter") is HandleResult.EXIT


class TestTabs:
    def test_switch_loads_users_once(self, make_shell, server):
        shell = make_shell()
        assert press(shell, "tab") is HandleResult.REDRAW
        assert shell.active_view is shell.users
        assert shell.users.grid.row_count == 32
        press(shell, "shift+tab", "tab")
        assert len(server.list_requests()) == 1

    def test_switching_saturates(self, make_shell):
        shell = make_shell()
        assert press(shell, "shift+tab") is HandleResult.HANDLED
        press(shell, "tab")
        assert press(shell, "tab") is HandleResult.HANDLED
        assert shell.tab_cursor.index == 1

    def test_prompt_blocks_everything(self, make_shell):
        shell = make_shell()
        press(shell, "tab")
        grid = shell.users.grid
        shell.open_prompt(notice("hello"))
        press(shell, "down", "pagedown", "right", "tab", "q", "f5")
        assert grid.focus.position == (0, 0)
        assert not grid.edit_mode
        assert shell.active_view is shell.users
        assert shell.active_prompt is not None

    def test_f1_toggles_help_even_with_prompt(self, make_shell):
        shell = make_shell(logged_in=False)
        assert shell.show_help
        press(shell, "f1")
        assert not shell.show_help
        assert shell.active_prompt is not None


class TestUsersView:
    def test_pagedown_at_last_row_moves_a_page(self, make_shell):
        shell = make_shell(page_size=8)
        press(shell, "tab", "end", "pagedown")
        grid = shell.users.grid
        assert grid.row_count == 16
        assert grid.focus.row.index == 12

    def test_fetch_more_at_last_row(self, make_shell, server):
        shell = make_shell(page_size=4)
        press(shell, "tab")
        grid = shell.users.grid
        assert grid.row_count == 4
        press(shell, "end")
        press(shell, "down")
        assert grid.row_count == 8
        assert grid.focus.row.index == 4
        offsets = [r.url.params["from"] for r in server.list_requests()]
        assert offsets == ["0", "4"]

    def test_no_fetch_when_exhausted(self, make_shell, server):
        server.users = server.users[:3]
        shell = make_shell(page_size=4)
        press(shell, "tab", "end", "down", "pagedown")
        assert shell.users.sync.exhausted
        assert len(server.list_requests()) == 1

    def test_refresh(self, make_shell, server):
        shell = make_shell(page_size=4)
        press(shell, "tab", "end", "down")
        assert shell.users.grid.row_count == 8
        press(shell, "f5")
        assert shell.users.grid.row_count == 4
        assert shell.users.grid.focus.position == (0, 0)

    def test_edit_display_name(self, make_shell):
        shell = make_shell()
        press(shell, "tab", "right", "enter")
        type_text(shell, "q!")
        press(shell, "enter")
        assert shell.users.grid.cell(0, 1).as_text() == "User 0q!"
        assert shell.users.grid.count_dirty() == 1
        assert "Pending changes (1)" in shell.info_items()

    def test_editing_info(self, make_shell):
        shell = make_shell()
        press(shell, "tab", "right", "right", "enter")
        assert shell.info_items() == ["[EDITING]", "[Esc] Stop editing", "[Enter] Toggle"]

    def test_browse_info(self, make_shell):
        shell = make_shell()
        press(shell, "tab")
        assert shell.info_items() == ["[F5] Refresh"]
        press(shell, "right")
        assert shell.info_items() == ["[F5] Refresh", "[Enter] Edit"]

    def test_load_error_opens_notice(self, make_shell, server):
        shell = make_shell()
        server.fail_status = 500
        press(shell, "tab")
        prompt = shell.active_prompt
        assert prompt is not None
        assert "500" in prompt.error
        assert prompt.buttons == [Action.OK]
        press(shell, "enter")
        assert shell.active_prompt is None
        assert shell.users.grid.row_count == 0

    def test_expired_session_asks_credentials_after_notice(self, make_shell):
        shell = make_shell()
        shell.client.access_token = "expired"
        press(shell, "tab")
        assert "401" in shell.active_prompt.error
        assert shell.client.requires_setup
        press(shell, "enter")
        credentials = shell.active_prompt
        assert credentials is not None
        assert credentials.fields

        field = credentials.fields[1][1]
        field.current = ""
        press(shell, "end")
        type_text(shell, TOKEN)
        press(shell, "enter")
        assert shell.active_prompt is None
        assert shell.users.grid.row_count == 32


class TestHomeView:
    def test_summary(self, make_shell):
        shell = make_shell(page_size=50)
        assert dict(shell.home.summary())["Users loaded"] == "not loaded"
        press(shell, "tab", "shift+tab")
        summary = dict(shell.home.summary())
        assert summary["Server"] == HOST
        assert summary["Session"] == "authenticated"
        assert summary["Users loaded"] == "40 (all)"
        assert summary["Pending changes"] == "0"

    def test_default_info(self, make_shell):
        assert make_shell().info_items() == DEFAULT_INFO


class TestQuit:
    @pytest.mark.parametrize("name", ["q", "Q", "escape"])
    def test_quit_keys(self, make_shell, name):
        assert press(make_shell(), name) is HandleResult.EXIT

    def test_quit_with_pending_changes_asks(self, make_shell):
        shell = make_shell()
        press(shell, "tab", "right", "right", "enter", "enter", "escape")
        assert shell.users.grid.count_dirty() == 1

        assert press(shell, "q") is HandleResult.REDRAW
        prompt = shell.active_prompt
        assert prompt.buttons == [Action.YES, Action.NO]
        assert press(shell, "down", "enter") is HandleResult.REDRAW
        assert shell.active_prompt is None

        press(shell, "q")
        assert press(shell, "enter") is HandleResult.EXIT


class TestOpenPrompt:
    def test_second_prompt_rejected(self, make_shell):
        shell = make_shell()
        shell.open_prompt(PromptOverlay(message="one"))
        with pytest.raises(PromptActiveError):
            shell.open_prompt(PromptOverlay(message="two"))

    def test_views_are_views(self, make_shell):
        shell = make_shell()
        assert isinstance(shell.tabs[0], HomeView)
        assert isinstance(shell.tabs[1], UsersView)
