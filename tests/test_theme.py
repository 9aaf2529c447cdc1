"""Tests for the render configuration and rich renderables."""

from rich.console import Console
from rich.text import Text

from synapse_tui.fields import ConstantText, MutableFlag, MutableText
from synapse_tui.grid import Grid
from synapse_tui.prompt import Action, PromptOverlay
from synapse_tui.render import (
    field_text,
    render_grid,
    render_info,
    render_prompt,
    render_summary,
    render_tabs,
    visible_rows,
)
from synapse_tui.theme import RenderConfig, load_render_config


def to_plain(renderable, width=80):
    console = Console(width=width, color_system=None, record=True)
    console.print(renderable)
    return console.export_text()


def make_grid(rows=3):
    grid = Grid(("ID", "Name", "Admin"))
    for i in range(rows):
        grid.append_row([ConstantText(f"@u{i}"), MutableText(f"name{i}"), MutableFlag(i == 0)])
    return grid


class TestLoadRenderConfig:
    def test_defaults_match_dataclass(self):
        assert load_render_config() == RenderConfig()

    def test_user_override_merges(self, tmp_path):
        (tmp_path / "theme.yaml").write_text(
            "field:\n  dirty: magenta\ntable:\n  min_width: 12\n",
            encoding="utf-8",
        )
        config = load_render_config(tmp_path)
        assert config.dirty == "magenta"
        assert config.min_column_width == 12
        assert config.active == RenderConfig().active

    def test_broken_override_ignored(self, tmp_path):
        (tmp_path / "theme.yaml").write_text("field: [unclosed\n", encoding="utf-8")
        assert load_render_config(tmp_path) == RenderConfig()

    def test_bad_min_width(self, tmp_path):
        (tmp_path / "theme.yaml").write_text("table:\n  min_width: wide\n", encoding="utf-8")
        assert load_render_config(tmp_path).min_column_width == RenderConfig().min_column_width


class TestFieldText:
    def test_editing_cursor_styled(self):
        field = MutableText("abc")
        text = field_text(field, True, RenderConfig(active="reverse"))
        assert text.plain == "abc "
        assert any(span.style == "reverse" for span in text.spans)

    def test_dirty_styled(self):
        field = MutableFlag(True, original=False)
        text = field_text(field, False, RenderConfig(dirty="yellow"))
        assert text.plain == "true"
        assert any(span.style == "yellow" for span in text.spans)


class TestVisibleRows:
    def test_all_rows_fit(self):
        assert visible_rows(5, 4, 10) == range(5)
        assert visible_rows(5, 4, None) == range(5)

    def test_window_follows_focus(self):
        assert visible_rows(100, 0, 10) == range(0, 10)
        assert visible_rows(100, 50, 10) == range(41, 51)
        assert visible_rows(100, 99, 10) == range(90, 100)


class TestRenderGrid:
    def test_header_and_brackets(self):
        out = to_plain(render_grid(make_grid(), RenderConfig()))
        assert "ID" in out and "Name" in out and "Admin" in out
        assert "[@u0]" in out
        assert " name0 " in out

    def test_height_limits_rows(self):
        grid = make_grid(20)
        grid.focus.row.index = 19
        out = to_plain(render_grid(grid, RenderConfig(), height=6))
        assert "@u19" in out
        assert "@u0 " not in out

    def test_editing_cell_shows_cursor(self):
        grid = make_grid()
        grid.focus.col.index = 1
        grid.begin_edit()
        out = to_plain(render_grid(grid, RenderConfig()))
        assert "[name0 ]" in out


class TestRenderPrompt:
    def test_layout_order(self):
        prompt = PromptOverlay(
            message="Please log in",
            error="Error : token is mandatory",
            fields=[("Host", MutableText("https://hs"))],
            buttons=[Action.OK, Action.EXIT],
        )
        out = to_plain(render_prompt(prompt, RenderConfig()))
        assert out.index("Please log in") < out.index("Host") < out.index("[Ok]") < out.index("Error")
        assert "[Exit]" in out


class TestStrips:
    def test_info_highlights_keys(self):
        text = render_info(["[F1] Hide Help", "plain"], RenderConfig(info_key="green"))
        assert text.plain == "[F1] Hide Help | plain"
        assert any(span.style == "green" for span in text.spans)

    def test_tabs_suspended_style(self):
        config = RenderConfig()
        text = render_tabs(["Summary", "Users"], 1, True, config)
        assert text.plain == " Summary  |  Users "
        assert any(span.style == config.tab_suspended for span in text.spans)

    def test_summary(self):
        out = to_plain(render_summary([("Server", "https://hs")], RenderConfig()))
        assert "Server" in out and "https://hs" in out

    def test_text_type(self):
        assert isinstance(render_info([], RenderConfig()), Text)
