"""YAML-based render configuration.

Loads styles from default_theme.yaml and optionally merges user overrides
from {config_dir}/theme.yaml. The result is a plain value handed to every
render call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

_logger = logging.getLogger(__name__)

THEME_FILE = "theme.yaml"


@dataclass(frozen=True)
class RenderConfig:
    """Styles used to describe a frame."""

    active: str = "underline"
    dirty: str = "yellow"
    focus_editable: str = "bold green"
    focus_editing: str = "bold yellow"
    focus_readonly: str = "dim"
    focus_row: str = "on grey23"
    header: str = "grey50"
    min_column_width: int = 7
    prompt_message: str = "yellow"
    prompt_error: str = "red"
    prompt_label: str = ""
    prompt_highlight: str = "bold on grey23"
    prompt_button: str = "grey50"
    info_key: str = "green"
    info_text: str = "grey50"
    info_divider: str = " | "
    tab_active: str = "on grey23"
    tab_suspended: str = "on red"
    tab_divider: str = " | "
    summary_label: str = "bold"
    summary_value: str = ""


# ── Internal helpers ──────────────────────────────────────────────

def _load_yaml(path: Path) -> dict:
    """Load a YAML file and return a dict (empty dict on error)."""
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        _logger.warning("Ignoring unreadable theme file %s", path, exc_info=True)
        return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (returns a new dict)."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _section(data: dict, name: str) -> dict[str, Any]:
    section = data.get(name, {})
    return section if isinstance(section, dict) else {}


def _build(data: dict) -> RenderConfig:
    """Map parsed YAML data onto a RenderConfig."""
    defaults = RenderConfig()
    field = _section(data, "field")
    focus = _section(data, "focus")
    table = _section(data, "table")
    prompt = _section(data, "prompt")
    info = _section(data, "info")
    tabs = _section(data, "tabs")
    summary = _section(data, "summary")

    def style(section: dict[str, Any], key: str, default: str) -> str:
        value = section.get(key, default)
        return "" if value is None else str(value)

    try:
        min_width = int(table.get("min_width", defaults.min_column_width))
    except (TypeError, ValueError):
        min_width = defaults.min_column_width

    return RenderConfig(
        active=style(field, "active", defaults.active),
        dirty=style(field, "dirty", defaults.dirty),
        focus_editable=style(focus, "editable", defaults.focus_editable),
        focus_editing=style(focus, "editing", defaults.focus_editing),
        focus_readonly=style(focus, "readonly", defaults.focus_readonly),
        focus_row=style(focus, "row", defaults.focus_row),
        header=style(table, "header", defaults.header),
        min_column_width=max(1, min_width),
        prompt_message=style(prompt, "message", defaults.prompt_message),
        prompt_error=style(prompt, "error", defaults.prompt_error),
        prompt_label=style(prompt, "label", defaults.prompt_label),
        prompt_highlight=style(prompt, "highlight", defaults.prompt_highlight),
        prompt_button=style(prompt, "button", defaults.prompt_button),
        info_key=style(info, "key", defaults.info_key),
        info_text=style(info, "text", defaults.info_text),
        info_divider=style(info, "divider", defaults.info_divider),
        tab_active=style(tabs, "active", defaults.tab_active),
        tab_suspended=style(tabs, "suspended", defaults.tab_suspended),
        tab_divider=style(tabs, "divider", defaults.tab_divider),
        summary_label=style(summary, "label", defaults.summary_label),
        summary_value=style(summary, "value", defaults.summary_value),
    )


# ── Public API ────────────────────────────────────────────────────

def load_render_config(config_dir: Path | None = None) -> RenderConfig:
    """Load the default theme and optionally merge user overrides.

    1. Load ``default_theme.yaml`` bundled with the package.
    2. If *config_dir* is given and ``{config_dir}/theme.yaml`` exists,
       deep-merge it on top of the defaults.
    3. Build a RenderConfig from the merged data.
    """
    default_path = Path(__file__).parent / "default_theme.yaml"
    data = _load_yaml(default_path)

    if config_dir is not None:
        override_path = config_dir / THEME_FILE
        if override_path.is_file():
            override = _load_yaml(override_path)
            if override:
                data = _deep_merge(data, override)

    return _build(data)
