"""User configuration management using tomlkit."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import tomlkit

from synapse_tui.backend import DEFAULT_HOST, DEFAULT_TIMEOUT
from synapse_tui.sync import DEFAULT_PAGE_SIZE

_logger = logging.getLogger(__name__)

CONFIG_DIR = ".synapse-tui"
CONFIG_FILE = "config.toml"


@dataclass
class AppConfig:
    """Settings read from config.toml, overridable from the command line."""

    host: str = DEFAULT_HOST
    allow_invalid_certs: bool = False
    timeout: float = DEFAULT_TIMEOUT
    page_size: int = DEFAULT_PAGE_SIZE
    show_help: bool = True


def default_config_dir() -> Path:
    return Path.home() / CONFIG_DIR


def _get_config_path(config_dir: Path) -> Path:
    return config_dir / CONFIG_FILE


def load_config(config_dir: Path) -> AppConfig:
    """Load configuration from config.toml (defaults when missing or broken)."""
    config_path = _get_config_path(config_dir)
    config = AppConfig()

    if not config_path.exists():
        return config

    try:
        content = config_path.read_text(encoding="utf-8")
        doc = tomlkit.parse(content)
    except Exception:
        _logger.warning("Ignoring unreadable config file %s", config_path, exc_info=True)
        return config

    # [server]
    server = doc.get("server", {})
    if "host" in server:
        config.host = str(server.get("host", DEFAULT_HOST)).rstrip("/") or DEFAULT_HOST
    config.allow_invalid_certs = bool(server.get("allow_invalid_certs", False))
    try:
        config.timeout = float(server.get("timeout", DEFAULT_TIMEOUT))
    except (TypeError, ValueError):
        config.timeout = DEFAULT_TIMEOUT

    # [ui]
    ui = doc.get("ui", {})
    try:
        page_size = int(ui.get("page_size", DEFAULT_PAGE_SIZE))
    except (TypeError, ValueError):
        page_size = DEFAULT_PAGE_SIZE
    config.page_size = page_size if page_size > 0 else DEFAULT_PAGE_SIZE
    config.show_help = bool(ui.get("show_help", True))

    return config


def save_config(config_dir: Path, config: AppConfig) -> None:
    """Save configuration to config.toml. The access token is never stored."""
    config_path = _get_config_path(config_dir)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    doc = tomlkit.document()

    server = tomlkit.table()
    server.add("host", config.host)
    server.add("allow_invalid_certs", config.allow_invalid_certs)
    server.add("timeout", config.timeout)
    doc.add("server", server)

    ui = tomlkit.table()
    ui.add("page_size", config.page_size)
    ui.add("show_help", config.show_help)
    doc.add("ui", ui)

    config_path.write_text(tomlkit.dumps(doc), encoding="utf-8")


def remember_host(config_dir: Path, host: str) -> None:
    """Persist the last host that accepted our credentials."""
    config = load_config(config_dir)
    if config.host == host:
        return
    config.host = host
    try:
        save_config(config_dir, config)
    except OSError:
        _logger.warning("Could not save config to %s", config_dir, exc_info=True)
