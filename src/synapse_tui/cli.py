"""CLI entry point using Click."""

from __future__ import annotations

import logging
from pathlib import Path

import click

_logger = logging.getLogger(__name__)


@click.command()
@click.argument("host", required=False)
@click.option(
    "--allow-invalid-certs",
    is_flag=True,
    help="Skip TLS certificate verification.",
)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding config.toml, theme.yaml and the log file.",
)
@click.option("--page-size", type=click.IntRange(min=1), default=None, help="Users fetched per page.")
@click.option("--debug", is_flag=True, help="Write debug messages to the log file.")
@click.version_option(package_name="synapse-tui")
def main(
    host: str | None,
    allow_invalid_certs: bool,
    config_dir: Path | None,
    page_size: int | None,
    debug: bool,
) -> None:
    """Synapse homeserver admin console.

    HOST overrides the server stored in config.toml. The access token is asked
    for on startup and never written to disk.
    """
    from synapse_tui.app import AdminApp
    from synapse_tui.backend import SynapseClient
    from synapse_tui.config import default_config_dir, load_config, remember_host
    from synapse_tui.logs import setup_logging
    from synapse_tui.theme import load_render_config
    from synapse_tui.views import Shell

    config_dir = (config_dir or default_config_dir()).expanduser()
    try:
        log_file = setup_logging(config_dir, debug)
    except OSError as e:
        click.echo(f"Error: cannot write to {config_dir}: {e}", err=True)
        raise SystemExit(1)
    _logger.info("Starting synapse-tui (log: %s)", log_file)

    config = load_config(config_dir)
    if host:
        config.host = host.rstrip("/")
    if allow_invalid_certs:
        config.allow_invalid_certs = True
    if page_size is not None:
        config.page_size = page_size

    client = SynapseClient(
        config.host,
        allow_invalid_certs=config.allow_invalid_certs,
        timeout=config.timeout,
    )
    shell = Shell(
        client,
        page_size=config.page_size,
        show_help=config.show_help,
        on_login=lambda c: remember_host(config_dir, c.host),
    )
    app = AdminApp(shell, load_render_config(config_dir))
    try:
        app.run()
    except Exception as e:
        _logger.exception("Application failed")
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    finally:
        client.close()
    if app.return_code:
        raise SystemExit(app.return_code)
