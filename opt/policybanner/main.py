"""
PolicyBanner updater - Main Entry Point

Replaces /Library/Security/PolicyBanner.rtfd with the bundle staged in /tmp
and resyncs the FileVault preboot volume. Intended to be run once, as root,
by the fleet-management agent.
"""

import sys
import os

# Configure module path for package imports
current_dir = os.path.dirname(os.path.abspath(__file__))
parent_dir = os.path.dirname(current_dir)
if parent_dir not in sys.path:
    sys.path.insert(0, parent_dir)

import logging
from typing import Optional

import typer

from policybanner import __version__
from policybanner.config_loader import load_config
from policybanner.deployer.errors import TerminationRequested
from policybanner.deployer.system import perform_update
from policybanner.deployer.workspace import install_signal_handlers, restore_signal_handlers
from policybanner.utils.audit_log import configure_logging

logger = logging.getLogger('policybanner.main')

app = typer.Typer(
    name="policybanner-update",
    help="Replace the macOS policy banner and resync the FileVault preboot volume.",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"policybanner-update v{__version__}")
        raise typer.Exit()


@app.command()
def run(
    verbose: bool = typer.Option(False, "--verbose", "-d", help="Emit DEBUG records."),
    config_path: Optional[str] = typer.Option(
        None, "--config", "-c", help="JSON configuration file to load."
    ),
    version: bool = typer.Option(
        None, "--version", callback=version_callback, is_eager=True,
        help="Show the version and exit."
    ),
) -> None:
    """Update the policy banner once and exit."""
    try:
        config = load_config(config_path, verbose=True if verbose else None)
    except ValueError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(2)

    configure_logging(config.verbose)

    previous_handlers = install_signal_handlers()
    try:
        result = perform_update(config)
    except TerminationRequested as e:
        logger.error(f"Received signal {e.signum}; policy banner update aborted")
        raise typer.Exit(e.code)
    finally:
        restore_signal_handlers(previous_handlers)

    raise typer.Exit(result['exit_code'])


def main():
    app()


if __name__ == '__main__':
    main()
