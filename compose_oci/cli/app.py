"""Main Typer application — imports and registers all CLI commands.

Entry point: ``compose-oci`` (configured via pyproject.toml console_scripts).

Commands: resolve, inspect, cache-dir.
"""

from __future__ import annotations

from pathlib import Path

import typer

from compose_oci.cli.commands._common import console, fail, load_settings
from compose_oci.cli.commands.inspect_cmd import inspect_cmd
from compose_oci.cli.commands.resolve import resolve_cmd
from compose_oci.core.cache import cache_dir
from compose_oci.errors import OCIRemoteError
from compose_oci.log import setup_logging

app = typer.Typer(
    name="compose-oci",
    help="Load compose projects published as OCI artifacts.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="resolve", help="Resolve an OCI reference to a local compose file.")(resolve_cmd)
app.command(name="inspect", help="Show the layers of a compose OCI artifact.")(inspect_cmd)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    ),
) -> None:
    """Configure logging before any subcommand runs."""
    setup_logging(log_level or load_settings().log_level)


@app.command(name="cache-dir", help="Print the cache directory for materialized artifacts.")
def cache_dir_cmd(
    override: Path = typer.Option(
        None,
        "--cache-dir",
        "-c",
        help="Cache directory to use instead of the default.",
    ),
) -> None:
    """Print (and create) the cache directory."""
    try:
        root = cache_dir(load_settings(override))
    except OCIRemoteError as exc:
        fail(str(exc))
    console.print(str(root), highlight=False, soft_wrap=True)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
