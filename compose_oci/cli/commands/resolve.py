"""``compose-oci resolve`` — materialize an OCI reference and print its path.

Pulls the compose project the reference names into the local cache (or
reuses the cached copy) and prints the path to its ``compose.yaml`` on
stdout, so the command can be used from scripts::

    docker compose -f "$(compose-oci resolve docker.io/acme/stack:1.0)" up
"""

from __future__ import annotations

from pathlib import Path

import typer

from compose_oci.cli.commands._common import (
    as_oci_path,
    err_console,
    fail,
    load_settings,
)
from compose_oci.core.loader import OCIRemoteLoader
from compose_oci.core.resolver import RegistryResolver
from compose_oci.errors import OCIRemoteError


def resolve_cmd(
    reference: str = typer.Argument(
        ...,
        help="Artifact reference, with or without the oci:// prefix.",
    ),
    offline: bool = typer.Option(
        False,
        "--offline",
        help="Do not contact any registry.",
    ),
    cache_dir: Path = typer.Option(
        None,
        "--cache-dir",
        "-c",
        help="Cache directory for materialized artifacts.",
    ),
) -> None:
    """Resolve an OCI reference to a local compose file."""
    settings = load_settings(cache_dir)

    with RegistryResolver(settings) as resolver:
        loader = OCIRemoteLoader(
            resolver,
            offline=offline or settings.offline,
            settings=settings,
        )
        try:
            local = loader.load(as_oci_path(reference))
        except OCIRemoteError as exc:
            fail(str(exc))

    if not local:
        err_console.print("[yellow]Offline mode: remote resource not loaded.[/yellow]")
        return

    typer.echo(local)
