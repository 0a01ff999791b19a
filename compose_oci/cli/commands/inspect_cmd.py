"""``compose-oci inspect`` — show the layers of a compose artifact.

Fetches and decodes the manifest only; no layer content is downloaded and
nothing is written to the cache.
"""

from __future__ import annotations

import typer
from rich.panel import Panel
from rich.table import Table

from compose_oci.cli.commands._common import as_oci_path, console, fail, load_settings
from compose_oci.core.cache import COMPOSE_FILE
from compose_oci.core.loader import OCI_PREFIX
from compose_oci.core.media_types import (
    ANNOTATION_ENVFILE,
    ANNOTATION_EXTENDS,
    ANNOTATION_FILE,
    LayerKind,
)
from compose_oci.core.reference import parse_docker_ref
from compose_oci.core.resolver import RegistryResolver
from compose_oci.core.validator import is_compose_project
from compose_oci.errors import OCIRemoteError
from compose_oci.models.manifest import Descriptor, Manifest


def _layer_target(layer: Descriptor, kind: LayerKind) -> str:
    """Where the materializer would write this layer."""
    if kind is LayerKind.COMPOSE_YAML:
        if ANNOTATION_EXTENDS in layer.annotations:
            return layer.annotations.get(ANNOTATION_FILE, "[red]missing file annotation[/red]")
        return COMPOSE_FILE
    if kind is LayerKind.ENV_FILE:
        return layer.annotations.get(ANNOTATION_ENVFILE, "[red]missing envfile annotation[/red]")
    return "[dim]-[/dim]"


def inspect_cmd(
    reference: str = typer.Argument(
        ...,
        help="Artifact reference, with or without the oci:// prefix.",
    ),
) -> None:
    """Show the manifest layers of a compose OCI artifact."""
    settings = load_settings()

    try:
        ref = parse_docker_ref(as_oci_path(reference)[len(OCI_PREFIX):])
        with RegistryResolver(settings) as resolver:
            content, descriptor = resolver.get(str(ref))
        manifest = Manifest.from_bytes(content)
    except OCIRemoteError as exc:
        fail(str(exc))

    table = Table(show_header=True, header_style="bold cyan", expand=True)
    table.add_column("#", justify="right", width=3)
    table.add_column("Kind", no_wrap=True)
    table.add_column("Media Type", overflow="fold")
    table.add_column("Digest", no_wrap=True)
    table.add_column("Target", no_wrap=True)

    for position, layer in enumerate(manifest.layers):
        kind = LayerKind.of(layer.media_type)
        table.add_row(
            str(position),
            kind.value,
            layer.media_type,
            layer.digest_hex[:12],
            _layer_target(layer, kind),
        )

    if is_compose_project(manifest):
        status = "[bold green]Compose project artifact.[/bold green]"
        border_style = "green"
    else:
        status = (
            "[bold red]Not a compose project artifact"
            f" (artifact type: {manifest.artifact_type or 'none'}).[/bold red]"
        )
        border_style = "red"

    console.print()
    console.print(
        Panel(
            table,
            title=f"[bold]{ref}[/bold] [dim]{descriptor.digest}[/dim]",
            subtitle=status,
            border_style=border_style,
            padding=(1, 2),
        )
    )
    console.print()
