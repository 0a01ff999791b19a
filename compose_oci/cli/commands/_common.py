"""Helpers shared by the CLI subcommands."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console

from compose_oci.config import LoaderSettings
from compose_oci.core.loader import OCI_PREFIX

console = Console()
err_console = Console(stderr=True)


def load_settings(cache_dir: Path | None = None) -> LoaderSettings:
    """Read ``COMPOSE_OCI_*`` settings, applying command-line overrides.

    Exits with code 2 if the environment holds invalid values.
    """
    try:
        settings = LoaderSettings()
    except ValidationError as exc:
        err_console.print(f"[red]Invalid COMPOSE_OCI_* configuration:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    if cache_dir is not None:
        settings = settings.model_copy(update={"cache_dir": cache_dir})
    return settings


def as_oci_path(reference: str) -> str:
    """Accept references with or without the ``oci://`` prefix."""
    return reference if reference.startswith(OCI_PREFIX) else OCI_PREFIX + reference


def fail(message: str) -> NoReturn:
    """Print an error and exit with code 1."""
    err_console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(code=1)
