"""Layer materializer — writes the layers of a compose artifact to disk.

Layers are processed strictly in manifest order, because order decides
the content of the primary ``compose.yaml``: every compose layer that is
not an ``extends`` layer is appended to it, and layers after the first
that carry a ``com.docker.compose.file`` annotation are preceded by a
YAML document separator, turning the file into a multi-document stream.

Dispatch by media type::

    compose YAML + extends   -> {local}/{file annotation}
    compose YAML             -> {local}/compose.yaml (appended)
    compose env file         -> {local}/{envfile annotation}
    empty config / unknown   -> skipped

Every file is created exclusively (it must not exist yet).  Any failure
aborts the whole materialization; the caller discards the directory.
File system errors surface as ``MaterializationError``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

from compose_oci.core.cache import COMPOSE_FILE
from compose_oci.core.media_types import (
    ANNOTATION_ENVFILE,
    ANNOTATION_EXTENDS,
    ANNOTATION_FILE,
    LayerKind,
)
from compose_oci.core.reference import Reference
from compose_oci.core.resolver import Resolver
from compose_oci.errors import CacheEntryExistsError, MaterializationError
from compose_oci.models.manifest import Descriptor, Manifest

logger = logging.getLogger(__name__)

DOCUMENT_SEPARATOR = b"\n---\n"


def _target_path(local: Path, name: str, layer: Descriptor, annotation: str) -> Path:
    """Resolve an annotation-supplied file name; it must stay inside ``local``."""
    if not name:
        raise MaterializationError(f"missing annotation {annotation} in layer {layer.digest!r}")
    target = local / name
    root = local.resolve()
    resolved = target.resolve()
    if resolved == root or not resolved.is_relative_to(root):
        raise MaterializationError(
            f"annotation {annotation}={name!r} in layer {layer.digest!r} "
            f"points outside {local}"
        )
    return target


def _write_new_file(path: Path, content: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("xb") as f:
        f.write(content)


def write_compose_file(
    layer: Descriptor,
    position: int,
    f: BinaryIO,
    content: bytes,
) -> None:
    """Append a compose layer to the primary file.

    A document separator is written first when the layer is not the first
    one in the manifest and carries a file annotation.
    """
    if position > 0 and ANNOTATION_FILE in layer.annotations:
        f.write(DOCUMENT_SEPARATOR)
    f.write(content)


def write_extends_file(layer: Descriptor, local: Path, content: bytes) -> None:
    """Write an ``extends`` layer verbatim to the file its annotation names."""
    name = layer.annotations.get(ANNOTATION_FILE, "")
    _write_new_file(_target_path(local, name, layer, ANNOTATION_FILE), content)


def write_env_file(layer: Descriptor, local: Path, content: bytes) -> None:
    """Write an env file layer verbatim to the file its annotation names.

    Raises
    ------
    MaterializationError
        If the layer has no ``com.docker.compose.envfile`` annotation.
    """
    if ANNOTATION_ENVFILE not in layer.annotations:
        raise MaterializationError(
            f"missing annotation {ANNOTATION_ENVFILE} in layer {layer.digest!r}"
        )
    name = layer.annotations[ANNOTATION_ENVFILE]
    _write_new_file(_target_path(local, name, layer, ANNOTATION_ENVFILE), content)


def pull_compose_files(
    local: Path,
    manifest: Manifest,
    ref: Reference,
    resolver: Resolver,
) -> None:
    """Fetch every layer of ``manifest`` and write it under ``local``.

    Parameters
    ----------
    local:
        Target directory; must not exist yet.
    manifest:
        A manifest that already passed ``validate_manifest``.
    ref:
        The reference the manifest was fetched with; layers are fetched
        as ``ref`` qualified with each layer digest.
    resolver:
        Source of layer content.

    Raises
    ------
    CacheEntryExistsError
        If ``local`` already exists; it was created by another writer.
    MaterializationError
        If a layer cannot be written.
    """
    try:
        local.mkdir(mode=0o700, parents=True)
    except FileExistsError as exc:
        raise CacheEntryExistsError(f"{local} already exists") from exc
    except OSError as exc:
        raise MaterializationError(f"creating {local}: {exc}") from exc

    try:
        with (local / COMPOSE_FILE).open("xb") as primary:
            for position, layer in enumerate(manifest.layers):
                content, _ = resolver.get(str(ref.with_digest(layer.digest)))

                kind = LayerKind.of(layer.media_type)
                if kind is LayerKind.COMPOSE_YAML:
                    if ANNOTATION_EXTENDS in layer.annotations:
                        write_extends_file(layer, local, content)
                    else:
                        write_compose_file(layer, position, primary, content)
                elif kind is LayerKind.ENV_FILE:
                    write_env_file(layer, local, content)
                elif kind is LayerKind.EMPTY_CONFIG:
                    pass
                else:
                    logger.debug(
                        "Skipping layer %s with unrecognized media type %r",
                        layer.digest,
                        layer.media_type,
                    )
    except OSError as exc:
        raise MaterializationError(f"writing {ref} into {local}: {exc}") from exc

    logger.info(
        "Materialized %d layer(s) of %s into %s", len(manifest.layers), ref, local
    )
