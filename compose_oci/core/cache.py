"""Digest-keyed on-disk cache of materialized compose artifacts.

Storage layout: {cache_root}/{hex digest}/compose.yaml (+ sibling files)

A directory is only ever left in place after a complete materialization;
a failed attempt is discarded so that a later load starts from scratch.
Nothing is evicted: registries are content-addressed, and a digest
always names the same bytes.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from pathlib import Path

from compose_oci.config import LoaderSettings
from compose_oci.errors import OCIRemoteError
from compose_oci.models.manifest import Descriptor

logger = logging.getLogger(__name__)

CACHE_SUBDIR = "docker-compose"
COMPOSE_FILE = "compose.yaml"


def _os_cache_home() -> Path:
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches"
    if sys.platform == "win32":
        local = os.environ.get("LOCALAPPDATA")
        if not local:
            raise OSError("%LOCALAPPDATA% is not defined")
        return Path(local)
    return Path.home() / ".cache"


def cache_dir(settings: LoaderSettings | None = None) -> Path:
    """Resolve and create the cache root.

    Resolution order: ``settings.cache_dir``, then
    ``$XDG_CACHE_HOME/docker-compose``, then the OS cache directory
    joined with ``docker-compose``.

    Raises
    ------
    OCIRemoteError
        If the directory cannot be determined or created.
    """
    settings = settings or LoaderSettings()
    try:
        if settings.cache_dir is not None:
            root = Path(settings.cache_dir)
        elif os.environ.get("XDG_CACHE_HOME"):
            root = Path(os.environ["XDG_CACHE_HOME"]) / CACHE_SUBDIR
        else:
            root = _os_cache_home() / CACHE_SUBDIR
        root.mkdir(mode=0o700, parents=True, exist_ok=True)
    except OSError as exc:
        raise OCIRemoteError(f"initializing remote resource cache: {exc}") from exc
    return root


class ArtifactCache:
    """Maps artifact descriptors to their materialization directories.

    Parameters
    ----------
    base_path:
        Cache root; every artifact gets one subdirectory named by the hex
        part of its digest.
    """

    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)

    @property
    def base_path(self) -> Path:
        return self._base

    def path_for(self, descriptor: Descriptor) -> Path:
        """Directory holding the files of the artifact ``descriptor`` names."""
        if not descriptor.digest_hex:
            raise OCIRemoteError(f"descriptor has no usable digest: {descriptor.digest!r}")
        return self._base / descriptor.digest_hex

    def exists(self, descriptor: Descriptor) -> bool:
        """True if the artifact was already materialized."""
        return self.path_for(descriptor).exists()

    def discard(self, local: Path) -> None:
        """Remove a partially written directory; removal errors are ignored."""
        logger.debug("Discarding incomplete cache entry %s", local)
        shutil.rmtree(local, ignore_errors=True)
