"""OCI remote resource loader — resolves ``oci://`` paths to compose files.

The configuration-loading pipeline asks each registered resource loader
whether it ``accept``s a path, then calls ``load`` to obtain a local file
and ``dir`` to learn the directory relative includes resolve against.

``OCIRemoteLoader.load`` flow
-----------------------------
1. Read the ``COMPOSE_EXPERIMENTAL_OCI_REMOTE`` feature flag.
2. Offline: return ``""`` — no file available, not an error.
3. Flag off: raise ``OCIRemoteDisabledError``.
4. Known path: reuse the directory recorded by an earlier load.
5. Otherwise parse the reference, resolve its manifest, and — unless the
   digest-keyed cache directory already exists — validate the manifest
   and materialize its layers.  A failed materialization removes the
   directory before the error propagates, unless another writer created
   that directory first: it is left alone and the error propagates.

The table of known paths is a plain dict owned by the loader instance.
It is not synchronized: callers sharing one loader between threads must
serialize calls to ``load`` themselves.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from compose_oci.config import OCI_REMOTE_ENABLED, LoaderSettings, oci_remote_enabled
from compose_oci.core.cache import COMPOSE_FILE, ArtifactCache, cache_dir
from compose_oci.core.materializer import pull_compose_files
from compose_oci.core.reference import parse_docker_ref
from compose_oci.core.resolver import RegistryResolver, Resolver
from compose_oci.core.validator import validate_manifest
from compose_oci.errors import CacheEntryExistsError, OCIRemoteDisabledError
from compose_oci.models.manifest import Manifest

logger = logging.getLogger(__name__)

OCI_PREFIX = "oci://"


@runtime_checkable
class ResourceLoader(Protocol):
    """Shape shared by every remote resource loader plugin."""

    def accept(self, path: str) -> bool:
        """Return True if this loader handles ``path``."""
        ...

    def load(self, path: str) -> str:
        """Return a local file path for ``path``."""
        ...

    def dir(self, path: str) -> str:
        """Return the local directory ``path`` was loaded into, or ``""``."""
        ...


class OCIRemoteLoader:
    """Loads compose projects published as OCI artifacts.

    Parameters
    ----------
    resolver:
        Source of manifests and layers.  Defaults to a ``RegistryResolver``
        built from ``settings``.
    offline:
        When True, ``load`` returns ``""`` without touching the network.
    cache_root:
        Directory holding materialized artifacts.  Defaults to
        ``cache_dir(settings)``, resolved on first use.
    settings:
        Loader settings; read from the environment when omitted.

    Examples
    --------
    >>> loader = OCIRemoteLoader(offline=True)
    >>> loader.accept("oci://docker.io/acme/stack:1.0")
    True
    >>> loader.load("oci://docker.io/acme/stack:1.0")
    ''
    """

    def __init__(
        self,
        resolver: Resolver | None = None,
        *,
        offline: bool = False,
        cache_root: Path | None = None,
        settings: LoaderSettings | None = None,
    ) -> None:
        self._settings = settings or LoaderSettings()
        self._resolver = resolver
        self._offline = offline
        self._cache_root = Path(cache_root) if cache_root is not None else None
        self._cache: ArtifactCache | None = None
        self._known: dict[str, Path] = {}

    @property
    def offline(self) -> bool:
        return self._offline

    @property
    def resolver(self) -> Resolver:
        """The resolver in use, created on first access if none was given."""
        if self._resolver is None:
            self._resolver = RegistryResolver(self._settings)
        return self._resolver

    @property
    def cache(self) -> ArtifactCache:
        """The artifact cache, created on first access."""
        if self._cache is None:
            root = self._cache_root or cache_dir(self._settings)
            self._cache = ArtifactCache(root)
        return self._cache

    # -- ResourceLoader API -------------------------------------------------

    def accept(self, path: str) -> bool:
        return path.startswith(OCI_PREFIX)

    def load(self, path: str) -> str:
        """Resolve an ``oci://`` path to its local ``compose.yaml``.

        Returns ``""`` in offline mode.

        Raises
        ------
        OCIRemoteConfigError
            If the feature flag holds a non-boolean value.
        OCIRemoteDisabledError
            If the feature flag turns the loader off.
        ReferenceParseError
            If the reference after ``oci://`` is malformed.
        ResolutionError
            If the registry cannot serve the artifact.
        ManifestValidationError
            If the artifact is not a compose project.
        MaterializationError
            If a layer cannot be written.
        """
        enabled = oci_remote_enabled()

        if self._offline:
            logger.debug("Offline mode, not loading %s", path)
            return ""

        if not enabled:
            raise OCIRemoteDisabledError(
                f'OCI remote resource is disabled by "{OCI_REMOTE_ENABLED}"'
            )

        local = self._known.get(path)
        if local is None:
            local = self._fetch(path)
            self._known[path] = local
        return str(local / COMPOSE_FILE)

    def dir(self, path: str) -> str:
        local = self._known.get(path)
        return str(local) if local is not None else ""

    # -- Internal helpers ---------------------------------------------------

    def _fetch(self, path: str) -> Path:
        ref = parse_docker_ref(path[len(OCI_PREFIX):])
        resolver = self.resolver

        content, descriptor = resolver.get(str(ref))
        local = self.cache.path_for(descriptor)
        if local.exists():
            logger.debug("Using cached %s from %s", ref, local)
            return local

        logger.info("Pulling compose project %s (%s)", ref, descriptor.digest)
        try:
            manifest = Manifest.from_bytes(content)
            validate_manifest(manifest, ref)
            pull_compose_files(local, manifest, ref, resolver)
        except CacheEntryExistsError:
            logger.warning("%s is being materialized by another writer", local)
            raise
        except BaseException:
            self.cache.discard(local)
            raise
        return local
