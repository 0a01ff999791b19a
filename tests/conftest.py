"""Shared test fixtures for compose-oci."""

from __future__ import annotations

from pathlib import Path

import pytest

from compose_oci.core.hasher import compute_digest
from compose_oci.core.loader import OCIRemoteLoader
from compose_oci.core.media_types import (
    ANNOTATION_ENVFILE,
    ANNOTATION_EXTENDS,
    ANNOTATION_FILE,
    COMPOSE_ENV_FILE_MEDIA_TYPE,
    COMPOSE_PROJECT_ARTIFACT_TYPE,
    COMPOSE_YAML_MEDIA_TYPE,
    OCI_IMAGE_MANIFEST,
)
from compose_oci.core.reference import parse_docker_ref
from compose_oci.errors import NotFoundError
from compose_oci.models.manifest import Descriptor, Manifest

OCI_EMPTY_CONFIG = Descriptor(
    mediaType="application/vnd.oci.empty.v1+json",
    digest="sha256:44136fa355b3678a1146ad16f7e8649e94fb4fc21fe77e8310c060f61caaff8a",
    size=2,
)

LayerSpec = tuple[bytes, str, dict[str, str]]


class FakeResolver:
    """In-memory registry: serves published manifests and layers by reference.

    Every ``get`` is recorded in ``calls``; ``fail_on`` maps a reference to
    the exception its fetch should raise.
    """

    def __init__(self) -> None:
        self.content: dict[str, tuple[bytes, Descriptor]] = {}
        self.calls: list[str] = []
        self.fail_on: dict[str, Exception] = {}

    # -- Layer builders -----------------------------------------------------

    @staticmethod
    def yaml(content: bytes, file: str | None = None, extends: bool = False) -> LayerSpec:
        annotations: dict[str, str] = {}
        if file is not None:
            annotations[ANNOTATION_FILE] = file
        if extends:
            annotations[ANNOTATION_EXTENDS] = "true"
        return content, COMPOSE_YAML_MEDIA_TYPE, annotations

    @staticmethod
    def env(content: bytes, envfile: str | None = None) -> LayerSpec:
        annotations = {ANNOTATION_ENVFILE: envfile} if envfile is not None else {}
        return content, COMPOSE_ENV_FILE_MEDIA_TYPE, annotations

    @staticmethod
    def blob(content: bytes, media_type: str, **annotations: str) -> LayerSpec:
        return content, media_type, dict(annotations)

    # -- Publishing ---------------------------------------------------------

    def publish(
        self,
        reference: str = "docker.io/acme/stack:1.0",
        layers: list[LayerSpec] | None = None,
        *,
        artifact_type: str = COMPOSE_PROJECT_ARTIFACT_TYPE,
        config: Descriptor = OCI_EMPTY_CONFIG,
    ) -> Descriptor:
        """Store a manifest (and its layers) under ``reference``."""
        ref = parse_docker_ref(reference)
        descriptors = []
        for content, media_type, annotations in layers or []:
            desc = Descriptor(
                mediaType=media_type,
                digest=compute_digest(content),
                size=len(content),
                annotations=annotations,
            )
            self.content[str(ref.with_digest(desc.digest))] = (content, desc)
            descriptors.append(desc)

        manifest = Manifest(
            mediaType=OCI_IMAGE_MANIFEST,
            artifactType=artifact_type,
            config=config,
            layers=descriptors,
        )
        return self.publish_raw(str(ref), manifest.to_bytes())

    def publish_raw(self, reference: str, raw: bytes) -> Descriptor:
        desc = Descriptor(
            mediaType=OCI_IMAGE_MANIFEST, digest=compute_digest(raw), size=len(raw)
        )
        self.content[reference] = (raw, desc)
        return desc

    def layer_ref(self, reference: str, content: bytes) -> str:
        return str(parse_docker_ref(reference).with_digest(compute_digest(content)))

    # -- Resolver protocol --------------------------------------------------

    def get(self, ref: str) -> tuple[bytes, Descriptor]:
        self.calls.append(ref)
        if ref in self.fail_on:
            raise self.fail_on[ref]
        if ref not in self.content:
            raise NotFoundError(f"{ref}: not found")
        return self.content[ref]


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep host COMPOSE_* settings and caches out of every test."""
    monkeypatch.delenv("COMPOSE_EXPERIMENTAL_OCI_REMOTE", raising=False)
    for name in (
        "COMPOSE_OCI_CACHE_DIR",
        "COMPOSE_OCI_OFFLINE",
        "COMPOSE_OCI_LOG_LEVEL",
        "COMPOSE_OCI_TIMEOUT_SECONDS",
        "COMPOSE_OCI_INSECURE_REGISTRIES",
        "COMPOSE_OCI_USER_AGENT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))


@pytest.fixture
def resolver() -> FakeResolver:
    """Provide an empty in-memory registry."""
    return FakeResolver()


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    """Provide a cache root directory inside the test's temp dir."""
    root = tmp_path / "cache"
    root.mkdir()
    return root


@pytest.fixture
def loader(resolver: FakeResolver, cache_root: Path) -> OCIRemoteLoader:
    """Provide an online loader wired to the fake registry."""
    return OCIRemoteLoader(resolver, cache_root=cache_root)


@pytest.fixture
def stack_ref() -> str:
    """Provide the reference most tests publish to."""
    return "docker.io/acme/stack:1.0"

