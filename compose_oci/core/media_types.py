"""Media types and annotation keys of compose project OCI artifacts."""

from __future__ import annotations

from enum import Enum

# Artifact type set on manifests pushed by compose
COMPOSE_PROJECT_ARTIFACT_TYPE = "application/vnd.docker.compose.project"

# Layer media types
COMPOSE_YAML_MEDIA_TYPE = "application/vnd.docker.compose.file+yaml"
COMPOSE_ENV_FILE_MEDIA_TYPE = "application/vnd.docker.compose.envfile"

# Config media type of artifacts published before artifactType existed
COMPOSE_EMPTY_CONFIG_MEDIA_TYPE = "application/vnd.docker.compose.config.empty.v1+json"

# Manifest media types accepted from registries
OCI_IMAGE_MANIFEST = "application/vnd.oci.image.manifest.v1+json"
OCI_IMAGE_INDEX = "application/vnd.oci.image.index.v1+json"
DOCKER_MANIFEST_V2 = "application/vnd.docker.distribution.manifest.v2+json"
DOCKER_MANIFEST_LIST = "application/vnd.docker.distribution.manifest.list.v2+json"

MANIFEST_ACCEPT = (
    OCI_IMAGE_MANIFEST,
    OCI_IMAGE_INDEX,
    DOCKER_MANIFEST_V2,
    DOCKER_MANIFEST_LIST,
)

# Layer annotations
ANNOTATION_FILE = "com.docker.compose.file"
ANNOTATION_EXTENDS = "com.docker.compose.extends"
ANNOTATION_ENVFILE = "com.docker.compose.envfile"


class LayerKind(str, Enum):
    """How the materializer treats a layer, keyed by its media type.

    * ``compose_yaml`` — compose document, appended to ``compose.yaml`` or
      written to its own file when marked as an ``extends`` layer.
    * ``env_file`` — environment file written under its ``envfile`` name.
    * ``empty_config`` — legacy placeholder, nothing to write.
    * ``unknown`` — any other media type, skipped.
    """

    COMPOSE_YAML = "compose_yaml"
    ENV_FILE = "env_file"
    EMPTY_CONFIG = "empty_config"
    UNKNOWN = "unknown"

    @classmethod
    def of(cls, media_type: str) -> LayerKind:
        if media_type == COMPOSE_YAML_MEDIA_TYPE:
            return cls.COMPOSE_YAML
        if media_type == COMPOSE_ENV_FILE_MEDIA_TYPE:
            return cls.ENV_FILE
        if media_type == COMPOSE_EMPTY_CONFIG_MEDIA_TYPE:
            return cls.EMPTY_CONFIG
        return cls.UNKNOWN
