"""Checks that a fetched manifest describes a compose project artifact."""

from __future__ import annotations

from compose_oci.core.media_types import (
    COMPOSE_EMPTY_CONFIG_MEDIA_TYPE,
    COMPOSE_PROJECT_ARTIFACT_TYPE,
)
from compose_oci.core.reference import Reference
from compose_oci.errors import ManifestValidationError
from compose_oci.models.manifest import Manifest


def is_compose_project(manifest: Manifest) -> bool:
    """True for the compose project artifact type, or for legacy artifacts
    with no artifact type and the compose empty-config media type."""
    if manifest.artifact_type:
        return manifest.artifact_type == COMPOSE_PROJECT_ARTIFACT_TYPE
    return manifest.config.media_type == COMPOSE_EMPTY_CONFIG_MEDIA_TYPE


def validate_manifest(manifest: Manifest, ref: Reference) -> None:
    """Raise ``ManifestValidationError`` unless ``manifest`` is a compose project."""
    if not is_compose_project(manifest):
        raise ManifestValidationError(
            f"{ref} is not a compose project OCI artifact, but {manifest.artifact_type}"
        )
