"""compose-oci data models — Pydantic v2, frozen (immutable)."""

from compose_oci.models.manifest import Descriptor, Manifest

__all__ = [
    "Descriptor",
    "Manifest",
]
