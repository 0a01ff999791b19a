"""OCI descriptor and manifest models.

Field names follow the OCI image-spec JSON (``mediaType``,
``artifactType``, ...) through aliases; Python code uses the snake_case
attribute names.
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from compose_oci.errors import ManifestParseError


class Descriptor(BaseModel):
    """A content descriptor: what a blob is, where it lives, how big it is.

    Examples
    --------
    >>> d = Descriptor(mediaType="text/plain", digest="sha256:abc123", size=3)
    >>> d.digest_hex
    'abc123'
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    media_type: str = Field("", alias="mediaType")
    digest: str = ""
    size: int = 0
    annotations: dict[str, str] = Field(default_factory=dict)
    artifact_type: str = Field("", alias="artifactType")

    @field_validator("annotations", mode="before")
    @classmethod
    def _null_annotations(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def digest_hex(self) -> str:
        """The encoded part of the digest, without its ``algorithm:`` prefix."""
        return self.digest.partition(":")[2]


class Manifest(BaseModel):
    """An OCI image manifest, as used to ship a compose project.

    A missing ``config`` or ``artifactType`` decodes to empty values rather
    than failing, so that the manifest validator reports what was found.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    schema_version: int = Field(2, alias="schemaVersion")
    media_type: str = Field("", alias="mediaType")
    artifact_type: str = Field("", alias="artifactType")
    config: Descriptor = Field(default_factory=Descriptor)
    layers: list[Descriptor] = Field(default_factory=list)
    annotations: dict[str, str] = Field(default_factory=dict)

    @field_validator("annotations", "layers", mode="before")
    @classmethod
    def _null_collections(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return [] if info.field_name == "layers" else {}
        return value

    @field_validator("artifact_type", mode="before")
    @classmethod
    def _null_artifact_type(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def from_bytes(cls, raw: bytes) -> Manifest:
        """Decode manifest JSON bytes.

        Raises
        ------
        ManifestParseError
            If the bytes are not JSON or do not match the manifest schema.
        """
        try:
            return cls.model_validate_json(raw)
        except ValidationError as exc:
            raise ManifestParseError(f"invalid OCI manifest: {exc}") from exc

    def to_bytes(self) -> bytes:
        """Encode the manifest as OCI JSON."""
        return self.model_dump_json(by_alias=True, exclude_defaults=True).encode("utf-8")
