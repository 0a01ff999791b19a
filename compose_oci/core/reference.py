"""Registry reference parsing, normalized the way the docker CLI does it.

A reference names a repository on a registry plus, optionally, a tag
and/or a content digest::

    registry.example.com:5000/team/app:1.2@sha256:<64 hex>

``parse_docker_ref`` fills in what short references leave out:

* no registry domain  -> ``docker.io``
* single path segment on ``docker.io`` -> ``library/<name>``
* neither tag nor digest -> tag ``latest``
* both tag and digest -> the tag is dropped, the digest wins
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

from compose_oci.errors import ReferenceParseError

DEFAULT_DOMAIN = "docker.io"
LEGACY_DEFAULT_DOMAIN = "index.docker.io"
OFFICIAL_REPO_PREFIX = "library/"
DEFAULT_TAG = "latest"
NAME_TOTAL_LENGTH_MAX = 255

_ALPHANUMERIC = r"[a-z0-9]+"
_SEPARATOR = r"(?:[._]|__|[-]+)"
_PATH_COMPONENT = rf"{_ALPHANUMERIC}(?:{_SEPARATOR}{_ALPHANUMERIC})*"
_DOMAIN_COMPONENT = r"(?:[a-zA-Z0-9]|[a-zA-Z0-9][a-zA-Z0-9-]*[a-zA-Z0-9])"
_DOMAIN_NAME = rf"{_DOMAIN_COMPONENT}(?:\.{_DOMAIN_COMPONENT})*"
_IPV6 = r"\[(?:[a-fA-F0-9:]+)\]"
_DOMAIN = rf"(?:{_DOMAIN_NAME}|{_IPV6})(?::[0-9]+)?"
_TAG = r"[\w][\w.-]{0,127}"
_DIGEST = r"[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,}"

_PATH_RE = re.compile(rf"^{_PATH_COMPONENT}(?:/{_PATH_COMPONENT})*$")
_DOMAIN_RE = re.compile(rf"^{_DOMAIN}$")
_TAG_RE = re.compile(rf"^{_TAG}$")
_DIGEST_RE = re.compile(rf"^{_DIGEST}$")
_IDENTIFIER_RE = re.compile(r"^[a-f0-9]{64}$")

# Encoded length per supported digest algorithm
_DIGEST_HEX_LENGTH = {"sha256": 64, "sha384": 96, "sha512": 128}


class Reference(BaseModel):
    """A fully qualified, normalized registry reference.

    Examples
    --------
    >>> ref = parse_docker_ref("alpine")
    >>> str(ref)
    'docker.io/library/alpine:latest'
    >>> ref.name
    'docker.io/library/alpine'
    """

    model_config = ConfigDict(frozen=True)

    domain: str
    path: str
    tag: str | None = None
    digest: str | None = None

    @property
    def name(self) -> str:
        """``domain/path``, without tag or digest."""
        return f"{self.domain}/{self.path}"

    def with_digest(self, digest: str) -> Reference:
        """Return ``name@digest``; the tag, if any, is dropped."""
        validate_digest(digest)
        return Reference(domain=self.domain, path=self.path, digest=digest)

    def __str__(self) -> str:
        text = self.name
        if self.tag:
            text += f":{self.tag}"
        if self.digest:
            text += f"@{self.digest}"
        return text


def validate_digest(digest: str) -> None:
    """Check ``algorithm:hex`` syntax and the encoded length for the algorithm."""
    if not _DIGEST_RE.match(digest):
        raise ReferenceParseError(f"invalid digest format: {digest!r}")
    algorithm, _, encoded = digest.partition(":")
    expected = _DIGEST_HEX_LENGTH.get(algorithm)
    if expected is None:
        raise ReferenceParseError(f"unsupported digest algorithm: {algorithm!r}")
    if len(encoded) != expected or encoded != encoded.lower():
        raise ReferenceParseError(f"invalid checksum digest length or case: {digest!r}")


def _split_domain(name: str) -> tuple[str, str]:
    first, sep, remainder = name.partition("/")
    if not sep or (
        not any(c in first for c in ".:")
        and first != "localhost"
        and first.lower() == first
    ):
        domain, remainder = DEFAULT_DOMAIN, name
    else:
        domain = first
    if domain == LEGACY_DEFAULT_DOMAIN:
        domain = DEFAULT_DOMAIN
    if domain == DEFAULT_DOMAIN and "/" not in remainder:
        remainder = OFFICIAL_REPO_PREFIX + remainder
    return domain, remainder


def parse_docker_ref(text: str) -> Reference:
    """Parse and normalize a reference string.

    Raises
    ------
    ReferenceParseError
        If the string is empty or violates the reference grammar.
    """
    if not text:
        raise ReferenceParseError("repository name must have at least one component")
    if _IDENTIFIER_RE.match(text):
        raise ReferenceParseError(
            f"invalid repository name ({text}), cannot specify 64-byte hexadecimal strings"
        )

    name, digest = text, None
    if "@" in name:
        name, _, digest = name.partition("@")
        validate_digest(digest)

    tag = None
    last_slash = name.rfind("/")
    colon = name.rfind(":")
    if colon > last_slash:
        name, tag = name[:colon], name[colon + 1:]
        if not _TAG_RE.match(tag):
            raise ReferenceParseError(f"invalid tag format: {tag!r}")

    if len(name) > NAME_TOTAL_LENGTH_MAX:
        raise ReferenceParseError(
            f"repository name must not be more than {NAME_TOTAL_LENGTH_MAX} characters"
        )

    domain, path = _split_domain(name)
    if path.lower() != path:
        raise ReferenceParseError(
            f"invalid reference format: repository name ({path}) must be lowercase"
        )
    if not _DOMAIN_RE.match(domain) or not _PATH_RE.match(path):
        raise ReferenceParseError(f"invalid reference format: {text!r}")

    if digest is not None:
        tag = None
    elif tag is None:
        tag = DEFAULT_TAG
    return Reference(domain=domain, path=path, tag=tag, digest=digest)
