"""Reference resolution — fetch manifest or blob bytes plus their descriptor.

The loader depends only on the ``Resolver`` protocol.  ``RegistryResolver``
is the default implementation: a small OCI distribution API client built
on httpx that pulls anonymously, answering registry ``Bearer`` challenges
with a token from the registry's auth realm.

Resolution order for ``get(ref)``
---------------------------------
1. ``GET /v2/<repository>/manifests/<tag or digest>``
2. For digest references the manifests endpoint may answer 404 because
   the digest names a plain blob (a layer); the resolver then retries
   ``GET /v2/<repository>/blobs/<digest>``.
"""

from __future__ import annotations

import logging
import re
from typing import Protocol, runtime_checkable

import httpx

from compose_oci.config import LoaderSettings
from compose_oci.core.hasher import compute_digest, matches_digest
from compose_oci.core.media_types import MANIFEST_ACCEPT
from compose_oci.core.reference import DEFAULT_DOMAIN, Reference, parse_docker_ref
from compose_oci.errors import AuthenticationError, NotFoundError, ResolutionError
from compose_oci.models.manifest import Descriptor

logger = logging.getLogger(__name__)

DOCKER_HUB_REGISTRY = "registry-1.docker.io"

_CHALLENGE_PARAM_RE = re.compile(r'(\w+)="([^"]*)"')


@runtime_checkable
class Resolver(Protocol):
    """Anything that can turn a reference string into content + descriptor."""

    def get(self, ref: str) -> tuple[bytes, Descriptor]:
        """Fetch the content ``ref`` points at.

        Implementations raise ``ResolutionError`` (or a subclass) on
        network, authentication or not-found failures.
        """
        ...


def parse_bearer_challenge(header: str) -> dict[str, str] | None:
    """Parse a ``WWW-Authenticate: Bearer ...`` header into its parameters.

    Returns None for any other scheme.

    Examples
    --------
    >>> parse_bearer_challenge('Bearer realm="https://auth/token",service="reg"')
    {'realm': 'https://auth/token', 'service': 'reg'}
    """
    scheme, _, params = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return dict(_CHALLENGE_PARAM_RE.findall(params))


class RegistryResolver:
    """Anonymous OCI distribution API client.

    Parameters
    ----------
    settings:
        Loader settings; supplies the request timeout, user agent and the
        registries to reach over plain HTTP.
    client:
        Optional pre-built ``httpx.Client``.  A client passed in is not
        closed by ``close()``.
    """

    def __init__(
        self,
        settings: LoaderSettings | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings or LoaderSettings()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=self._settings.timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": self._settings.user_agent},
        )
        self._tokens: dict[tuple[str, str], str] = {}

    def __enter__(self) -> RegistryResolver:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get(self, ref: str) -> tuple[bytes, Descriptor]:
        """Fetch the manifest or blob ``ref`` names.

        Raises
        ------
        ReferenceParseError
            If ``ref`` is not a valid reference.
        NotFoundError
            If the registry has nothing under ``ref``.
        AuthenticationError
            If the registry refuses anonymous access.
        ResolutionError
            On any other HTTP or transport failure, or a digest mismatch.
        """
        parsed = parse_docker_ref(ref)
        base = self._base_url(parsed.domain)
        scope = f"repository:{parsed.path}:pull"

        target = parsed.digest or parsed.tag
        response = self._request(
            f"{base}/v2/{parsed.path}/manifests/{target}",
            parsed.domain,
            scope,
            accept=", ".join(MANIFEST_ACCEPT),
        )
        if response.status_code == 404 and parsed.digest:
            logger.debug("No manifest %s, trying blob endpoint", parsed.digest)
            response = self._request(
                f"{base}/v2/{parsed.path}/blobs/{parsed.digest}",
                parsed.domain,
                scope,
            )
        self._raise_for_status(response, ref)

        content = response.content
        return content, self._descriptor(parsed, response, content)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _base_url(self, domain: str) -> str:
        host = DOCKER_HUB_REGISTRY if domain == DEFAULT_DOMAIN else domain
        scheme = "http" if domain in self._settings.insecure_registries else "https"
        return f"{scheme}://{host}"

    def _request(
        self,
        url: str,
        domain: str,
        scope: str,
        accept: str | None = None,
    ) -> httpx.Response:
        headers: dict[str, str] = {}
        if accept:
            headers["Accept"] = accept
        token = self._tokens.get((domain, scope))
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self._client.get(url, headers=headers)
            if response.status_code == 401:
                challenge = parse_bearer_challenge(
                    response.headers.get("WWW-Authenticate", "")
                )
                if challenge is not None:
                    if token:
                        logger.debug("Cached token for %s on %s rejected, renewing", scope, domain)
                        del self._tokens[(domain, scope)]
                    token = self._fetch_token(challenge, scope)
                    self._tokens[(domain, scope)] = token
                    headers["Authorization"] = f"Bearer {token}"
                    response = self._client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise ResolutionError(f"failed to fetch {url}: {exc}") from exc
        return response

    def _fetch_token(self, challenge: dict[str, str], scope: str) -> str:
        realm = challenge.get("realm")
        if not realm:
            raise AuthenticationError("registry auth challenge carries no realm")
        params = {"scope": challenge.get("scope", scope)}
        if "service" in challenge:
            params["service"] = challenge["service"]

        logger.debug("Requesting anonymous token from %s for %s", realm, params["scope"])
        response = self._client.get(realm, params=params)
        if response.status_code != 200:
            raise AuthenticationError(
                f"token request to {realm} failed with HTTP {response.status_code}"
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise AuthenticationError(f"invalid token response from {realm}") from exc
        token = None
        if isinstance(body, dict):
            token = body.get("token") or body.get("access_token")
        if not token:
            raise AuthenticationError(f"token response from {realm} carries no token")
        return token

    @staticmethod
    def _raise_for_status(response: httpx.Response, ref: str) -> None:
        status = response.status_code
        if status == 404:
            raise NotFoundError(f"{ref}: not found")
        if status in (401, 403):
            raise AuthenticationError(f"{ref}: access denied (HTTP {status})")
        if status >= 400:
            raise ResolutionError(f"{ref}: registry answered HTTP {status}")

    @staticmethod
    def _descriptor(
        parsed: Reference,
        response: httpx.Response,
        content: bytes,
    ) -> Descriptor:
        if parsed.digest:
            if not matches_digest(content, parsed.digest):
                raise ResolutionError(
                    f"content fetched for {parsed} does not match its digest"
                )
            digest = parsed.digest
        else:
            digest = response.headers.get("Docker-Content-Digest") or compute_digest(content)
        media_type = response.headers.get("Content-Type", "").split(";")[0].strip()
        return Descriptor(mediaType=media_type, digest=digest, size=len(content))
