"""Loader configuration — env-driven via pydantic-settings.

Two settings groups are read from the environment:

* ``LoaderSettings`` (``COMPOSE_OCI_*``) — cache location, offline mode,
  logging and registry client behaviour.
* ``ExperimentalFlags`` (``COMPOSE_EXPERIMENTAL_*``) — the feature flag
  that turns the OCI remote loader on or off.  It is re-read on every
  load so that a change in the environment takes effect immediately.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from compose_oci.errors import OCIRemoteConfigError

OCI_REMOTE_ENABLED = "COMPOSE_EXPERIMENTAL_OCI_REMOTE"

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})


class LoaderSettings(BaseSettings):
    """Settings for the OCI remote loader and its registry client.

    Examples
    --------
    Override via environment::

        export COMPOSE_OCI_CACHE_DIR=/var/cache/compose
        export COMPOSE_OCI_OFFLINE=true
        export COMPOSE_OCI_INSECURE_REGISTRIES='["localhost:5000"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="COMPOSE_OCI_",
        env_ignore_empty=True,
    )

    # Storage
    cache_dir: Path | None = None

    # Runtime
    offline: bool = False
    log_level: str = "INFO"

    # Registry client
    timeout_seconds: float = 30.0
    insecure_registries: list[str] = []
    user_agent: str = "compose-oci"


class ExperimentalFlags(BaseSettings):
    """Feature flags for experimental loaders.  Absent means enabled.

    Values follow the strict boolean spellings of the compose CLI
    (``1 t T TRUE true True 0 f F FALSE false False``); anything else,
    including ``yes`` and ``no``, is a configuration error.
    """

    model_config = SettingsConfigDict(
        env_prefix="COMPOSE_EXPERIMENTAL_",
        env_ignore_empty=True,
    )

    oci_remote: bool = True

    @field_validator("oci_remote", mode="before")
    @classmethod
    def _strict_bool(cls, value: Any) -> Any:
        if isinstance(value, str):
            if value in _TRUE_VALUES:
                return True
            if value in _FALSE_VALUES:
                return False
            raise ValueError(f"invalid boolean {value!r}")
        return value


def oci_remote_enabled() -> bool:
    """Read ``COMPOSE_EXPERIMENTAL_OCI_REMOTE`` from the environment.

    Raises
    ------
    OCIRemoteConfigError
        If the variable is set to something that is not a boolean.
    """
    try:
        return ExperimentalFlags().oci_remote
    except ValidationError as exc:
        raise OCIRemoteConfigError(
            f"{OCI_REMOTE_ENABLED} environment variable expects boolean value: {exc}"
        ) from exc
