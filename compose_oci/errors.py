"""Exception hierarchy for OCI remote resource loading.

Every failure raised by the loader derives from ``OCIRemoteError`` so the
surrounding configuration pipeline can catch one type.  Subclasses map to
the failure families a caller may want to tell apart:

* ``OCIRemoteConfigError`` — the feature flag holds an invalid value.
* ``OCIRemoteDisabledError`` — the feature flag turns the loader off.
* ``ReferenceParseError`` / ``ManifestParseError`` — malformed input.
* ``ResolutionError`` — registry, network or authentication failure.
* ``ManifestValidationError`` — the artifact is not a compose project.
* ``MaterializationError`` — a layer cannot be written to disk; file
  system errors are wrapped in it, never raised bare.

Offline mode is not an error: the loader returns an empty path instead.
"""

from __future__ import annotations


class OCIRemoteError(RuntimeError):
    """Base class for all OCI remote loader failures."""


class OCIRemoteConfigError(OCIRemoteError):
    """Raised when loader configuration (e.g. the feature flag) is malformed."""


class OCIRemoteDisabledError(OCIRemoteError):
    """Raised when the OCI remote loader is disabled by environment variable."""


class ReferenceParseError(OCIRemoteError, ValueError):
    """Raised when an artifact reference string cannot be parsed."""


class ManifestParseError(OCIRemoteError, ValueError):
    """Raised when fetched manifest bytes are not a valid OCI manifest."""


class ResolutionError(OCIRemoteError):
    """Raised when a reference cannot be resolved against its registry."""


class NotFoundError(ResolutionError):
    """The registry has no manifest or blob for the requested reference."""


class AuthenticationError(ResolutionError):
    """The registry refused access to the requested reference."""


class ManifestValidationError(OCIRemoteError):
    """Raised when a manifest does not describe a compose project artifact."""


class MaterializationError(OCIRemoteError):
    """Raised when artifact layers cannot be written to the cache directory."""


class CacheEntryExistsError(MaterializationError):
    """The artifact directory appeared while this process was about to create it.

    Another writer owns the directory; it is left untouched.
    """
