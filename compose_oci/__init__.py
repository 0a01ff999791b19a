"""compose-oci: load compose projects published as OCI artifacts.

Resolves ``oci://<registry>/<repository>[:tag|@digest]`` paths into local
compose files, cached on disk by content digest:

  - ``OCIRemoteLoader`` — resource loader plugin (accept / load / dir)
  - ``RegistryResolver`` — anonymous OCI distribution API client
  - ``compose-oci`` CLI — resolve, inspect and locate the cache
"""

__version__ = "0.1.0"
__description__ = "Load compose projects published as OCI artifacts"

from compose_oci.core.loader import OCI_PREFIX, OCIRemoteLoader, ResourceLoader
from compose_oci.core.resolver import RegistryResolver, Resolver

__all__ = [
    "OCI_PREFIX",
    "OCIRemoteLoader",
    "RegistryResolver",
    "ResourceLoader",
    "Resolver",
    "__version__",
]
