"""Core OCI artifact resolution: references, registry access, caching,
manifest validation, layer materialization and the loader facade."""
