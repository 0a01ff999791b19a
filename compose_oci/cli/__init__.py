"""compose-oci CLI — Typer-based command-line interface.

Provides the ``compose-oci`` command with subcommands for resolving OCI
references to local compose files, inspecting artifact manifests, and
locating the cache directory.

All output uses Rich for formatted terminal display.
"""
