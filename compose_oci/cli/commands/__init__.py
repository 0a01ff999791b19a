"""Subcommands of the ``compose-oci`` CLI."""
