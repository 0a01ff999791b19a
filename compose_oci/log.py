"""Console logging for the compose-oci CLI.

Library modules only create loggers; handlers are installed here, by the
command-line entry point.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def setup_logging(level: str = "INFO") -> None:
    """Route logging through a RichHandler on stderr.  Safe to call twice.

    Unknown level names fall back to ``INFO``.
    """
    level = level.upper().strip()
    if level not in _LEVELS:
        level = "INFO"

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[
            RichHandler(
                console=Console(stderr=True),
                rich_tracebacks=True,
                show_path=False,
            )
        ],
    )
