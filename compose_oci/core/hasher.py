"""Content digest helpers for verifying registry responses."""

from __future__ import annotations

import hashlib


def compute_digest(data: bytes, algorithm: str = "sha256") -> str:
    """Digest ``data`` with ``algorithm`` and return ``"<algorithm>:<hex>"``."""
    return f"{algorithm}:{hashlib.new(algorithm, data).hexdigest()}"


def matches_digest(data: bytes, digest: str) -> bool:
    """Re-hash ``data`` with the digest's own algorithm and compare.

    Returns False for algorithms ``hashlib`` does not provide.
    """
    algorithm, _, _ = digest.partition(":")
    try:
        return compute_digest(data, algorithm) == digest
    except ValueError:
        return False
