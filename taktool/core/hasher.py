"""Hashing helpers for artifact content digests.

The digest is an identity fingerprint written into the inventory, not an
integrity check.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

_CHUNK_SIZE = 1024 * 1024


def sha256_file(path: Path) -> str:
    """Stream a file through SHA-256 and return the hex digest.

    The file is read in fixed-size chunks so large artifacts are never held
    in memory at once.
    """
    h = hashlib.sha256()
    with Path(path).open("rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()
