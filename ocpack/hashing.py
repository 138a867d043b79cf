"""
Content hashing - the identity mechanism for packaged artifacts.

A hash key names a compiled template or bundled data provider inside the
rendering runtime's cache, so the same text must always produce the same
key, on any machine and in any process.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Union

HASH_ALGORITHM = "sha1"


def hash_bytes(data: bytes, algorithm: str = HASH_ALGORITHM) -> str:
    """Hex digest of raw bytes."""
    h = hashlib.new(algorithm)
    h.update(data)
    return h.hexdigest()


def hash_string(text: str, algorithm: str = HASH_ALGORITHM) -> str:
    """Hex digest of *text* encoded as UTF-8."""
    return hash_bytes(text.encode("utf-8"), algorithm)


def hash_file(path: Union[str, Path], algorithm: str = HASH_ALGORITHM) -> str:
    """Hex digest of a file's contents, read in chunks."""
    h = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1 << 16), b""):
            h.update(chunk)
    return h.hexdigest()
