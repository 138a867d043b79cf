"""
Artifact value objects produced by the packaging stages.

Both artifacts share the same hashing discipline: ``hash_key`` is derived
from the artifact text with :func:`ocpack.hashing.hash_string` and is what
the rendering runtime uses to find a cached renderer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class TemplateArtifact:
    """Compiled, registered and minified render function."""

    hash_key: str
    compiled_source: str

    def to_dict(self) -> Dict[str, Any]:
        return {"hashKey": self.hash_key, "compiledSource": self.compiled_source}


@dataclass(frozen=True)
class DataProviderArtifact:
    """Sandboxed, minified data provider script."""

    hash_key: str
    bundled_source: str

    def to_dict(self) -> Dict[str, Any]:
        return {"hashKey": self.hash_key, "bundledSource": self.bundled_source}
