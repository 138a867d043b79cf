"""
Component manifest - the ``package.json`` a component declares itself with.

Schema::

    {
        "name": "hello-world",
        "version": "1.0.0",
        "oc": {
            "files": {
                "template": {"src": "template.jade", "type": "jade"},
                "data": "server.py",
                "static": ["img", "css"]
            },
            "minify": true
        }
    }

Packaging rewrites the ``oc`` block in place so that it references the
generated files only; every other key is carried over untouched.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .faults import (
    ManifestFieldMissingFault,
    MissingFileFault,
    PackageIOFault,
    ValidationFault,
)

MANIFEST_FILENAME = "package.json"
TEMPLATE_OUTPUT = "template.py"
DATA_PROVIDER_OUTPUT = "server.py"
DATA_PROVIDER_TYPE = "python"


def normalize_static(value: Any) -> List[str]:
    """
    Normalize a static declaration to an ordered list of directory names.

    ``None``/empty → ``[]``, a bare name → ``[name]``, a list → itself.
    """
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)) and all(isinstance(v, str) and v for v in value):
        return list(value)
    raise ValidationFault(
        "oc.files.static must be a directory name or a list of directory names",
        code="STATIC_DECLARATION_INVALID",
        metadata={"static": value},
    )


@dataclass
class ComponentManifest:
    """Mutable view over a component's ``package.json``."""

    data: Dict[str, Any] = field(default_factory=dict)

    # ── Loading ──────────────────────────────────────────────────────

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ComponentManifest":
        """
        Read a manifest from disk.

        Raises:
            MissingFileFault: If *path* does not exist.
            ValidationFault: If it is not a JSON object.
        """
        path = Path(path)
        if not path.is_file():
            raise MissingFileFault(
                str(path),
                message="component does not contain package.json",
            )
        try:
            with open(path) as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValidationFault(
                f"package.json is not valid JSON: {exc}",
                code="MANIFEST_INVALID",
                metadata={"path": str(path)},
            ) from exc
        except OSError as exc:
            raise PackageIOFault("read", str(path), str(exc)) from exc

        if not isinstance(data, dict):
            raise ValidationFault(
                "package.json must contain a JSON object",
                code="MANIFEST_INVALID",
                metadata={"path": str(path)},
            )
        return cls(data)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ComponentManifest":
        return cls(copy.deepcopy(d))

    def validate(self) -> None:
        """
        Check the fields packaging cannot proceed without.

        Raises:
            ManifestFieldMissingFault: For the first missing field.
        """
        if not isinstance(self.data.get("oc"), dict):
            raise ManifestFieldMissingFault("oc")
        if not isinstance(self._files.get("template"), dict):
            raise ManifestFieldMissingFault("oc.files.template")
        for key in ("src", "type"):
            if not self._files["template"].get(key):
                raise ManifestFieldMissingFault(f"oc.files.template.{key}")

    # ── Accessors ────────────────────────────────────────────────────

    @property
    def _files(self) -> Dict[str, Any]:
        oc = self.data.setdefault("oc", {})
        return oc.setdefault("files", {})

    @property
    def name(self) -> Optional[str]:
        return self.data.get("name")

    @property
    def version(self) -> Optional[str]:
        return self.data.get("version")

    @property
    def template_src(self) -> str:
        return self._files["template"]["src"]

    @property
    def template_type(self) -> str:
        return self._files["template"]["type"]

    @property
    def data_src(self) -> Optional[str]:
        return self._files.get("data") or None

    @property
    def static_dirs(self) -> Tuple[str, ...]:
        return tuple(normalize_static(self._files.get("static")))

    @property
    def minify(self) -> bool:
        """Only an explicit ``false`` disables static minification."""
        return self.data.get("oc", {}).get("minify") is not False

    # ── Rewrites ─────────────────────────────────────────────────────

    def set_template(self, hash_key: str) -> None:
        """Point the template block at the compiled output and drop the legacy client bundle."""
        self._files["template"] = {
            "type": self.template_type,
            "hashKey": hash_key,
            "src": TEMPLATE_OUTPUT,
        }
        self._files.pop("client", None)

    def set_data_provider(self, hash_key: str) -> None:
        self._files["dataProvider"] = {
            "type": DATA_PROVIDER_TYPE,
            "hashKey": hash_key,
            "src": DATA_PROVIDER_OUTPUT,
        }
        self._files.pop("data", None)

    def set_toolchain_version(self, version: str) -> None:
        self.data["oc"]["version"] = version

    def normalize_static(self) -> None:
        self._files["static"] = normalize_static(self._files.get("static"))

    # ── Serialisation ────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self.data)

    def write(self, path: Union[str, Path]) -> None:
        try:
            with open(path, "w") as f:
                json.dump(self.data, f)
        except OSError as exc:
            raise PackageIOFault("write", str(path), str(exc)) from exc
