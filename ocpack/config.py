"""
Config system - typed packager configuration with layered loading.

Merge order (later overrides earlier):
1. Dataclass defaults
2. JSON config file
3. ``.env`` file (``OCPACK_*`` keys)
4. Environment variables (``OCPACK_*`` prefix)
5. Manual overrides

The resulting :class:`PackagerConfig` is injected into the packager; nothing
in the engine reads process-wide state on its own.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import dotenv_values

from .faults import ConfigInvalidFault

DISCOVERY_STRATEGIES = ("scan", "evaluate")


@dataclass(frozen=True)
class PackagerConfig:
    """
    Packaging options.

    Attributes:
        output_dirname: Name of the output directory created inside the component
        toolchain_manifest: JSON file supplying the toolchain version stamped
            into packaged manifests (``None`` uses ``ocpack.__version__``)
        registry_namespace: Shared namespace compiled templates register into
        registry_bucket: Bucket inside the namespace, keyed by hash
        discovery_strategy: ``scan`` (static analysis) or ``evaluate``
        discovery_timeout: Seconds an ``evaluate`` discovery may run
        static_workers: Thread pool size for per-file static asset work
    """

    output_dirname: str = "_package"
    toolchain_manifest: Optional[Path] = None
    registry_namespace: str = "oc"
    registry_bucket: str = "components"
    discovery_strategy: str = "scan"
    discovery_timeout: float = 5.0
    static_workers: int = 4

    def __post_init__(self):
        if self.discovery_strategy not in DISCOVERY_STRATEGIES:
            raise ConfigInvalidFault(
                "discovery_strategy",
                f"expected one of {', '.join(DISCOVERY_STRATEGIES)}, got {self.discovery_strategy!r}",
            )
        if not isinstance(self.discovery_timeout, (int, float)) or self.discovery_timeout <= 0:
            raise ConfigInvalidFault("discovery_timeout", "must be a positive number of seconds")
        if not isinstance(self.static_workers, int) or self.static_workers < 1:
            raise ConfigInvalidFault("static_workers", "must be a positive integer")
        if not self.output_dirname or "/" in self.output_dirname or "\\" in self.output_dirname:
            raise ConfigInvalidFault("output_dirname", "must be a plain directory name")
        for key in ("registry_namespace", "registry_bucket"):
            value = getattr(self, key)
            if not isinstance(value, str) or not value.isidentifier():
                raise ConfigInvalidFault(key, "must be a valid identifier")
        if self.toolchain_manifest is not None and not isinstance(self.toolchain_manifest, Path):
            object.__setattr__(self, "toolchain_manifest", Path(self.toolchain_manifest))

    @classmethod
    def load(
        cls,
        path: Optional[str] = None,
        *,
        env_file: Optional[str] = None,
        env_prefix: str = "OCPACK_",
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "PackagerConfig":
        """
        Build a config from files, environment and overrides.

        Args:
            path: JSON config file
            env_file: Path to ``.env`` file
            env_prefix: Prefix for environment variables
            overrides: Manual overrides (highest precedence)

        Raises:
            ConfigInvalidFault: If a file is unreadable or a value is invalid.
        """
        data: Dict[str, Any] = {}

        if path:
            data.update(_load_json_file(Path(path)))

        if env_file and Path(env_file).exists():
            data.update(_from_prefixed(dotenv_values(env_file), env_prefix))

        data.update(_from_prefixed(os.environ, env_prefix))

        if overrides:
            data.update({k: v for k, v in overrides.items() if v is not None})

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigInvalidFault(unknown[0], "unknown configuration key")

        return cls(**data)

    def with_overrides(self, **kwargs: Any) -> "PackagerConfig":
        """Copy with the non-``None`` keyword values replaced."""
        return replace(self, **{k: v for k, v in kwargs.items() if v is not None})


def _load_json_file(path: Path) -> Dict[str, Any]:
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigInvalidFault(str(path), "config file not found")
    except json.JSONDecodeError as exc:
        raise ConfigInvalidFault(str(path), f"invalid JSON: {exc}")
    if not isinstance(data, dict):
        raise ConfigInvalidFault(str(path), "config file must contain a JSON object")
    return data


def _from_prefixed(source, prefix: str) -> Dict[str, Any]:
    """Collect ``OCPACK_STATIC_WORKERS=8`` style entries as ``{"static_workers": 8}``."""
    return {
        key[len(prefix):].lower(): _parse_value(value)
        for key, value in source.items()
        if key.startswith(prefix) and value is not None
    }


def _parse_value(value: str) -> Any:
    """Parse string value to appropriate type."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False

    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        pass

    return value
