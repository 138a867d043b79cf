"""Toolchain version source stamped into packaged manifests."""

from __future__ import annotations

import json
from typing import Optional

from .config import PackagerConfig
from .faults import MissingFileFault, PackageIOFault


def toolchain_version(config: Optional[PackagerConfig] = None) -> str:
    """
    Version of the packaging toolchain.

    Reads ``version`` from ``config.toolchain_manifest`` when one is
    configured, otherwise reports the installed ``ocpack`` version.

    Raises:
        MissingFileFault: If the configured toolchain manifest does not exist.
        PackageIOFault: If it cannot be read or has no version.
    """
    manifest = config.toolchain_manifest if config else None
    if manifest is None:
        from . import __version__
        return __version__

    if not manifest.is_file():
        raise MissingFileFault(
            str(manifest),
            message="error resolving toolchain manifest",
        )

    try:
        with open(manifest) as f:
            version = json.load(f).get("version")
    except (OSError, ValueError, AttributeError) as exc:
        raise PackageIOFault("read", str(manifest), str(exc)) from exc

    if not isinstance(version, str) or not version:
        raise PackageIOFault("read", str(manifest), "no version declared")
    return version
