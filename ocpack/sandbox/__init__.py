"""
Data provider sandboxing: local dependency discovery and bundling.
"""

from .resolver import (
    discover_requires,
    evaluate_requires,
    is_local_alias,
    resolve_alias_path,
    resolve_local_requires,
    scan_requires,
)
from .bundler import bundle_data_provider, build_data_provider

__all__ = [
    "discover_requires",
    "evaluate_requires",
    "is_local_alias",
    "resolve_alias_path",
    "resolve_local_requires",
    "scan_requires",
    "bundle_data_provider",
    "build_data_provider",
]
