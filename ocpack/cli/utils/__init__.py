"""CLI utilities."""

from .colors import success, error, info, dim, kv, table

__all__ = ["success", "error", "info", "dim", "kv", "table"]
