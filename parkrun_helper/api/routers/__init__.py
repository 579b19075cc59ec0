"""API routers."""

from . import backup, health, helpers, metrics, secure

__all__ = ["backup", "health", "helpers", "metrics", "secure"]
