"""Storage exporters for backup/restore operations."""

from .container_exporter import ContainerExporter

__all__ = ["ContainerExporter"]
