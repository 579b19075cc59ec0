"""Storage module with lazy loading support."""

from typing import TYPE_CHECKING

from .factory import StorageFactory

if TYPE_CHECKING:
    from .docstore_cosmos import CosmosDocumentStore
    from .docstore_memory import MemoryDocumentStore


def __getattr__(name):
    """Lazy import storage backends so azure-cosmos loads only when used."""
    if name == "CosmosDocumentStore":
        from .docstore_cosmos import CosmosDocumentStore
        return CosmosDocumentStore
    elif name == "MemoryDocumentStore":
        from .docstore_memory import MemoryDocumentStore
        return MemoryDocumentStore
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = ["StorageFactory", "CosmosDocumentStore", "MemoryDocumentStore"]
