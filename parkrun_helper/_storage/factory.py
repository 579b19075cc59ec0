"""Document store factory for centralized backend creation."""

from typing import Callable, Dict, Type

from ..base import BaseDocumentStore
from ..config import CosmosConfig


def _get_cosmos_storage() -> Type[BaseDocumentStore]:
    from .docstore_cosmos import CosmosDocumentStore
    return CosmosDocumentStore


def _get_memory_storage() -> Type[BaseDocumentStore]:
    from .docstore_memory import MemoryDocumentStore
    return MemoryDocumentStore


class StorageFactory:
    """Factory for creating document store backends."""

    _backends: Dict[str, Callable[[], Type[BaseDocumentStore]]] = {
        "cosmos": _get_cosmos_storage,
        "memory": _get_memory_storage,
    }

    @classmethod
    def create_document_store(cls, config: CosmosConfig) -> BaseDocumentStore:
        """Create a document store instance.

        Args:
            config: Document store configuration

        Returns:
            Configured document store

        Raises:
            ValueError: If backend is not registered
        """
        if config.backend not in cls._backends:
            raise ValueError(f"Unknown document store backend: {config.backend}. Available: {set(cls._backends)}")

        storage_class = cls._backends[config.backend]()
        return storage_class(
            database_name=config.database_name,
            global_config={
                "cosmos_endpoint": config.endpoint,
                "cosmos_key": config.key,
                "cosmos_user_agent_suffix": config.user_agent_suffix,
            },
        )
