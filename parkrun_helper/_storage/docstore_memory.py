"""In-process document store for local development and tests."""

import copy
import time
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from ..base import BaseDocumentStore, DocumentNotFoundError, MODIFIED_FIELD
from .._utils import logger


@dataclass
class MemoryDocumentStore(BaseDocumentStore):
    """Dictionary-backed store that mimics Cosmos DB write semantics."""

    clock: Callable[[], float] = field(default=time.time)
    _containers: Dict[str, Dict[str, Dict[str, Any]]] = field(init=False, default_factory=dict)

    def __post_init__(self):
        logger.info(f"Using in-memory document store for database: {self.database_name}")

    def _container(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._containers.setdefault(name, {})

    def _stamp(self, document: Dict[str, Any]) -> Dict[str, Any]:
        if "id" not in document:
            raise ValueError("Document is missing required 'id' field")
        stored = copy.deepcopy(document)
        stored[MODIFIED_FIELD] = int(self.clock())
        return stored

    def seed(self, container: str, documents: List[Dict[str, Any]]) -> None:
        """Load documents as-is, keeping any ``_ts`` they already carry."""
        target = self._container(container)
        for document in documents:
            stored = copy.deepcopy(document)
            stored.setdefault(MODIFIED_FIELD, int(self.clock()))
            target[stored["id"]] = stored

    def snapshot(self, container: str) -> Dict[str, Dict[str, Any]]:
        return copy.deepcopy(self._container(container))

    async def query(
        self,
        container: str,
        page_size: int = 1000,
        modified_since: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> AsyncIterator[List[Dict[str, Any]]]:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")

        matches = [
            copy.deepcopy(doc)
            for doc in self._container(container).values()
            if (modified_since is None or doc.get(MODIFIED_FIELD, 0) >= modified_since)
            and all(doc.get(k) == v for k, v in (filters or {}).items())
        ]

        for start in range(0, len(matches), page_size):
            yield matches[start:start + page_size]

    async def read(self, container: str, doc_id: str) -> Dict[str, Any]:
        doc = self._container(container).get(doc_id)
        if doc is None:
            raise DocumentNotFoundError(container, doc_id)
        return copy.deepcopy(doc)

    async def create(self, container: str, document: Dict[str, Any]) -> Dict[str, Any]:
        target = self._container(container)
        if document.get("id") in target:
            raise ValueError(f"Document {document['id']} already exists in {container}")
        stored = self._stamp(document)
        target[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def replace(self, container: str, doc_id: str, document: Dict[str, Any]) -> Dict[str, Any]:
        target = self._container(container)
        if doc_id not in target:
            raise DocumentNotFoundError(container, doc_id)
        stored = self._stamp({**document, "id": doc_id})
        target[doc_id] = stored
        return copy.deepcopy(stored)

    async def upsert(self, container: str, document: Dict[str, Any]) -> Dict[str, Any]:
        stored = self._stamp(document)
        self._container(container)[stored["id"]] = stored
        return copy.deepcopy(stored)

    async def delete(self, container: str, doc_id: str) -> None:
        target = self._container(container)
        if doc_id not in target:
            raise DocumentNotFoundError(container, doc_id)
        del target[doc_id]
