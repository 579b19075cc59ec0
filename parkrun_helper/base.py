from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional

MODIFIED_FIELD = "_ts"


class DocumentNotFoundError(KeyError):
    """Raised when a document id does not exist in a container."""

    def __init__(self, container: str, doc_id: str):
        super().__init__(f"{container}/{doc_id}")
        self.container = container
        self.doc_id = doc_id


@dataclass
class BaseDocumentStore:
    """Per-container document access keyed by ``id``.

    Every stored document carries a server-assigned ``_ts`` field holding
    its last modification time in epoch seconds.
    """

    database_name: str = "parkrunhelper"
    global_config: Dict[str, Any] = field(default_factory=dict)

    async def query(
        self,
        container: str,
        page_size: int = 1000,
        modified_since: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> AsyncIterator[List[Dict[str, Any]]]:
        """Yield pages of raw documents.

        Args:
            container: Container name
            page_size: Maximum number of documents per page
            modified_since: Only documents with ``_ts >= modified_since`` (epoch seconds)
            filters: Field equality constraints
        """
        raise NotImplementedError
        yield  # pragma: no cover

    async def read(self, container: str, doc_id: str) -> Dict[str, Any]:
        raise NotImplementedError

    async def create(self, container: str, document: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    async def replace(self, container: str, doc_id: str, document: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    async def upsert(self, container: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert or replace a document by its ``id``."""
        raise NotImplementedError

    async def delete(self, container: str, doc_id: str) -> None:
        raise NotImplementedError

    async def check_health(self) -> bool:
        return True

    async def close(self) -> None:
        pass

    async def fetch_all(
        self,
        container: str,
        page_size: int = 1000,
        modified_since: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """Collect every page of a query into one list, in iteration order."""
        documents: List[Dict[str, Any]] = []
        async for page in self.query(container, page_size, modified_since, filters):
            documents.extend(page)
        return documents
