"""Azure Cosmos DB document store backend."""

import re
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

from azure.cosmos import exceptions as cosmos_exceptions
from azure.cosmos.aio import CosmosClient

from ..base import BaseDocumentStore, DocumentNotFoundError, MODIFIED_FIELD
from .._utils import logger

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def build_query(
    modified_since: Optional[int] = None,
    filters: Optional[Dict[str, Any]] = None,
) -> Tuple[str, List[Dict[str, Any]]]:
    """Build a parameterized Cosmos SQL query.

    Returns:
        Tuple of query text and parameter list
    """
    clauses = []
    parameters: List[Dict[str, Any]] = []

    if modified_since is not None:
        clauses.append(f"c.{MODIFIED_FIELD} >= @since")
        parameters.append({"name": "@since", "value": modified_since})

    for name, value in (filters or {}).items():
        if not _FIELD_NAME.match(name):
            raise ValueError(f"Invalid filter field name: {name}")
        clauses.append(f"c.{name} = @{name}")
        parameters.append({"name": f"@{name}", "value": value})

    query = "SELECT * FROM c"
    if clauses:
        query += " WHERE " + " AND ".join(clauses)
    return query, parameters


@dataclass
class CosmosDocumentStore(BaseDocumentStore):
    """Cosmos DB store; containers are partitioned by ``/id``."""

    _client: Optional[Any] = field(init=False, default=None)
    _database: Optional[Any] = field(init=False, default=None)
    _initialized: bool = field(init=False, default=False)

    def __post_init__(self):
        self.endpoint = self.global_config.get("cosmos_endpoint")
        self.key = self.global_config.get("cosmos_key")
        self.user_agent_suffix = self.global_config.get("cosmos_user_agent_suffix", "ParkrunHelperApp")

        if not self.endpoint or not self.key:
            raise ValueError("COSMOS_DB_ENDPOINT and COSMOS_DB_KEY must be configured")

    async def _ensure_initialized(self):
        """Ensure the Cosmos client is created."""
        if self._initialized:
            return

        self._client = CosmosClient(
            self.endpoint,
            credential=self.key,
            user_agent_suffix=self.user_agent_suffix,
        )
        self._database = self._client.get_database_client(self.database_name)
        self._initialized = True
        logger.info(f"Connected to Cosmos DB database: {self.database_name}")

    async def _container(self, name: str) -> Any:
        await self._ensure_initialized()
        return self._database.get_container_client(name)

    async def query(
        self,
        container: str,
        page_size: int = 1000,
        modified_since: Optional[int] = None,
        filters: Optional[Dict[str, Any]] = None,
    ) -> AsyncIterator[List[Dict[str, Any]]]:
        client = await self._container(container)
        query, parameters = build_query(modified_since, filters)

        items = client.query_items(
            query=query,
            parameters=parameters or None,
            max_item_count=page_size,
        )

        async for page in items.by_page():
            batch = [item async for item in page]
            logger.debug(f"Fetched page of {len(batch)} documents from {container}")
            yield batch

    async def read(self, container: str, doc_id: str) -> Dict[str, Any]:
        client = await self._container(container)
        try:
            return await client.read_item(item=doc_id, partition_key=doc_id)
        except cosmos_exceptions.CosmosResourceNotFoundError:
            raise DocumentNotFoundError(container, doc_id)

    async def create(self, container: str, document: Dict[str, Any]) -> Dict[str, Any]:
        client = await self._container(container)
        return await client.create_item(body=document)

    async def replace(self, container: str, doc_id: str, document: Dict[str, Any]) -> Dict[str, Any]:
        client = await self._container(container)
        try:
            return await client.replace_item(item=doc_id, body={**document, "id": doc_id})
        except cosmos_exceptions.CosmosResourceNotFoundError:
            raise DocumentNotFoundError(container, doc_id)

    async def upsert(self, container: str, document: Dict[str, Any]) -> Dict[str, Any]:
        client = await self._container(container)
        return await client.upsert_item(body=document)

    async def delete(self, container: str, doc_id: str) -> None:
        client = await self._container(container)
        try:
            await client.delete_item(item=doc_id, partition_key=doc_id)
        except cosmos_exceptions.CosmosResourceNotFoundError:
            raise DocumentNotFoundError(container, doc_id)

    async def check_health(self) -> bool:
        await self._ensure_initialized()
        try:
            await self._database.read()
            return True
        except cosmos_exceptions.CosmosHttpResponseError as e:
            logger.warning(f"Cosmos DB health check failed: {e}")
            return False

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
            self._database = None
            self._initialized = False
