"""Document container backup/restore exporter."""

import math
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ...base import BaseDocumentStore
from ..._utils import logger
from ..utils import strip_system_properties


class ContainerExporter:
    """Export and restore the documents of one store's containers."""

    def __init__(self, store: BaseDocumentStore):
        """Initialize exporter.

        Args:
            store: Document store holding the containers
        """
        self.store = store

    async def export(
        self,
        container: str,
        batch_size: int = 1000,
        since: Optional[datetime] = None,
        include_metadata: bool = True,
    ) -> List[Dict[str, Any]]:
        """Read every document of a container, page by page.

        Args:
            container: Container name
            batch_size: Page size for the paginated query
            since: Only include documents modified at or after this instant
            include_metadata: Keep store system properties on each document

        Returns:
            Documents in query iteration order
        """
        # _ts has whole-second resolution, round up so nothing older than since slips in
        modified_since = math.ceil(since.timestamp()) if since is not None else None

        records: List[Dict[str, Any]] = []
        page_count = 0
        async for page in self.store.query(container, page_size=batch_size, modified_since=modified_since):
            page_count += 1
            records.extend(page if include_metadata else [strip_system_properties(doc) for doc in page])

        logger.debug(f"Exported {container}: {len(records)} documents in {page_count} pages")
        return records

    async def restore(self, container: str, records: List[Dict[str, Any]]) -> Tuple[int, int]:
        """Upsert records into a container in file order.

        A failing record is logged and skipped; the rest still restore.

        Returns:
            Tuple of (restored, failed) counts
        """
        restored = 0
        failed = 0

        for record in records:
            try:
                await self.store.upsert(container, record)
                restored += 1
            except Exception as e:
                failed += 1
                record_id = record.get("id") if isinstance(record, dict) else None
                logger.error(f"Failed to restore record {record_id} into {container}: {e}")

        logger.debug(f"Restored {container}: {restored} records, {failed} failures")
        return restored, failed
