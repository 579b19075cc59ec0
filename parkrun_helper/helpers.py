"""Helper (volunteer) records stored in the ``helpers`` container."""

import uuid
from typing import Any, Dict, List

from ._utils import logger, to_iso, utc_now
from .base import BaseDocumentStore, DocumentNotFoundError

HELPERS_CONTAINER = "helpers"


class HelperNotFoundError(Exception):
    def __init__(self, helper_id: str):
        super().__init__(f"Helper with ID {helper_id} not found")
        self.helper_id = helper_id


class HelperConflictError(Exception):
    def __init__(self, parkrun_id: str):
        super().__init__(f"Helper with Parkrun ID {parkrun_id} already exists")
        self.parkrun_id = parkrun_id


class HelperRepository:
    """CRUD access to helpers, enforcing one helper per Parkrun ID."""

    def __init__(self, store: BaseDocumentStore):
        self.store = store

    async def create(self, data: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        if await self.find_by_parkrun_id(data["parkrunId"]):
            raise HelperConflictError(data["parkrunId"])

        now = to_iso(utc_now())
        helper = {
            **data,
            "id": str(uuid.uuid4()),
            "createdBy": user_id,
            "createdAt": now,
            "updatedAt": now,
        }
        created = await self.store.create(HELPERS_CONTAINER, helper)
        logger.info(f"Created helper {helper['id']} by {user_id}")
        return created

    async def find_all(self) -> List[Dict[str, Any]]:
        return await self.store.fetch_all(HELPERS_CONTAINER)

    async def find_by_id(self, helper_id: str) -> Dict[str, Any]:
        try:
            return await self.store.read(HELPERS_CONTAINER, helper_id)
        except DocumentNotFoundError:
            raise HelperNotFoundError(helper_id)

    async def find_by_parkrun_id(self, parkrun_id: str) -> List[Dict[str, Any]]:
        return await self.store.fetch_all(HELPERS_CONTAINER, filters={"parkrunId": parkrun_id})

    async def update(self, helper_id: str, changes: Dict[str, Any], user_id: str) -> Dict[str, Any]:
        existing = await self.find_by_id(helper_id)

        parkrun_id = changes.get("parkrunId")
        if parkrun_id:
            others = [h for h in await self.find_by_parkrun_id(parkrun_id) if h.get("id") != helper_id]
            if others:
                raise HelperConflictError(parkrun_id)

        updated = {
            **existing,
            **changes,
            "id": helper_id,
            "createdBy": existing.get("createdBy"),
            "createdAt": existing.get("createdAt"),
            "updatedAt": to_iso(utc_now()),
            "lastModifiedBy": user_id,
        }
        try:
            return await self.store.replace(HELPERS_CONTAINER, helper_id, updated)
        except DocumentNotFoundError:
            raise HelperNotFoundError(helper_id)

    async def delete(self, helper_id: str) -> None:
        try:
            await self.store.delete(HELPERS_CONTAINER, helper_id)
        except DocumentNotFoundError:
            raise HelperNotFoundError(helper_id)
        logger.info(f"Deleted helper {helper_id}")
