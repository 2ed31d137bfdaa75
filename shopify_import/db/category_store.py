"""
Category store: categories written by catalog imports.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from shopify_import.db.base_store import BaseStore

logger = logging.getLogger("category_store")

TABLE = "categories"


class CategoryStore(BaseStore):
    """CRUD for the categories table."""

    async def find_for_import(
        self, store_id: str, external_id: str, slug: str | None
    ) -> Optional[Dict[str, Any]]:
        return await self._find_for_import(TABLE, store_id, external_id, "slug", slug)

    async def find_by_external_id(self, store_id: str, external_id: str) -> Optional[Dict[str, Any]]:
        return await self._select_one(TABLE, {"store_id": store_id, "external_id": external_id})

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        row = {"id": str(uuid.uuid4()), **data}
        return await self._insert(TABLE, row)

    async def update(self, category_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._update(TABLE, {"id": category_id}, data)
