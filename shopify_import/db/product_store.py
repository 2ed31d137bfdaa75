"""
Product store: product rows written by catalog imports.
"""

import uuid
from typing import Any, Dict, Optional

from shopify_import.db.base_store import BaseStore

TABLE = "products"


class ProductStore(BaseStore):
    """CRUD for the products table."""

    async def find_for_import(
        self, store_id: str, external_id: str, sku: str | None
    ) -> Optional[Dict[str, Any]]:
        return await self._find_for_import(TABLE, store_id, external_id, "sku", sku)

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        row = {"id": str(uuid.uuid4()), **data}
        return await self._insert(TABLE, row)

    async def update(self, product_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return await self._update(TABLE, {"id": product_id}, data)
