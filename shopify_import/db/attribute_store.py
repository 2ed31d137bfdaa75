"""
Attribute store: per-store attribute definitions.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from shopify_import.db.base_store import BaseStore

logger = logging.getLogger("attribute_store")

TABLE = "attributes"


class AttributeStore(BaseStore):
    """CRUD for the attributes table."""

    async def find_by_code(self, store_id: str, code: str) -> Optional[Dict[str, Any]]:
        return await self._select_one(TABLE, {"store_id": store_id, "code": code})

    async def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        row = {"id": str(uuid.uuid4()), **data}
        logger.info("attribute created store_id=%s code=%s", data.get("store_id"), data.get("code"))
        return await self._insert(TABLE, row)
