"""
OAuth token store: per-store Shopify connection records.
"""

import logging
from typing import Any, Dict, Optional

from shopify_import.db.base_store import BaseStore

logger = logging.getLogger("oauth_token_store")

# Placeholder written while an OAuth handshake is still in flight
PENDING_VALUE = "pending"


class ShopifyOAuthTokenStore(BaseStore):
    """Reads the shopify_oauth_tokens table."""

    async def find_by_store(self, store_id: str) -> Optional[Dict[str, Any]]:
        """Return the store's connection, or None when it is missing or unfinished."""
        record = await self._select_one("shopify_oauth_tokens", {"store_id": store_id})
        if not record:
            return None
        if not record.get("access_token") or record.get("access_token") == PENDING_VALUE:
            logger.info("shopify token pending store_id=%s", store_id)
            return None
        if not record.get("shop_domain") or record.get("shop_domain") == PENDING_VALUE:
            logger.info("shopify shop domain pending store_id=%s", store_id)
            return None
        return record
