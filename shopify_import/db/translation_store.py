"""
Translation store: languages and product translations.
"""

import logging
from typing import Any, Dict

from shopify_import.core.constants import DEFAULT_LANGUAGE
from shopify_import.db.base_store import BaseStore

logger = logging.getLogger("translation_store")


class TranslationStore(BaseStore):
    """Ensures languages exist and upserts product_translations rows."""

    async def ensure_language(self, code: str) -> Dict[str, Any]:
        existing = await self._select_one("languages", {"code": code})
        if existing:
            return existing

        defaults = DEFAULT_LANGUAGE if code == DEFAULT_LANGUAGE["code"] else {}
        row = {
            "code": code,
            "name": defaults.get("name", code),
            "native_name": defaults.get("native_name", code),
            "is_active": True,
        }
        logger.info("language created code=%s", code)
        return await self._insert("languages", row)

    async def upsert_product_translation(
        self, product_id: str, language_code: str, fields: Dict[str, Any]
    ) -> Dict[str, Any]:
        row = {"product_id": product_id, "language_code": language_code, **fields}
        return await self._upsert(
            "product_translations", row, on_conflict="product_id,language_code"
        )
