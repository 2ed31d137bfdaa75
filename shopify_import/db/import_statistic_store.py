"""
Import statistic store: one row per import run, latest row per type.

The akeneo_import_statistics table is shared by every import source;
import_method tells them apart.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from shopify_import.core.constants import IMPORT_TYPES
from shopify_import.core.exceptions import ValidationError
from shopify_import.db.base_store import BaseStore
from shopify_import.schemas.shopify_import import ImportStatisticRecord

logger = logging.getLogger("import_statistic_store")

TABLE = "akeneo_import_statistics"


class ImportStatisticStore(BaseStore):
    """Insert-only statistics log with a per-type latest view."""

    async def save_import_results(
        self, store_id: str, import_type: str, results: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Record the outcome of one import run.

        ``results`` uses the snake_case counter names
        (total_processed, successful_imports, failed_imports,
        skipped_imports, error_details, import_method,
        processing_time_seconds); anything missing defaults to zero/None.
        """
        if import_type not in IMPORT_TYPES:
            raise ValidationError(f"Unknown import type: {import_type}")

        row = {
            "store_id": store_id,
            "import_type": import_type,
            "import_date": datetime.now(timezone.utc).isoformat(),
            "total_processed": results.get("total_processed") or 0,
            "successful_imports": results.get("successful_imports") or 0,
            "failed_imports": results.get("failed_imports") or 0,
            "skipped_imports": results.get("skipped_imports") or 0,
            "import_method": results.get("import_method") or "manual",
            "error_details": results.get("error_details") or None,
            "processing_time_seconds": results.get("processing_time_seconds") or 0,
        }
        saved = await self._insert(TABLE, row)
        logger.info(
            "import statistics saved store_id=%s type=%s total=%s ok=%s failed=%s skipped=%s",
            store_id, import_type, row["total_processed"], row["successful_imports"],
            row["failed_imports"], row["skipped_imports"],
        )
        return saved

    async def get_latest_stats(self, store_id: str) -> Dict[str, Dict[str, Any]]:
        """
        Latest run per import type, keyed by type.

        Types that never ran get a zeroed placeholder.
        """
        latest: Dict[str, Dict[str, Any]] = {}
        for import_type in IMPORT_TYPES:
            rows = await self._select(
                TABLE,
                filters={"store_id": store_id, "import_type": import_type},
                order_by="import_date",
                desc=True,
                limit=1,
            )
            if rows:
                latest[import_type] = ImportStatisticRecord(**rows[0]).model_dump()
            else:
                latest[import_type] = ImportStatisticRecord(
                    store_id=store_id, import_type=import_type
                ).model_dump()
        return latest
