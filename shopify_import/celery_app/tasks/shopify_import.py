"""
Shopify import tasks: run a catalog import in a worker.

Tasks:
- run_import: collections, products or both for one store; progress is
  exposed as PROGRESS task state so callers can poll AsyncResult.info
"""
import logging
from typing import Any, Dict, Optional

import httpx

from shopify_import.celery_app.celery_config import celery_app
from shopify_import.celery_app.tasks.base import BaseTask, build_import_service, run_async
from shopify_import.core.exceptions import NonRetryableError, RetryableError, ValidationError
from shopify_import.utils.progress import ProgressChannel

logger = logging.getLogger(__name__)

IMPORT_KINDS = ("collections", "products", "full")


async def _run(service, import_type: str, dry_run: bool, limit: Optional[int], progress) -> Dict[str, Any]:
    if import_type == "collections":
        return await service.import_collections(dry_run=dry_run, progress=progress)
    if import_type == "products":
        return await service.import_products(dry_run=dry_run, limit=limit, progress=progress)
    return await service.full_import(dry_run=dry_run, limit=limit, progress=progress)


@celery_app.task(
    bind=True,
    base=BaseTask,
    name="tasks.shopify_import.run_import",
    autoretry_for=(ConnectionError, TimeoutError, httpx.ConnectError, httpx.ReadTimeout),
    dont_autoretry_for=(NonRetryableError,),
    retry_backoff=True,
    max_retries=3,
)
def run_import(
    self,
    store_id: str,
    import_type: str = "full",
    dry_run: bool = False,
    limit: Optional[int] = None,
):
    """
    Import a store's Shopify catalog.

    Args:
        store_id: Local store UUID
        import_type: "collections", "products" or "full"
        dry_run: Fetch and preview without writing
        limit: Maximum number of products to import
    """
    if import_type not in IMPORT_KINDS:
        raise ValidationError(f"Unknown import type: {import_type}")

    logger.info(f"Starting Shopify {import_type} import for store {store_id} (dry_run={dry_run})")

    service = build_import_service(store_id)
    channel = ProgressChannel()
    channel.subscribe(
        lambda event: self.update_state(state="PROGRESS", meta=event.model_dump(exclude_none=True))
    )

    try:
        result = run_async(_run(service, import_type, dry_run, limit, channel))
    finally:
        channel.close()

    if not result.get("success") and result.get("retryable"):
        logger.warning(f"Shopify import for store {store_id} hit a transient error: {result.get('message')}")
        raise self.retry(exc=RetryableError(result.get("message") or "Shopify import failed"))

    logger.info(f"Finished Shopify {import_type} import for store {store_id}: success={result.get('success')}")
    return result
