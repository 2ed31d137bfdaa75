"""
Base task class: common retry logic, async helpers, and lazy DI.

Provides:
- Standardized lifecycle logging
- Retry defaults
- A fresh event loop per async call
- Worker-local construction of the import service's collaborators
"""
import asyncio
import logging
from celery import Task

logger = logging.getLogger(__name__)


class BaseTask(Task):
    """Base task with common functionality for all workers."""

    abstract = True

    # Each task declares its own autoretry_for; a catch-all here would
    # retry per-record failures that the importer already records.
    retry_backoff = True
    retry_backoff_max = 600
    retry_jitter = True
    max_retries = 3

    track_started = True

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        logger.error(f"Task {self.name}[{task_id}] failed: {exc}")

    def on_retry(self, exc, task_id, args, kwargs, einfo):
        logger.warning(f"Task {self.name}[{task_id}] retrying (attempt {self.request.retries}): {exc}")

    def on_success(self, retval, task_id, args, kwargs):
        logger.info(f"Task {self.name}[{task_id}] succeeded")


def run_async(coro):
    """
    Run async function in sync context.

    Each call creates a new event loop to avoid conflicts.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


_dependencies = None


def get_dependencies():
    """
    Lazy load shared collaborators.

    Called after fork so each worker gets its own Supabase client and
    storage manager.
    """
    global _dependencies
    if _dependencies is None:
        # Lazy imports: circular dependency avoidance
        from shopify_import.core.config import settings
        from shopify_import.clients.supabase_client import SupabaseClient
        from shopify_import.db.attribute_store import AttributeStore
        from shopify_import.db.category_store import CategoryStore
        from shopify_import.db.import_statistic_store import ImportStatisticStore
        from shopify_import.db.oauth_token_store import ShopifyOAuthTokenStore
        from shopify_import.db.product_store import ProductStore
        from shopify_import.db.translation_store import TranslationStore
        from shopify_import.services.image_rehost_service import ImageRehoster
        from shopify_import.storage.manager import StorageManager

        supabase_client = SupabaseClient(settings)
        _dependencies = {
            "settings": settings,
            "token_store": ShopifyOAuthTokenStore(supabase_client),
            "category_store": CategoryStore(supabase_client),
            "product_store": ProductStore(supabase_client),
            "translation_store": TranslationStore(supabase_client),
            "attribute_store": AttributeStore(supabase_client),
            "statistic_store": ImportStatisticStore(supabase_client),
            "image_rehoster": ImageRehoster(StorageManager(settings, supabase_client), settings),
        }
    return _dependencies


def build_import_service(store_id: str):
    """A fresh ShopifyImportService (per-run stats) over worker-local collaborators."""
    from shopify_import.services.shopify_import_service import ShopifyImportService

    return ShopifyImportService(store_id, **get_dependencies())
