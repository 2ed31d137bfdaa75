"""
Lazy DI container: singleton access to clients, stores, and services.

For in-process callers (web handlers, scripts). Celery workers build
their own worker-local set in celery_app.tasks.base.
"""

from functools import lru_cache

from shopify_import.core.config import settings
from shopify_import.clients.supabase_client import SupabaseClient
from shopify_import.db.attribute_store import AttributeStore
from shopify_import.db.category_store import CategoryStore
from shopify_import.db.import_statistic_store import ImportStatisticStore
from shopify_import.db.oauth_token_store import ShopifyOAuthTokenStore
from shopify_import.db.product_store import ProductStore
from shopify_import.db.translation_store import TranslationStore
from shopify_import.services.image_rehost_service import ImageRehoster
from shopify_import.services.shopify_import_service import ShopifyImportService
from shopify_import.storage.manager import StorageManager


# -- Clients ---------------------------------------------------------------

@lru_cache(maxsize=1)
def get_supabase_client():
    return SupabaseClient(settings)


# -- DB Stores -------------------------------------------------------------

@lru_cache(maxsize=1)
def get_token_store():
    return ShopifyOAuthTokenStore(get_supabase_client())


@lru_cache(maxsize=1)
def get_category_store():
    return CategoryStore(get_supabase_client())


@lru_cache(maxsize=1)
def get_product_store():
    return ProductStore(get_supabase_client())


@lru_cache(maxsize=1)
def get_translation_store():
    return TranslationStore(get_supabase_client())


@lru_cache(maxsize=1)
def get_attribute_store():
    return AttributeStore(get_supabase_client())


@lru_cache(maxsize=1)
def get_import_statistic_store():
    return ImportStatisticStore(get_supabase_client())


# -- Storage ---------------------------------------------------------------

@lru_cache(maxsize=1)
def get_storage_manager():
    return StorageManager(settings, get_supabase_client())


@lru_cache(maxsize=1)
def get_image_rehoster():
    return ImageRehoster(get_storage_manager(), settings)


# -- Services --------------------------------------------------------------

def get_shopify_import_service(store_id: str) -> ShopifyImportService:
    """New service per call: import statistics are per run."""
    return ShopifyImportService(
        store_id,
        token_store=get_token_store(),
        category_store=get_category_store(),
        product_store=get_product_store(),
        translation_store=get_translation_store(),
        attribute_store=get_attribute_store(),
        statistic_store=get_import_statistic_store(),
        image_rehoster=get_image_rehoster(),
        settings=settings,
    )
