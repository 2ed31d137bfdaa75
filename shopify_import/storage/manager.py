"""
Storage manager: resolves the storage provider configured for a store.
"""
import logging

import boto3

from shopify_import.clients.supabase_client import SupabaseClient
from shopify_import.core.config import Settings
from shopify_import.core.exceptions import StorageError
from shopify_import.storage.base import StorageProvider
from shopify_import.storage.local_provider import LocalStorageProvider
from shopify_import.storage.s3_provider import S3StorageProvider
from shopify_import.storage.supabase_provider import SupabaseStorageProvider

logger = logging.getLogger("storage_manager")


class StorageManager:
    """Per-store provider lookup: STORE_STORAGE_PROVIDERS, then STORAGE_PROVIDER."""

    def __init__(self, settings: Settings, supabase_client: SupabaseClient | None = None) -> None:
        self._settings = settings
        self._supabase_client = supabase_client
        self._s3_client = None

    def provider_name(self, store_id: str) -> str:
        overrides = self._settings.store_storage_providers or {}
        return (overrides.get(str(store_id)) or self._settings.storage_provider).lower()

    def get_provider(self, store_id: str) -> StorageProvider:
        name = self.provider_name(store_id)
        if name == "supabase":
            if self._supabase_client is None:
                self._supabase_client = SupabaseClient(self._settings)
            return SupabaseStorageProvider(self._supabase_client, store_id)
        if name == "s3":
            if self._s3_client is None:
                self._s3_client = boto3.client("s3", region_name=self._settings.s3_region)
            return S3StorageProvider(
                self._s3_client,
                bucket=self._settings.s3_bucket,
                region=self._settings.s3_region,
                store_id=store_id,
                public_base_url=self._settings.s3_public_base_url,
            )
        if name == "local":
            return LocalStorageProvider(
                self._settings.local_storage_root,
                self._settings.local_storage_base_url,
                store_id,
            )
        logger.info("unknown storage provider store_id=%s provider=%s", store_id, name)
        raise StorageError(f"Unknown storage provider: {name}")
