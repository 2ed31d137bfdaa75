"""
Supabase Storage provider: store-scoped objects in one public bucket.
"""
import logging
from typing import Any, Dict

from shopify_import.clients.supabase_client import SupabaseClient
from shopify_import.core.exceptions import StorageError
from shopify_import.schemas.shopify_import import StorageFile
from shopify_import.storage.base import StorageProvider

logger = logging.getLogger("supabase_storage")


class SupabaseStorageProvider(StorageProvider):
    name = "supabase"

    def __init__(self, supabase_client: SupabaseClient, store_id: str) -> None:
        self._supabase_client = supabase_client
        self._store_id = store_id

    @property
    def _bucket(self) -> str:
        return self._supabase_client.storage_bucket

    def _object_path(self, path: str) -> str:
        return f"{self._store_id}/{path.lstrip('/')}"

    def public_url(self, object_path: str) -> str:
        base = self._supabase_client.url.rstrip("/")
        return f"{base}/storage/v1/object/public/{self._bucket}/{object_path}"

    async def upload(
        self, file: StorageFile, path: str, options: Dict[str, Any] | None = None
    ) -> Dict[str, str]:
        options = options or {}
        object_path = self._object_path(path)
        logger.info(
            "supabase storage upload bucket=%s path=%s size=%s",
            self._bucket, object_path, file.size,
        )
        try:
            self._supabase_client.client.storage.from_(self._bucket).upload(
                path=object_path,
                file=file.buffer,
                file_options={
                    "content-type": options.get("content_type") or file.mimetype,
                    "upsert": "true" if options.get("upsert", True) else "false",
                },
            )
        except Exception as exc:
            logger.info("supabase storage upload error path=%s detail=%s", object_path, str(exc))
            raise StorageError(f"Supabase upload failed for {object_path}: {exc}") from exc
        return {"url": self.public_url(object_path), "path": object_path}

    async def delete(self, path: str) -> None:
        try:
            self._supabase_client.client.storage.from_(self._bucket).remove([path])
        except Exception as exc:
            raise StorageError(f"Supabase delete failed for {path}: {exc}") from exc
