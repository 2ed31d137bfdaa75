"""
S3 storage provider.
"""
import logging
from typing import Any, Dict

from botocore.exceptions import ClientError

from shopify_import.core.exceptions import StorageError
from shopify_import.schemas.shopify_import import StorageFile
from shopify_import.storage.base import StorageProvider

logger = logging.getLogger("s3_storage")


class S3StorageProvider(StorageProvider):
    name = "s3"

    def __init__(
        self,
        s3_client,
        bucket: str,
        region: str,
        store_id: str,
        public_base_url: str | None = None,
    ) -> None:
        if not bucket:
            raise StorageError("S3_BUCKET must be set to use the s3 storage provider")
        self._s3 = s3_client
        self._bucket = bucket
        self._region = region
        self._store_id = store_id
        self._public_base_url = public_base_url

    def _key(self, path: str) -> str:
        return f"{self._store_id}/{path.lstrip('/')}"

    def public_url(self, key: str) -> str:
        if self._public_base_url:
            return f"{self._public_base_url.rstrip('/')}/{key}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"

    async def upload(
        self, file: StorageFile, path: str, options: Dict[str, Any] | None = None
    ) -> Dict[str, str]:
        options = options or {}
        key = self._key(path)
        extra = {"ContentType": options.get("content_type") or file.mimetype}
        if options.get("public"):
            extra["ACL"] = "public-read"
        try:
            self._s3.put_object(Bucket=self._bucket, Key=key, Body=file.buffer, **extra)
        except ClientError as e:
            error_msg = e.response.get("Error", {}).get("Message", str(e))
            logger.info("s3 upload error key=%s detail=%s", key, error_msg)
            raise StorageError(f"S3 upload failed for {key}: {error_msg}") from e
        logger.info("s3 upload bucket=%s key=%s size=%s", self._bucket, key, file.size)
        return {"url": self.public_url(key), "path": key}

    async def delete(self, path: str) -> None:
        try:
            self._s3.delete_object(Bucket=self._bucket, Key=path)
        except ClientError as e:
            raise StorageError(f"S3 delete failed for {path}: {e}") from e
