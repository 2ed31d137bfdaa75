"""
Image re-hosting: copy Shopify CDN images into the store's own storage.

Any failure degrades to the original CDN URL so a product import never
fails because of an image.
"""
import logging
import posixpath
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

import httpx

from shopify_import.core.config import Settings
from shopify_import.core.constants import (
    DEFAULT_IMAGE_EXTENSION,
    DEFAULT_IMAGE_MIME_TYPE,
    IMAGE_MIME_TYPES,
)
from shopify_import.core.exceptions import ExternalAPIError, ValidationError
from shopify_import.schemas.shopify_import import StorageFile
from shopify_import.storage.manager import StorageManager

logger = logging.getLogger("image_rehost")


def resolve_extension(image_url: str) -> str:
    """Extension from the URL path, else from substrings anywhere in the URL."""
    path = urlsplit(image_url).path
    ext = posixpath.splitext(path)[1].lower().lstrip(".")
    if ext in IMAGE_MIME_TYPES:
        return ext

    lowered = image_url.lower()
    if ".png" in lowered:
        return "png"
    if ".jpg" in lowered or ".jpeg" in lowered:
        return "jpg"
    if ".webp" in lowered:
        return "webp"
    if ".gif" in lowered:
        return "gif"
    return DEFAULT_IMAGE_EXTENSION


def mime_type_for(extension: str) -> str:
    return IMAGE_MIME_TYPES.get(extension.lower(), DEFAULT_IMAGE_MIME_TYPE)


def build_storage_path(handle: str, index: int, extension: str) -> str:
    """products/{c1}/{c2}/{handle}-{index}.{ext}, sharded by the handle's first two characters."""
    name = (handle or "product").lower()
    first = name[0] if len(name) > 0 else "_"
    second = name[1] if len(name) > 1 else "_"
    return f"products/{first}/{second}/{name}-{index}.{extension}"


class ImageRehoster:
    """Download-then-upload of product images, one at a time."""

    def __init__(self, storage_manager: StorageManager, settings: Settings) -> None:
        self._storage = storage_manager
        self._timeout = settings.image_download_timeout

    async def _download(self, image_url: str) -> tuple[bytes, Optional[str]]:
        async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
            resp = await client.get(image_url)
        if resp.status_code >= 300:
            raise ExternalAPIError(
                "image", f"download failed url={image_url}", status_code=resp.status_code
            )
        return resp.content, resp.headers.get("content-type")

    async def rehost(
        self, image_url: str, handle: str, index: int, store_id: str
    ) -> Dict[str, Any]:
        """
        Returns {"url", "path"}; on any failure {"url": image_url, "path": None}.
        """
        if not image_url:
            return {"url": image_url, "path": None}

        try:
            body, content_type = await self._download(image_url)
            if content_type and not content_type.lower().startswith("image/"):
                raise ValidationError(f"not an image content_type={content_type}")
            if not body:
                raise ValidationError("empty image body")

            extension = resolve_extension(image_url)
            mimetype = mime_type_for(extension)
            path = build_storage_path(handle, index, extension)

            provider = self._storage.get_provider(store_id)
            stored = await provider.upload(
                StorageFile(
                    buffer=body,
                    mimetype=mimetype,
                    size=len(body),
                    originalname=posixpath.basename(path),
                ),
                path,
                {"content_type": mimetype, "folder": "products", "public": True, "upsert": True},
            )
        except Exception as exc:
            logger.warning("image rehost failed, keeping source url=%s detail=%s", image_url, exc)
            return {"url": image_url, "path": None}

        logger.info("image rehosted source=%s url=%s", image_url, stored.get("url"))
        return {"url": stored.get("url") or image_url, "path": stored.get("path")}

    async def remove(self, store_id: str, path: str) -> None:
        await self._storage.get_provider(store_id).delete(path)
