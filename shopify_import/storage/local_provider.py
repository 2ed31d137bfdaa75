"""
Local filesystem storage provider (development and single-host installs).
"""
import logging
from pathlib import Path
from typing import Any, Dict

from shopify_import.core.exceptions import StorageError
from shopify_import.schemas.shopify_import import StorageFile
from shopify_import.storage.base import StorageProvider

logger = logging.getLogger("local_storage")


class LocalStorageProvider(StorageProvider):
    name = "local"

    def __init__(self, root: str, base_url: str, store_id: str) -> None:
        self._root = Path(root)
        self._base_url = base_url.rstrip("/")
        self._store_id = store_id

    def _relative(self, path: str) -> str:
        relative = f"{self._store_id}/{path.lstrip('/')}"
        if ".." in Path(relative).parts:
            raise StorageError(f"Refusing path outside storage root: {path}")
        return relative

    async def upload(
        self, file: StorageFile, path: str, options: Dict[str, Any] | None = None
    ) -> Dict[str, str]:
        options = options or {}
        relative = self._relative(path)
        target = self._root / relative
        if target.exists() and not options.get("upsert", True):
            raise StorageError(f"File already exists: {relative}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(file.buffer)
        except OSError as exc:
            raise StorageError(f"Local write failed for {relative}: {exc}") from exc
        logger.info("local storage upload path=%s size=%s", target, file.size)
        return {"url": f"{self._base_url}/{relative}", "path": relative}

    async def delete(self, path: str) -> None:
        target = self._root / path
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Local delete failed for {path}: {exc}") from exc
