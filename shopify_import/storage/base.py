"""
Storage provider interface.
"""
from typing import Any, Dict

from shopify_import.schemas.shopify_import import StorageFile


class StorageProvider:
    """Common contract: upload returns {"url", "path"}; delete takes that path."""

    name = "base"

    async def upload(
        self, file: StorageFile, path: str, options: Dict[str, Any] | None = None
    ) -> Dict[str, str]:
        raise NotImplementedError

    async def delete(self, path: str) -> None:
        raise NotImplementedError
