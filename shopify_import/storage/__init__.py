"""
Storage package: pluggable providers for re-hosted catalog media.
"""
from shopify_import.storage.manager import StorageManager

__all__ = ["StorageManager"]
