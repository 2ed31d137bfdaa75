"""
Constants package: re-exports from domain-specific modules.

Usage:
    from shopify_import.core.constants.importing import EXTERNAL_SOURCE
    # or:
    from shopify_import.core.constants import EXTERNAL_SOURCE
"""

from shopify_import.core.constants import importing
from shopify_import.core.constants.importing import (
    EXTERNAL_SOURCE,
    IMPORT_METHOD,
    IMPORT_TYPES,
    COLLECTIONS_IMPORT_TYPE,
    PRODUCTS_IMPORT_TYPE,
    PREVIEW_SIZE,
    META_DESCRIPTION_LENGTH,
    SHORT_DESCRIPTION_LENGTH,
    REQUIRED_PRODUCT_ATTRIBUTES,
    FILTERABLE_ATTRIBUTE_CODES,
    DEFAULT_LANGUAGE,
    IMAGE_MIME_TYPES,
    DEFAULT_IMAGE_EXTENSION,
    DEFAULT_IMAGE_MIME_TYPE,
)

__all__ = [
    "importing",
    "EXTERNAL_SOURCE",
    "IMPORT_METHOD",
    "IMPORT_TYPES",
    "COLLECTIONS_IMPORT_TYPE",
    "PRODUCTS_IMPORT_TYPE",
    "PREVIEW_SIZE",
    "META_DESCRIPTION_LENGTH",
    "SHORT_DESCRIPTION_LENGTH",
    "REQUIRED_PRODUCT_ATTRIBUTES",
    "FILTERABLE_ATTRIBUTE_CODES",
    "DEFAULT_LANGUAGE",
    "IMAGE_MIME_TYPES",
    "DEFAULT_IMAGE_EXTENSION",
    "DEFAULT_IMAGE_MIME_TYPE",
]
