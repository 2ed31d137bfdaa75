"""
Import constants: source tags, statistic types, attribute set, image types.
"""

# Stamped on every row created by the Shopify importer
EXTERNAL_SOURCE: str = "shopify"
IMPORT_METHOD: str = "shopify"

# Values allowed in akeneo_import_statistics.import_type
IMPORT_TYPES: list[str] = ["categories", "attributes", "families", "products"]

# Statistic type each import track is recorded under
COLLECTIONS_IMPORT_TYPE: str = "categories"
PRODUCTS_IMPORT_TYPE: str = "products"

# Dry-run preview size
PREVIEW_SIZE: int = 5

# Text limits for derived SEO / summary fields
META_DESCRIPTION_LENGTH: int = 160
SHORT_DESCRIPTION_LENGTH: int = 255

# Attribute definitions created on demand before a product import
REQUIRED_PRODUCT_ATTRIBUTES: list[dict[str, str]] = [
    {"code": "vendor", "name": "Vendor", "type": "text"},
    {"code": "product_type", "name": "Product Type", "type": "text"},
    {"code": "tags", "name": "Tags", "type": "text"},
    {"code": "barcode", "name": "Barcode", "type": "text"},
    {"code": "option1", "name": "Option 1", "type": "text"},
    {"code": "option2", "name": "Option 2", "type": "text"},
    {"code": "option3", "name": "Option 3", "type": "text"},
]
FILTERABLE_ATTRIBUTE_CODES: set[str] = {"vendor", "product_type"}

# Language row ensured before translations are written
DEFAULT_LANGUAGE: dict[str, str] = {
    "code": "en",
    "name": "English",
    "native_name": "English",
}

# Image extension -> MIME type
IMAGE_MIME_TYPES: dict[str, str] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
}
DEFAULT_IMAGE_EXTENSION: str = "jpg"
DEFAULT_IMAGE_MIME_TYPE: str = "image/jpeg"
