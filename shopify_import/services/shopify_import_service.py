"""
Shopify import service: collections and products into the local catalog.

Runs two independent tracks (collections, products), each one record at a
time: fetch every page, upsert each record, then write one statistics row.
Per-record failures are counted and collected; only a missing connection or
a failed fetch aborts a track.
"""
import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional

from shopify_import.clients.shopify_client import ShopifyClient
from shopify_import.core.config import Settings, settings as default_settings
from shopify_import.core.constants import (
    COLLECTIONS_IMPORT_TYPE,
    EXTERNAL_SOURCE,
    FILTERABLE_ATTRIBUTE_CODES,
    IMPORT_METHOD,
    META_DESCRIPTION_LENGTH,
    PREVIEW_SIZE,
    PRODUCTS_IMPORT_TYPE,
    REQUIRED_PRODUCT_ATTRIBUTES,
    SHORT_DESCRIPTION_LENGTH,
)
from shopify_import.core.exceptions import RetryableError, ShopifyConnectionNotFound
from shopify_import.db.attribute_store import AttributeStore
from shopify_import.db.category_store import CategoryStore
from shopify_import.db.import_statistic_store import ImportStatisticStore
from shopify_import.db.oauth_token_store import ShopifyOAuthTokenStore
from shopify_import.db.product_store import ProductStore
from shopify_import.db.translation_store import TranslationStore
from shopify_import.db.unit_of_work import UnitOfWork
from shopify_import.schemas.shopify_import import (
    ImportCounters,
    ImportErrorEntry,
    ImportProgress,
    ImportStats,
)
from shopify_import.services.image_rehost_service import ImageRehoster
from shopify_import.services.variant_mapping import FirstVariantMapper, VariantMapper
from shopify_import.storage.manager import StorageManager
from shopify_import.utils.progress import ScaledProgress
from shopify_import.utils.type_converters import strip_html

logger = logging.getLogger("shopify_import_service")


class ShopifyImportService:
    """Imports one store's Shopify catalog."""

    def __init__(
        self,
        store_id: str,
        *,
        token_store: Optional[ShopifyOAuthTokenStore] = None,
        category_store: Optional[CategoryStore] = None,
        product_store: Optional[ProductStore] = None,
        translation_store: Optional[TranslationStore] = None,
        attribute_store: Optional[AttributeStore] = None,
        statistic_store: Optional[ImportStatisticStore] = None,
        image_rehoster: Optional[ImageRehoster] = None,
        variant_mapper: Optional[VariantMapper] = None,
        client_factory: Optional[Callable[[str, str], ShopifyClient]] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.store_id = store_id
        self._settings = settings or default_settings
        self._tokens = token_store or ShopifyOAuthTokenStore()
        self._categories = category_store or CategoryStore()
        self._products = product_store or ProductStore()
        self._translations = translation_store or TranslationStore()
        self._attributes = attribute_store or AttributeStore()
        self._statistics = statistic_store or ImportStatisticStore()
        self._images = image_rehoster or ImageRehoster(StorageManager(self._settings), self._settings)
        self._variant_mapper = variant_mapper or FirstVariantMapper()
        self._client_factory = client_factory or (
            lambda domain, token: ShopifyClient(domain, token, self._settings)
        )
        self.client: Optional[ShopifyClient] = None
        self.shop_domain: Optional[str] = None
        self.import_stats = ImportStats()

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    async def initialize(self) -> Dict[str, Any]:
        """Load the store's Shopify token and build the API client."""
        try:
            token_record = await self._tokens.find_by_store(self.store_id)
            if not token_record:
                raise ShopifyConnectionNotFound(self.store_id)

            self.client = self._client_factory(
                token_record["shop_domain"], token_record["access_token"]
            )
            self.shop_domain = token_record["shop_domain"]
            return {"success": True}
        except Exception as exc:
            logger.error("shopify import init failed store_id=%s detail=%s", self.store_id, exc)
            return {"success": False, "message": str(exc), "retryable": isinstance(exc, RetryableError)}

    async def _ensure_client(self) -> Optional[Dict[str, Any]]:
        """None when ready, else the failed initialize() result."""
        if self.client is not None:
            return None
        init_result = await self.initialize()
        return None if init_result["success"] else init_result

    async def test_connection(self) -> Dict[str, Any]:
        failure = await self._ensure_client()
        if failure:
            return failure
        return await self.client.test_connection()

    def get_import_stats(self) -> Dict[str, Any]:
        return self.import_stats.model_dump()

    # ------------------------------------------------------------------
    # Shared record loop
    # ------------------------------------------------------------------

    def _start_track(self, track: str, error_type: str) -> ImportCounters:
        """Zeroed counters for a new run; the previous run's errors of this type are dropped."""
        counters = ImportCounters()
        setattr(self.import_stats, track, counters)
        self.import_stats.errors = [e for e in self.import_stats.errors if e.type != error_type]
        return counters

    async def _import_records(
        self,
        records: List[Dict[str, Any]],
        error_type: str,
        counters: ImportCounters,
        importer: Callable,
        stage: str,
        progress=None,
    ) -> None:
        for record in records:
            title = record.get("title")
            if record.get("id") is None or not record.get("handle"):
                counters.skipped += 1
                logger.warning(
                    "shopify %s skipped store_id=%s id=%s title=%s reason=missing id or handle",
                    error_type, self.store_id, record.get("id"), title,
                )
            else:
                try:
                    await importer(record)
                    counters.imported += 1
                except Exception as exc:
                    logger.error(
                        "shopify %s import failed store_id=%s id=%s title=%s detail=%s",
                        error_type, self.store_id, record.get("id"), title, exc,
                    )
                    counters.failed += 1
                    self.import_stats.errors.append(
                        ImportErrorEntry(type=error_type, id=record.get("id"), title=title, error=str(exc))
                    )

            if progress is not None:
                progress.publish(
                    ImportProgress(
                        stage=stage,
                        current=counters.imported + counters.failed + counters.skipped,
                        total=counters.total,
                        item=title,
                    )
                )

    async def _save_statistics(
        self, import_type: str, counters: ImportCounters, error_type: str, started: float
    ) -> None:
        await self._statistics.save_import_results(
            self.store_id,
            import_type,
            {
                "total_processed": counters.total,
                "successful_imports": counters.imported,
                "failed_imports": counters.failed,
                "skipped_imports": counters.skipped,
                "error_details": _dump_errors(self.import_stats.errors_of(error_type)),
                "import_method": IMPORT_METHOD,
                "processing_time_seconds": round(time.monotonic() - started, 3),
            },
        )

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    async def import_collections(self, dry_run: bool = False, progress=None) -> Dict[str, Any]:
        """Import every custom and smart collection as a flat category."""
        started = time.monotonic()
        counters = self._start_track("collections", "collection")
        try:
            failure = await self._ensure_client()
            if failure:
                return failure

            logger.info("shopify collections import started store_id=%s", self.store_id)
            collections_data = await self.client.get_all_collections(progress)
            all_collections = collections_data["all"]
            counters.total = len(all_collections)
            logger.info("shopify collections found store_id=%s count=%s", self.store_id, counters.total)

            if dry_run:
                return {
                    "success": True,
                    "dry_run": True,
                    "stats": self.import_stats.model_dump(),
                    "preview": [
                        {
                            "id": c.get("id"),
                            "title": c.get("title"),
                            "handle": c.get("handle"),
                            "type": c.get("collection_type") or "custom",
                        }
                        for c in all_collections[:PREVIEW_SIZE]
                    ],
                }

            await self._import_records(
                all_collections, "collection", counters, self.import_collection,
                "importing_collections", progress,
            )
            await self._save_statistics(COLLECTIONS_IMPORT_TYPE, counters, "collection", started)

            return {
                "success": True,
                "stats": counters.model_dump(),
                "errors": self.import_stats.errors_of("collection"),
            }
        except Exception as exc:
            logger.error("shopify collections import failed store_id=%s detail=%s", self.store_id, exc)
            return {
                "success": False,
                "message": str(exc),
                "retryable": isinstance(exc, RetryableError),
                "stats": counters.model_dump(),
            }

    async def import_collection(self, collection: Dict[str, Any]) -> Dict[str, Any]:
        """Create or update the category for one collection."""
        external_id = str(collection["id"])
        handle = collection.get("handle")
        body_html = collection.get("body_html") or ""

        category_data = {
            "name": collection.get("title"),
            "description": body_html,
            "slug": handle,
            "is_active": bool(collection.get("published_at")),
            "external_id": external_id,
            "external_source": EXTERNAL_SOURCE,
            "store_id": self.store_id,
            "parent_id": None,
            "level": 0,
            "sort_order": _sort_order(collection.get("sort_order")),
            "meta_title": collection.get("title"),
            "meta_description": strip_html(body_html, META_DESCRIPTION_LENGTH),
            "seo_data": {
                "handle": handle,
                "template_suffix": collection.get("template_suffix"),
                "shopify_id": collection.get("id"),
                "collection_type": collection.get("collection_type") or "custom",
            },
        }

        existing = await self._categories.find_for_import(self.store_id, external_id, handle)
        if existing:
            category = await self._categories.update(existing["id"], category_data)
            logger.info("category updated store_id=%s title=%s", self.store_id, collection.get("title"))
        else:
            category = await self._categories.create(category_data)
            logger.info("category created store_id=%s title=%s", self.store_id, collection.get("title"))
        return category

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    async def import_products(
        self, dry_run: bool = False, limit: Optional[int] = None, progress=None
    ) -> Dict[str, Any]:
        """Import products; run collections first or category links resolve to nothing."""
        started = time.monotonic()
        counters = self._start_track("products", "product")
        try:
            failure = await self._ensure_client()
            if failure:
                return failure

            logger.info("shopify products import started store_id=%s", self.store_id)
            products = await self.client.get_all_products(progress)
            products_to_import = products[:limit] if limit else products
            counters.total = len(products_to_import)
            logger.info("shopify products found store_id=%s count=%s", self.store_id, counters.total)

            if dry_run:
                return {
                    "success": True,
                    "dry_run": True,
                    "stats": self.import_stats.model_dump(),
                    "preview": [
                        {
                            "id": p.get("id"),
                            "title": p.get("title"),
                            "handle": p.get("handle"),
                            "variants": len(p.get("variants") or []),
                            "status": p.get("status"),
                        }
                        for p in products_to_import[:PREVIEW_SIZE]
                    ],
                }

            await self.ensure_product_attributes()

            await self._import_records(
                products_to_import, "product", counters, self.import_product,
                "importing_products", progress,
            )
            await self._save_statistics(PRODUCTS_IMPORT_TYPE, counters, "product", started)

            return {
                "success": True,
                "stats": counters.model_dump(),
                "errors": self.import_stats.errors_of("product"),
            }
        except Exception as exc:
            logger.error("shopify products import failed store_id=%s detail=%s", self.store_id, exc)
            return {
                "success": False,
                "message": str(exc),
                "retryable": isinstance(exc, RetryableError),
                "stats": counters.model_dump(),
            }

    async def import_product(self, product: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create or update one product, its re-hosted images and its
        default-language translation.

        Images uploaded for a new product are removed again if the product
        row cannot be written. The translation is best effort: a failure
        is logged and the product row stays.
        """
        external_id = str(product["id"])
        handle = product.get("handle")
        title = product.get("title")
        body_html = product.get("body_html") or ""

        existing = await self._products.find_for_import(self.store_id, external_id, handle)
        category_ids = await self._resolve_category_ids(product.get("collections") or [])
        variants = product.get("variants") or []

        product_data = {
            "name": title,
            "description": body_html,
            "short_description": strip_html(body_html, SHORT_DESCRIPTION_LENGTH),
            "sku": handle,
            "slug": handle,
            "status": "active" if product.get("status") == "active" else "draft",
            **self._variant_mapper.map(product),
            "category_ids": category_ids,
            "external_id": external_id,
            "external_source": EXTERNAL_SOURCE,
            "store_id": self.store_id,
            "meta_title": title,
            "meta_description": strip_html(body_html, META_DESCRIPTION_LENGTH),
            "url_key": handle,
            "seo_data": {
                "handle": handle,
                "template_suffix": product.get("template_suffix"),
                "shopify_id": product.get("id"),
                "vendor": product.get("vendor"),
                "product_type": product.get("product_type"),
                "tags": product.get("tags"),
                "variants_count": len(variants),
            },
            "custom_attributes": self.extract_product_attributes(product),
        }

        async with UnitOfWork(f"product {external_id}") as uow:
            images = await self._rehost_images(product, uow, track_uploads=existing is None)
            if images:
                product_data["images"] = images
                product_data["image_url"] = _main_image_url(product, images)

            if existing:
                saved = await self._products.update(existing["id"], product_data)
                logger.info("product updated store_id=%s title=%s", self.store_id, title)
            else:
                saved = await self._products.create(product_data)
                logger.info("product created store_id=%s title=%s", self.store_id, title)

        await self._save_translation(saved, product_data)
        return saved

    async def _resolve_category_ids(self, collection_ids: List[Any]) -> List[str]:
        category_ids = []
        for collection_id in collection_ids:
            category = await self._categories.find_by_external_id(self.store_id, str(collection_id))
            if category:
                category_ids.append(category["id"])
            else:
                logger.info(
                    "collection not imported store_id=%s collection_id=%s", self.store_id, collection_id
                )
        return category_ids

    async def _rehost_images(
        self, product: Dict[str, Any], uow: UnitOfWork, track_uploads: bool
    ) -> List[Dict[str, Any]]:
        images = []
        for index, image in enumerate(product.get("images") or []):
            source_url = image.get("src")
            hosted = await self._images.rehost(source_url, product.get("handle"), index, self.store_id)
            if track_uploads and hosted.get("path"):
                uow.add_compensation(
                    _remover(self._images, self.store_id, hosted["path"]),
                    f"delete image {hosted['path']}",
                )
            images.append(
                {
                    "src": hosted["url"],
                    "alt": image.get("alt") or product.get("title"),
                    "position": image.get("position") or index + 1,
                    "shopify_id": image.get("id"),
                }
            )
        return images

    async def _save_translation(self, saved: Dict[str, Any], product_data: Dict[str, Any]) -> None:
        language_code = self._settings.default_language_code
        try:
            await self._translations.ensure_language(language_code)
            await self._translations.upsert_product_translation(
                saved["id"],
                language_code,
                {
                    "name": product_data["name"],
                    "description": product_data["description"],
                    "short_description": product_data["short_description"],
                },
            )
        except Exception as exc:
            logger.error(
                "product translation failed store_id=%s product_id=%s language=%s detail=%s",
                self.store_id, saved.get("id"), language_code, exc,
            )

    def extract_product_attributes(self, product: Dict[str, Any]) -> Dict[str, Any]:
        attributes: Dict[str, Any] = {}

        for key in ("vendor", "product_type", "tags"):
            if product.get(key):
                attributes[key] = product[key]

        for metafield in product.get("metafields") or []:
            attributes[f"{metafield.get('namespace')}_{metafield.get('key')}"] = metafield.get("value")

        variants = product.get("variants") or []
        if variants:
            main_variant = variants[0]
            for key in ("option1", "option2", "option3", "barcode", "grams"):
                if main_variant.get(key):
                    attributes[key] = main_variant[key]

        return attributes

    async def ensure_product_attributes(self) -> None:
        """Create the attribute definitions imported products rely on."""
        for attr in REQUIRED_PRODUCT_ATTRIBUTES:
            existing = await self._attributes.find_by_code(self.store_id, attr["code"])
            if existing:
                continue
            await self._attributes.create(
                {
                    **attr,
                    "store_id": self.store_id,
                    "is_required": False,
                    "is_filterable": attr["code"] in FILTERABLE_ATTRIBUTE_CODES,
                    "is_searchable": True,
                    "sort_order": 100,
                }
            )

    # ------------------------------------------------------------------
    # Full import
    # ------------------------------------------------------------------

    async def full_import(
        self, dry_run: bool = False, limit: Optional[int] = None, progress=None
    ) -> Dict[str, Any]:
        """Collections (0-50%) then products (50-100%)."""
        results: Dict[str, Any] = {
            "collections": None,
            "products": None,
            "success": True,
            "errors": [],
        }

        try:
            if progress is not None:
                progress.publish(ImportProgress(stage="starting_collections", overall_progress=0))
            results["collections"] = await self.import_collections(
                dry_run=dry_run,
                progress=ScaledProgress(progress, 0, 50) if progress is not None else None,
            )
            _merge_track(results, results["collections"])

            if progress is not None:
                progress.publish(ImportProgress(stage="starting_products", overall_progress=50))
            results["products"] = await self.import_products(
                dry_run=dry_run,
                limit=limit,
                progress=ScaledProgress(progress, 50, 50) if progress is not None else None,
            )
            _merge_track(results, results["products"])

            return results
        except Exception as exc:
            logger.error("shopify full import failed store_id=%s detail=%s", self.store_id, exc)
            return {
                **results,
                "success": False,
                "message": str(exc),
                "retryable": isinstance(exc, RetryableError),
            }


def _merge_track(results: Dict[str, Any], track: Dict[str, Any]) -> None:
    results["errors"].extend(track.get("errors") or [])
    if not track.get("success"):
        results["success"] = False
        results.setdefault("message", track.get("message"))
        results["retryable"] = results.get("retryable", False) or bool(track.get("retryable"))


def _main_image_url(product: Dict[str, Any], images: List[Dict[str, Any]]) -> str:
    main_id = (product.get("image") or {}).get("id")
    for image in images:
        if main_id is not None and image["shopify_id"] == main_id:
            return image["src"]
    return images[0]["src"]


def _remover(rehoster: ImageRehoster, store_id: str, path: str):
    async def _remove() -> None:
        await rehoster.remove(store_id, path)
    return _remove


def _sort_order(value: Any) -> int:
    # Shopify reports sort_order as a strategy name ("best-selling"), not a number
    return value if isinstance(value, int) else 0


def _dump_errors(errors: List[Dict[str, Any]]) -> Optional[str]:
    if not errors:
        return None
    return json.dumps(errors, default=str)
