import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from shopify_import.core.config import Settings
from shopify_import.core.exceptions import RateLimitError, ShopifyAPIError
from shopify_import.schemas.shopify_import import ImportProgress

logger = logging.getLogger("shopify_client")

CALL_LIMIT_HEADER = "X-Shopify-Shop-Api-Call-Limit"


class ShopifyClient:
    """Admin REST API access for a single shop."""

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        settings: Settings,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._store_domain = self._normalize_store_domain(shop_domain)
        self._token = access_token
        self._api_version = settings.shopify_api_version
        self._timeout = settings.shopify_request_timeout
        self._rate_limit_delay = settings.shopify_rate_limit_delay
        self._retry_delay = settings.shopify_retry_delay
        self._page_limit = settings.shopify_page_limit
        self._sleep = sleep
        logger.info(
            "ShopifyClient initialized: domain=%s (raw: %s) api_version=%s",
            self._store_domain, shop_domain, self._api_version,
        )

    @staticmethod
    def _normalize_store_domain(domain: Optional[str]) -> Optional[str]:
        """
        Normalize Shopify store domain to ensure it has .myshopify.com suffix.

        Handles these formats:
        - "my-store" -> "my-store.myshopify.com"
        - "my-store.myshopify.com" -> "my-store.myshopify.com" (unchanged)
        - "https://my-store.myshopify.com" -> "my-store.myshopify.com" (strips protocol)
        """
        if not domain:
            return domain

        domain = domain.replace("https://", "").replace("http://", "")
        domain = domain.rstrip("/")

        if not domain.endswith(".myshopify.com"):
            domain = f"{domain}.myshopify.com"

        return domain

    @property
    def shop_domain(self) -> Optional[str]:
        return self._store_domain

    @property
    def page_limit(self) -> int:
        return self._page_limit

    def _base_url(self) -> str:
        if not self._store_domain or not self._token:
            raise ShopifyAPIError("", body="Shopify shop domain or access token missing")
        return f"https://{self._store_domain}/admin/api/{self._api_version}"

    def _headers(self) -> Dict[str, str]:
        return {
            "X-Shopify-Access-Token": self._token or "",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    async def make_request(
        self,
        endpoint: str,
        method: str = "GET",
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Call the Admin API and return the parsed body.

        Paces itself from the call-limit header and retries a 429 once
        after ``retry_delay`` seconds. Every other failure is raised as
        ShopifyAPIError with the endpoint, status and body attached.
        """
        return await self._request(endpoint, method, data, params, retry_on_429=True)

    async def _request(
        self,
        endpoint: str,
        method: str,
        data: Optional[Dict[str, Any]],
        params: Optional[Dict[str, Any]],
        retry_on_429: bool,
    ) -> Dict[str, Any]:
        url = f"{self._base_url()}{endpoint}"
        logger.info("shopify request method=%s path=%s params=%s", method, endpoint, params)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.request(
                    method=method, url=url, headers=self._headers(), json=data, params=params
                )
        except httpx.RequestError as exc:
            logger.error("shopify transport error path=%s detail=%r", endpoint, exc)
            raise ShopifyAPIError(endpoint, body=repr(exc)) from exc

        logger.info("shopify response status=%s path=%s", resp.status_code, endpoint)

        if resp.status_code == 429:
            if retry_on_429:
                logger.warning(
                    "shopify rate limited path=%s, retrying in %ss", endpoint, self._retry_delay
                )
                await self._sleep(self._retry_delay)
                return await self._request(endpoint, method, data, params, retry_on_429=False)
            raise RateLimitError(endpoint, body=resp.text, retry_after=self._retry_delay)

        if resp.status_code >= 400:
            raise ShopifyAPIError(endpoint, status_code=resp.status_code, body=resp.text)

        await self._respect_call_limit(resp.headers)

        if not resp.text:
            return {}
        try:
            return resp.json()
        except ValueError as exc:
            logger.error("shopify response not json status=%s path=%s", resp.status_code, endpoint)
            raise ShopifyAPIError(endpoint, status_code=resp.status_code, body=resp.text) from exc

    async def _respect_call_limit(self, headers: Any) -> None:
        """Back off when the leaky bucket is filling up ("used/limit")."""
        raw = headers.get(CALL_LIMIT_HEADER) if headers else None
        if not raw:
            return
        try:
            used, limit = (int(part) for part in str(raw).split("/", 1))
        except ValueError:
            logger.info("shopify call limit header unparseable value=%s", raw)
            return
        if limit <= 0:
            return

        ratio = used / limit
        if ratio > 0.8:
            delay = self._rate_limit_delay * 2
        elif ratio > 0.6:
            delay = self._rate_limit_delay
        else:
            return
        logger.info("shopify call limit %s, pausing %ss", raw, delay)
        await self._sleep(delay)

    # ------------------------------------------------------------------
    # Single resources
    # ------------------------------------------------------------------

    async def get_shop_info(self) -> Dict[str, Any]:
        data = await self.make_request("/shop.json")
        return data.get("shop") or {}

    async def test_connection(self) -> Dict[str, Any]:
        try:
            shop = await self.get_shop_info()
        except ShopifyAPIError as exc:
            logger.info("shopify connection test failed domain=%s detail=%s", self._store_domain, exc)
            return {"success": False, "message": str(exc)}
        return {
            "success": True,
            "shop": {
                "name": shop.get("name"),
                "domain": shop.get("domain"),
                "email": shop.get("email"),
                "currency": shop.get("currency"),
                "plan_name": shop.get("plan_name"),
            },
        }

    async def get_products(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        data = await self.make_request("/products.json", params=params)
        return data.get("products") or []

    async def get_product(self, product_id: int | str) -> Dict[str, Any]:
        data = await self.make_request(f"/products/{product_id}.json")
        return data.get("product") or {}

    async def get_product_variants(self, product_id: int | str) -> List[Dict[str, Any]]:
        data = await self.make_request(f"/products/{product_id}/variants.json")
        return data.get("variants") or []

    async def get_custom_collections(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        data = await self.make_request("/custom_collections.json", params=params)
        return data.get("custom_collections") or []

    async def get_smart_collections(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        data = await self.make_request("/smart_collections.json", params=params)
        return data.get("smart_collections") or []

    async def get_customers(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        data = await self.make_request("/customers.json", params=params)
        return data.get("customers") or []

    async def get_orders(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        query = {"status": "any"}
        query.update(params or {})
        data = await self.make_request("/orders.json", params=query)
        return data.get("orders") or []

    async def get_inventory_levels(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        data = await self.make_request("/inventory_levels.json", params=params)
        return data.get("inventory_levels") or []

    async def get_metafields(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        data = await self.make_request("/metafields.json", params=params)
        return data.get("metafields") or []

    # ------------------------------------------------------------------
    # Paginated listings
    # ------------------------------------------------------------------

    async def _paginate(
        self,
        endpoint: str,
        key: str,
        stage: str,
        progress=None,
    ) -> List[Dict[str, Any]]:
        """
        Walk a listing endpoint with ``since_id`` until a short page.

        Errors propagate; pages fetched before the failure are discarded.
        """
        items: List[Dict[str, Any]] = []
        since_id = None
        page = 0

        while True:
            params: Dict[str, Any] = {"limit": self._page_limit}
            if since_id is not None:
                params["since_id"] = since_id

            data = await self.make_request(endpoint, params=params)
            batch = data.get(key) or []
            page += 1
            items.extend(batch)
            logger.info(
                "shopify page fetched path=%s page=%s batch=%s total=%s",
                endpoint, page, len(batch), len(items),
            )

            if progress is not None:
                progress.publish(
                    ImportProgress(stage=stage, page=page, fetched=len(items), last_batch=len(batch))
                )

            if len(batch) < self._page_limit:
                break

            since_id = batch[-1].get("id")
            if since_id is None:
                # without a cursor the next request would restart at page 1
                logger.warning(
                    "shopify pagination stopped path=%s page=%s reason=last item has no id", endpoint, page
                )
                break
            await self._sleep(self._rate_limit_delay)

        return items

    async def get_all_products(self, progress=None) -> List[Dict[str, Any]]:
        return await self._paginate("/products.json", "products", "fetching_products", progress)

    async def get_all_custom_collections(self, progress=None) -> List[Dict[str, Any]]:
        return await self._paginate(
            "/custom_collections.json", "custom_collections", "fetching_collections", progress
        )

    async def get_all_smart_collections(self, progress=None) -> List[Dict[str, Any]]:
        return await self._paginate(
            "/smart_collections.json", "smart_collections", "fetching_collections", progress
        )

    async def get_all_collections(self, progress=None) -> Dict[str, List[Dict[str, Any]]]:
        """Fetch custom and smart collections, tagging each with its type."""
        custom = [
            {**collection, "collection_type": "custom"}
            for collection in await self.get_all_custom_collections(progress)
        ]
        smart = [
            {**collection, "collection_type": "smart"}
            for collection in await self.get_all_smart_collections(progress)
        ]
        return {"custom": custom, "smart": smart, "all": custom + smart}
