"""
Pytest configuration and shared fixtures for the Shopify import tests.

Provides settings, an in-memory Supabase table double, stores wired to it,
a mocked Shopify API, and sample Shopify payloads.
"""
from unittest.mock import AsyncMock, MagicMock

import pytest
from postgrest.exceptions import APIError

from shopify_import.core.config import Settings


STORE_ID = "11111111-1111-1111-1111-111111111111"


# ---------------------------------------------------------------------------
# In-memory Supabase table API
# ---------------------------------------------------------------------------

class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """One table call: filters, ordering and limit applied on execute()."""

    def __init__(self, db, table, operation, payload=None, on_conflict=None):
        self._db = db
        self._table = table
        self._operation = operation
        self._payload = payload
        self._on_conflict = on_conflict
        self._filters = []
        self._order = None
        self._limit = None

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _matches(self, row):
        return all(row.get(column) == value for column, value in self._filters)

    def execute(self):
        self._db.check_failure(self._table, self._operation, self._payload)
        rows = self._db.tables.setdefault(self._table, [])

        if self._operation == "insert":
            new_rows = self._payload if isinstance(self._payload, list) else [self._payload]
            stored = [dict(row) for row in new_rows]
            rows.extend(stored)
            return FakeResponse([dict(row) for row in stored])

        if self._operation == "upsert":
            keys = self._on_conflict.split(",") if self._on_conflict else ["id"]
            for existing in rows:
                if all(existing.get(key) == self._payload.get(key) for key in keys):
                    existing.update(self._payload)
                    return FakeResponse([dict(existing)])
            rows.append(dict(self._payload))
            return FakeResponse([dict(self._payload)])

        matched = [row for row in rows if self._matches(row)]

        if self._operation == "update":
            for row in matched:
                row.update(self._payload)
            return FakeResponse([dict(row) for row in matched])

        if self._order:
            column, desc = self._order
            matched = sorted(matched, key=lambda row: str(row.get(column) or ""), reverse=desc)
        if self._limit is not None:
            matched = matched[: self._limit]
        return FakeResponse([dict(row) for row in matched])


class FakeTable:
    def __init__(self, db, name):
        self._db = db
        self._name = name

    def select(self, columns="*"):
        return FakeQuery(self._db, self._name, "select")

    def insert(self, row):
        return FakeQuery(self._db, self._name, "insert", payload=row)

    def upsert(self, row, on_conflict=None):
        return FakeQuery(self._db, self._name, "upsert", payload=row, on_conflict=on_conflict)

    def update(self, payload):
        return FakeQuery(self._db, self._name, "update", payload=payload)


class FakeDatabase:
    """Stands in for supabase.Client: table() plus a mocked storage API."""

    def __init__(self):
        self.tables = {}
        self.storage = MagicMock()
        self._failures = []

    def table(self, name):
        return FakeTable(self, name)

    def rows(self, name):
        return self.tables.get(name, [])

    def seed(self, name, *rows):
        self.tables.setdefault(name, []).extend(dict(row) for row in rows)

    def fail_on(self, table, operation, when=None):
        """Make matching calls raise postgrest APIError."""
        self._failures.append((table, operation, when))

    def check_failure(self, table, operation, payload):
        for failing_table, failing_operation, when in self._failures:
            if failing_table != table or failing_operation != operation:
                continue
            if when is None or when(payload):
                raise APIError({"message": f"{operation} rejected on {table}", "code": "23505"})


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def store_id():
    return STORE_ID


@pytest.fixture
def mock_settings(tmp_path):
    """Settings object with test defaults (no real credentials)."""
    return Settings(
        supabase_url="https://test.supabase.co",
        supabase_service_role_key="test-service-role-key",
        supabase_storage_bucket="suprshop-assets",
        shopify_api_version="2023-10",
        shopify_rate_limit_delay=0.5,
        shopify_retry_delay=2.0,
        shopify_page_limit=250,
        storage_provider="supabase",
        store_storage_providers={},
        s3_bucket="test-bucket",
        s3_region="eu-west-1",
        local_storage_root=str(tmp_path / "uploads"),
        local_storage_base_url="http://localhost:5000/uploads",
        default_language_code="en",
    )


# ---------------------------------------------------------------------------
# Supabase (in-memory)
# ---------------------------------------------------------------------------

@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def mock_supabase_client(fake_db):
    """SupabaseClient wrapper whose .client is the in-memory database."""
    supabase_client = MagicMock()
    supabase_client.client = fake_db
    supabase_client.url = "https://test.supabase.co"
    supabase_client.storage_bucket = "suprshop-assets"
    return supabase_client


@pytest.fixture
def connected_store(fake_db, store_id):
    """A store with a finished Shopify OAuth handshake."""
    fake_db.seed(
        "shopify_oauth_tokens",
        {
            "store_id": store_id,
            "shop_domain": "test-store.myshopify.com",
            "access_token": "shpat_test_token",
        },
    )
    return store_id


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------

@pytest.fixture
def stores(mock_supabase_client):
    """Every store the import service uses, over the same database."""
    from shopify_import.db.attribute_store import AttributeStore
    from shopify_import.db.category_store import CategoryStore
    from shopify_import.db.import_statistic_store import ImportStatisticStore
    from shopify_import.db.oauth_token_store import ShopifyOAuthTokenStore
    from shopify_import.db.product_store import ProductStore
    from shopify_import.db.translation_store import TranslationStore

    return {
        "token_store": ShopifyOAuthTokenStore(mock_supabase_client),
        "category_store": CategoryStore(mock_supabase_client),
        "product_store": ProductStore(mock_supabase_client),
        "translation_store": TranslationStore(mock_supabase_client),
        "attribute_store": AttributeStore(mock_supabase_client),
        "statistic_store": ImportStatisticStore(mock_supabase_client),
    }


# ---------------------------------------------------------------------------
# Shopify API + images (mocked)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_shopify_api():
    """Mocked ShopifyClient returned by the service's client factory."""
    client = MagicMock()
    client.get_all_collections = AsyncMock(return_value={"custom": [], "smart": [], "all": []})
    client.get_all_products = AsyncMock(return_value=[])
    client.test_connection = AsyncMock(return_value={"success": True, "shop": {"name": "Test Store"}})
    return client


@pytest.fixture
def mock_image_rehoster():
    """Rehoster that 'uploads' every image to a predictable URL."""
    rehoster = MagicMock()
    rehoster.rehost = AsyncMock(
        side_effect=lambda url, handle, index, store_id: {
            "url": f"https://test.supabase.co/storage/v1/object/public/suprshop-assets/{store_id}/products/{handle}-{index}.jpg",
            "path": f"{store_id}/products/{handle}-{index}.jpg",
        }
    )
    rehoster.remove = AsyncMock(return_value=None)
    return rehoster


@pytest.fixture
def import_service(stores, mock_shopify_api, mock_image_rehoster, mock_settings, store_id):
    """ShopifyImportService over the in-memory database and mocked Shopify API."""
    from shopify_import.services.shopify_import_service import ShopifyImportService

    return ShopifyImportService(
        store_id,
        image_rehoster=mock_image_rehoster,
        client_factory=lambda domain, token: mock_shopify_api,
        settings=mock_settings,
        **stores,
    )


# ---------------------------------------------------------------------------
# Sample Shopify payloads
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_collections():
    """One custom and one smart collection as get_all_collections returns them."""
    custom = {
        "id": 841564295,
        "handle": "ipods",
        "title": "IPods",
        "body_html": "<p>The best selling ipod ever</p>",
        "published_at": "2008-02-01T19:00:00-05:00",
        "sort_order": "manual",
        "template_suffix": None,
        "collection_type": "custom",
    }
    smart = {
        "id": 1063001322,
        "handle": "smart-ipods",
        "title": "Smart iPods",
        "body_html": "",
        "published_at": None,
        "sort_order": "best-selling",
        "template_suffix": "alt",
        "collection_type": "smart",
    }
    return {"custom": [custom], "smart": [smart], "all": [custom, smart]}


@pytest.fixture
def sample_product():
    """A Shopify product with two variants, two images and a metafield."""
    return {
        "id": 632910392,
        "title": "IPod Nano - 8GB",
        "handle": "ipod-nano",
        "body_html": "<p>It's the small iPod with <strong>one very big idea</strong>.</p>",
        "vendor": "Apple",
        "product_type": "Cult Products",
        "tags": "Emotive, Flash Memory",
        "status": "active",
        "template_suffix": None,
        "collections": [841564295],
        "metafields": [{"namespace": "specs", "key": "capacity", "value": "8GB"}],
        "variants": [
            {
                "id": 808950810,
                "price": "19.99",
                "compare_at_price": "29.99",
                "inventory_management": "shopify",
                "inventory_policy": "deny",
                "inventory_quantity": 2,
                "weight": 0.2,
                "weight_unit": "kg",
                "option1": "Pink",
                "barcode": "1234_pink",
                "grams": 200,
            },
            {
                "id": 49148385,
                "price": "21.99",
                "inventory_management": "shopify",
                "inventory_quantity": 3,
                "option1": "Red",
            },
        ],
        "images": [
            {"id": 850703190, "src": "https://cdn.shopify.com/s/files/ipod-nano.png", "position": 1, "alt": None},
            {"id": 562641783, "src": "https://cdn.shopify.com/s/files/ipod-nano-2.png", "position": 2, "alt": "Back"},
        ],
        "image": {"id": 562641783},
    }
