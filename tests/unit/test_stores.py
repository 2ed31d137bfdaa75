"""
Unit tests for the table stores: OAuth tokens, categories, products,
translations and attributes, over the in-memory Supabase double.
"""
import pytest

from shopify_import.db.attribute_store import AttributeStore
from shopify_import.db.category_store import CategoryStore
from shopify_import.db.oauth_token_store import ShopifyOAuthTokenStore
from shopify_import.db.product_store import ProductStore
from shopify_import.db.translation_store import TranslationStore


pytestmark = pytest.mark.unit


# --------------------------------------------------------------------------
# ShopifyOAuthTokenStore
# --------------------------------------------------------------------------

class TestOAuthTokenStore:

    @pytest.mark.asyncio
    async def test_complete_record_returned(self, mock_supabase_client, connected_store):
        record = await ShopifyOAuthTokenStore(mock_supabase_client).find_by_store(connected_store)

        assert record["shop_domain"] == "test-store.myshopify.com"
        assert record["access_token"] == "shpat_test_token"

    @pytest.mark.asyncio
    async def test_missing_record(self, mock_supabase_client, store_id):
        assert await ShopifyOAuthTokenStore(mock_supabase_client).find_by_store(store_id) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "row",
        [
            {"shop_domain": "test-store.myshopify.com", "access_token": "pending"},
            {"shop_domain": "pending", "access_token": "shpat_x"},
            {"shop_domain": "test-store.myshopify.com", "access_token": None},
        ],
    )
    async def test_unfinished_handshake(self, mock_supabase_client, fake_db, store_id, row):
        fake_db.seed("shopify_oauth_tokens", {"store_id": store_id, **row})

        assert await ShopifyOAuthTokenStore(mock_supabase_client).find_by_store(store_id) is None


# --------------------------------------------------------------------------
# CategoryStore / ProductStore
# --------------------------------------------------------------------------

class TestCategoryStore:

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_update_by_id(self, mock_supabase_client, fake_db, store_id):
        store = CategoryStore(mock_supabase_client)

        created = await store.create({"store_id": store_id, "slug": "a", "external_id": "1"})
        updated = await store.update(created["id"], {"name": "A"})

        assert created["id"]
        assert updated["name"] == "A"
        assert len(fake_db.rows("categories")) == 1

    @pytest.mark.asyncio
    async def test_find_by_external_id(self, mock_supabase_client, fake_db, store_id):
        fake_db.seed("categories", {"id": "c", "store_id": store_id, "external_id": "77"})

        store = CategoryStore(mock_supabase_client)

        assert (await store.find_by_external_id(store_id, "77"))["id"] == "c"
        assert await store.find_by_external_id(store_id, "78") is None


class TestProductStore:

    @pytest.mark.asyncio
    async def test_find_for_import_uses_sku(self, mock_supabase_client, fake_db, store_id):
        fake_db.seed("products", {"id": "p", "store_id": store_id, "sku": "ipod-nano"})

        row = await ProductStore(mock_supabase_client).find_for_import(store_id, "1", "ipod-nano")

        assert row["id"] == "p"


# --------------------------------------------------------------------------
# TranslationStore
# --------------------------------------------------------------------------

class TestTranslationStore:

    @pytest.mark.asyncio
    async def test_ensure_language_creates_once(self, mock_supabase_client, fake_db):
        store = TranslationStore(mock_supabase_client)

        await store.ensure_language("en")
        await store.ensure_language("en")

        assert fake_db.rows("languages") == [
            {"code": "en", "name": "English", "native_name": "English", "is_active": True}
        ]

    @pytest.mark.asyncio
    async def test_unknown_language_named_by_code(self, mock_supabase_client, fake_db):
        language = await TranslationStore(mock_supabase_client).ensure_language("de")

        assert language["name"] == "de"
        assert language["native_name"] == "de"

    @pytest.mark.asyncio
    async def test_upsert_product_translation(self, mock_supabase_client, fake_db):
        store = TranslationStore(mock_supabase_client)

        await store.upsert_product_translation("p1", "en", {"name": "Old"})
        await store.upsert_product_translation("p1", "en", {"name": "New"})

        rows = fake_db.rows("product_translations")
        assert rows == [{"product_id": "p1", "language_code": "en", "name": "New"}]


# --------------------------------------------------------------------------
# AttributeStore
# --------------------------------------------------------------------------

class TestAttributeStore:

    @pytest.mark.asyncio
    async def test_find_by_code_scoped_to_store(self, mock_supabase_client, store_id):
        store = AttributeStore(mock_supabase_client)
        await store.create({"store_id": store_id, "code": "vendor"})

        assert (await store.find_by_code(store_id, "vendor"))["code"] == "vendor"
        assert await store.find_by_code("other-store", "vendor") is None
