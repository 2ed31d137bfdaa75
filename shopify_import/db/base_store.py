"""
Base store: shared Supabase client access for all stores.

All table stores inherit from this class to get standardised
insert / upsert / update / select primitives and the import
identity rule (external id first, natural key second).
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from postgrest.exceptions import APIError

from shopify_import.core.config import settings
from shopify_import.core.constants import EXTERNAL_SOURCE
from shopify_import.core.exceptions import DatabaseTransientError, StoreError
from shopify_import.clients.supabase_client import SupabaseClient

logger = logging.getLogger("base_store")


class BaseStore:
    """Base class for all Supabase stores providing shared CRUD operations."""

    def __init__(self, supabase_client: SupabaseClient | None = None) -> None:
        self._supabase_client = supabase_client

    @property
    def _client(self):
        if self._supabase_client is None:
            self._supabase_client = SupabaseClient(settings)
        return self._supabase_client.client

    async def _insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored."""
        try:
            response = self._client.table(table).insert(row).execute()
        except APIError as e:
            logger.info("supabase error table=%s detail=%s", table, str(e))
            raise StoreError(table, "insert", str(e)) from e
        except httpx.TransportError as e:
            logger.warning("supabase unavailable table=%s detail=%r", table, e)
            raise DatabaseTransientError(table, "insert", repr(e)) from e
        return (response.data or [row])[0]

    async def _upsert(
        self, table: str, row: Dict[str, Any], on_conflict: str | None = None
    ) -> Dict[str, Any]:
        """Upsert one row (insert or update on conflict)."""
        try:
            if on_conflict:
                response = self._client.table(table).upsert(row, on_conflict=on_conflict).execute()
            else:
                response = self._client.table(table).upsert(row).execute()
        except APIError as e:
            logger.info("supabase error table=%s detail=%s", table, str(e))
            raise StoreError(table, "upsert", str(e)) from e
        except httpx.TransportError as e:
            logger.warning("supabase unavailable table=%s detail=%r", table, e)
            raise DatabaseTransientError(table, "upsert", repr(e)) from e
        return (response.data or [row])[0]

    async def _select(
        self,
        table: str,
        columns: str = "*",
        filters: Dict[str, Any] | None = None,
        order_by: str | None = None,
        desc: bool = False,
        limit: int | None = None,
    ) -> List[Dict[str, Any]]:
        """Select rows from a table with optional equality filters."""
        try:
            query = self._client.table(table).select(columns)
            for key, value in (filters or {}).items():
                query = query.eq(key, value)
            if order_by:
                query = query.order(order_by, desc=desc)
            if limit is not None:
                query = query.limit(limit)
            response = query.execute()
            return response.data or []
        except APIError as e:
            logger.info("supabase error table=%s detail=%s", table, str(e))
            raise StoreError(table, "select", str(e)) from e
        except httpx.TransportError as e:
            logger.warning("supabase unavailable table=%s detail=%r", table, e)
            raise DatabaseTransientError(table, "select", repr(e)) from e

    async def _select_one(
        self, table: str, filters: Dict[str, Any], columns: str = "*"
    ) -> Optional[Dict[str, Any]]:
        rows = await self._select(table, columns=columns, filters=filters, limit=1)
        return rows[0] if rows else None

    async def _update(
        self, table: str, filters: Dict[str, Any], payload: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Update rows matching the filters and return the first updated row."""
        try:
            query = self._client.table(table).update(payload)
            for key, value in filters.items():
                query = query.eq(key, value)
            response = query.execute()
        except APIError as e:
            logger.info("supabase error table=%s detail=%s", table, str(e))
            raise StoreError(table, "update", str(e)) from e
        except httpx.TransportError as e:
            logger.warning("supabase unavailable table=%s detail=%r", table, e)
            raise DatabaseTransientError(table, "update", repr(e)) from e
        return (response.data or [{**filters, **payload}])[0]

    async def _find_for_import(
        self,
        table: str,
        store_id: str,
        external_id: str,
        natural_key_column: str,
        natural_key: str | None,
    ) -> Optional[Dict[str, Any]]:
        """
        Resolve the local row an imported record maps to.

        The external id wins. A natural-key match is only adopted when the
        row is unlinked or already belongs to this source, so rows created
        locally or by another integration are never overwritten.
        """
        row = await self._select_one(table, {"store_id": store_id, "external_id": external_id})
        if row:
            return row
        if not natural_key:
            return None

        row = await self._select_one(table, {"store_id": store_id, natural_key_column: natural_key})
        if not row:
            return None
        source = row.get("external_source")
        if source and source != EXTERNAL_SOURCE:
            logger.info(
                "import identity skipped table=%s %s=%s owned_by=%s",
                table, natural_key_column, natural_key, source,
            )
            return None
        return row
