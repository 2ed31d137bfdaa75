"""
Shopify import schemas: progress events, run counters, statistic rows.
"""
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field


class ImportProgress(BaseModel):
    """
    One progress event emitted while an import runs.

    Fetch events carry page/fetched/last_batch; per-record events carry
    current/total/item. ``overall_progress`` is only set by full imports.
    """
    stage: str = Field(..., description="e.g. fetching_products, importing_collections")
    page: Optional[int] = None
    fetched: Optional[int] = None
    last_batch: Optional[int] = None
    current: Optional[int] = None
    total: Optional[int] = None
    item: Optional[str] = None
    overall_progress: Optional[int] = Field(None, ge=0, le=100)


class ImportCounters(BaseModel):
    total: int = 0
    imported: int = 0
    skipped: int = 0
    failed: int = 0


class ImportErrorEntry(BaseModel):
    type: Literal["collection", "product"]
    id: Optional[Any] = None
    title: Optional[str] = None
    error: str


class ImportStats(BaseModel):
    collections: ImportCounters = Field(default_factory=ImportCounters)
    products: ImportCounters = Field(default_factory=ImportCounters)
    errors: List[ImportErrorEntry] = Field(default_factory=list)

    def errors_of(self, error_type: str) -> List[dict]:
        return [e.model_dump() for e in self.errors if e.type == error_type]


class ImportStatisticRecord(BaseModel):
    """Row of akeneo_import_statistics (shared by every import source)."""
    id: Optional[Any] = None
    store_id: str
    import_type: str
    import_date: Optional[datetime] = None
    total_processed: int = 0
    successful_imports: int = 0
    failed_imports: int = 0
    skipped_imports: int = 0
    import_method: Optional[str] = None
    error_details: Optional[str] = None
    processing_time_seconds: float = 0


class StorageFile(BaseModel):
    """In-memory file handed to a storage provider."""
    buffer: bytes
    mimetype: str
    size: int
    originalname: str
