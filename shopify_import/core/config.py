import json
import os
from typing import Optional
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel


load_dotenv()


class Settings(BaseModel):
    # Supabase
    supabase_url: str | None = os.getenv("SUPABASE_URL")
    supabase_service_role_key: str | None = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
    supabase_storage_bucket: str = os.getenv("SUPABASE_STORAGE_BUCKET", "suprshop-assets")

    # Shopify Admin REST API
    shopify_api_version: str = os.getenv("SHOPIFY_API_VERSION", "2023-10")
    shopify_rate_limit_delay: float = float(os.getenv("SHOPIFY_RATE_LIMIT_DELAY", "0.5"))
    shopify_retry_delay: float = float(os.getenv("SHOPIFY_RETRY_DELAY", "2.0"))
    shopify_page_limit: int = int(os.getenv("SHOPIFY_PAGE_LIMIT", "250"))
    shopify_request_timeout: float = float(os.getenv("SHOPIFY_REQUEST_TIMEOUT", "30"))

    # Image re-hosting
    image_download_timeout: float = float(os.getenv("IMAGE_DOWNLOAD_TIMEOUT", "30"))

    # Storage providers: "supabase", "s3" or "local"
    storage_provider: str = os.getenv("STORAGE_PROVIDER", "supabase")
    # Per-store override, e.g. {"<store uuid>": "s3"}
    store_storage_providers: dict[str, str] = json.loads(os.getenv("STORE_STORAGE_PROVIDERS", "{}"))
    s3_bucket: Optional[str] = os.getenv("S3_BUCKET")
    s3_region: str = os.getenv("S3_REGION", "us-east-1")
    s3_public_base_url: Optional[str] = os.getenv("S3_PUBLIC_BASE_URL")
    local_storage_root: str = os.getenv("LOCAL_STORAGE_ROOT", "./uploads")
    local_storage_base_url: str = os.getenv("LOCAL_STORAGE_BASE_URL", "http://localhost:5000/uploads")

    # Translations
    default_language_code: str = os.getenv("DEFAULT_LANGUAGE_CODE", "en")

    # Celery
    celery_broker_url: str = os.getenv("CELERY_BROKER_URL", os.getenv("REDIS_URL", "redis://localhost:6379/0"))
    celery_result_backend: str = os.getenv("CELERY_RESULT_BACKEND", os.getenv("REDIS_URL", "redis://localhost:6379/0"))
    shopify_import_task_time_limit: int = int(os.getenv("SHOPIFY_IMPORT_TASK_TIME_LIMIT", "21600"))


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = Settings()
