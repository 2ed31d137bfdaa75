"""
Celery configuration: broker, queues, routes for catalog imports.

Imports are long, strictly sequential runs; one worker process per
queue slot keeps Shopify's per-shop rate limit predictable.

    celery -A shopify_import.celery_app worker -Q shopify_import --concurrency=1 -l info -n import@%h

On Windows use --pool=solo.
"""
import logging
import platform

from celery import Celery
from kombu import Queue

from shopify_import.core.config import settings

logger = logging.getLogger(__name__)

IS_WINDOWS = platform.system() == "Windows"

celery_app = Celery(
    "shopify_import",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "shopify_import.celery_app.tasks.shopify_import",
    ],
)

celery_app.conf.update(
    # Serialization
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    task_track_started=True,
    task_time_limit=settings.shopify_import_task_time_limit,

    task_queues=(
        Queue("shopify_import"),
        Queue("default"),
    ),
    task_routes={
        "tasks.shopify_import.*": {"queue": "shopify_import"},
    },

    # Result expiration
    result_expires=86400,  # 1 day

    # Retry settings
    task_default_retry_delay=60,
    task_max_retries=3,

    worker_pool="solo" if IS_WINDOWS else "prefork",

    # Visibility timeout must outlast the longest import
    broker_transport_options={"visibility_timeout": settings.shopify_import_task_time_limit + 600},

    worker_log_format="[%(asctime)s: %(levelname)s/%(processName)s] %(message)s",
    worker_task_log_format="[%(asctime)s: %(levelname)s/%(processName)s] [%(task_name)s] %(message)s",
)
