"""
Celery tasks package.
"""
from shopify_import.celery_app.tasks.shopify_import import run_import

__all__ = ["run_import"]
