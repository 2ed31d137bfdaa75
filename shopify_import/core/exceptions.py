"""
Custom exception hierarchy for the Shopify catalog importer.

Exceptions are categorized as:
- RetryableError: Transient errors that should trigger a Celery retry
- NonRetryableError: Permanent errors that should fail immediately

Import tasks use:
- autoretry_for=(RetryableError,)
- dont_autoretry_for=(NonRetryableError,)
"""


class ShopifyImportException(Exception):
    """Base exception for the Shopify catalog importer."""
    pass


# ============================================
# RETRYABLE ERRORS - Will trigger Celery retry
# ============================================
class RetryableError(ShopifyImportException):
    """
    Base class for errors that should trigger retry.

    Use this for transient errors where retrying might succeed:
    - Network timeouts
    - Rate limits
    - Temporary service unavailability
    """
    pass


class ExternalAPIError(RetryableError):
    """Error from an external API (Shopify, image CDN)."""
    def __init__(self, service: str, message: str, status_code: int = None):
        self.service = service
        self.status_code = status_code
        super().__init__(f"{service} API error: {message}")


class ShopifyAPIError(ExternalAPIError):
    """
    Failed Shopify Admin API call.

    Carries the endpoint, HTTP status (None for transport failures)
    and the raw response body.
    """
    def __init__(self, endpoint: str, status_code: int = None, body: str = ""):
        self.endpoint = endpoint
        self.body = body
        super().__init__(
            "Shopify",
            f"{endpoint} failed status={status_code} body={body}",
            status_code=status_code,
        )


class RateLimitError(ShopifyAPIError):
    """Shopify answered HTTP 429 and the single retry also failed."""
    def __init__(self, endpoint: str, body: str = "", retry_after: float = 2.0):
        self.retry_after = retry_after
        super().__init__(endpoint, status_code=429, body=body)


class DatabaseTransientError(RetryableError):
    """
    Supabase could not be reached for a table operation.

    Examples: connection refused, read timeout, dropped connection
    """
    def __init__(self, table: str, operation: str, detail: str):
        self.table = table
        self.operation = operation
        super().__init__(f"Supabase {operation} on {table} unavailable: {detail}")


# ============================================
# NON-RETRYABLE ERRORS - No automatic retry
# ============================================
class NonRetryableError(ShopifyImportException):
    """
    Base class for errors that should NOT trigger retry.

    Use this for permanent errors where retrying won't help:
    - Validation failures
    - Missing Shopify connection
    - Rejected database writes
    """
    pass


class ValidationError(NonRetryableError):
    """Invalid input data - retrying won't help."""
    pass


class ShopifyConnectionNotFound(NonRetryableError):
    """The store has no usable Shopify access token."""
    def __init__(self, store_id: str):
        self.store_id = store_id
        super().__init__(
            "No Shopify connection found for this store. "
            "Please connect your Shopify account first."
        )


class StoreError(NonRetryableError):
    """A Supabase table operation was rejected."""
    def __init__(self, table: str, operation: str, detail: str):
        self.table = table
        self.operation = operation
        super().__init__(f"Supabase {operation} on {table} failed: {detail}")


class StorageError(NonRetryableError):
    """A storage provider could not store or delete a file."""
    pass
