"""
Cart store errors.

Message constants are centralized to avoid string duplication.
"""

ERROR_STORE_NOT_INITIALIZED = "Cart store is not initialized: create it in the application lifespan"
ERROR_SNAPSHOT_NOT_JSON = "Cart snapshot is not valid JSON"
ERROR_SNAPSHOT_SHAPE = "Cart snapshot has an unexpected shape"
ERROR_SNAPSHOT_VERSION = "Unsupported cart snapshot version"
ERROR_SNAPSHOT_ITEM = "Cart snapshot contains an invalid line item"
ERROR_SNAPSHOT_DUPLICATE = "Cart snapshot contains duplicate product ids"
ERROR_STORAGE_NOT_CONFIGURED = "UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set"


class CartStoreError(Exception):
    """Base class for cart store errors."""


class CartStoreNotInitializedError(CartStoreError, RuntimeError):
    """The cart store was requested outside an initialized application."""

    def __init__(self, message: str = ERROR_STORE_NOT_INITIALIZED):
        super().__init__(message)


class SnapshotCorruptError(CartStoreError, ValueError):
    """The persisted cart snapshot could not be decoded."""
