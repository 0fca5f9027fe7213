"""Expose constructed client wrappers."""

from .cloudflare import CloudflareClient, ProviderResponse
from .dynamodb import DynamoDBBlobStore
from .sqlite_store import SQLiteBlobStore, SQLiteTokenTable

__all__ = [
    "CloudflareClient",
    "DynamoDBBlobStore",
    "ProviderResponse",
    "SQLiteBlobStore",
    "SQLiteTokenTable",
]
