"""
Object storage integration for the browsed bucket.

Supports B2 (Backblaze) and other S3-compatible stores via boto3.
Includes an in-memory mode for local development without credentials.
"""

from .client import (
    InMemoryObjectStore,
    S3ObjectStore,
    StorageConfig,
    create_storage_client,
)

__all__ = [
    "InMemoryObjectStore",
    "S3ObjectStore",
    "StorageConfig",
    "create_storage_client",
]
