"""
Services Package

External-facing services:
- Storage: key/value persistence for expenses
- Image: receipt image preparation for the AI helper
"""

from spendwise.services.image import (
    ImageTooLargeError,
    ReceiptImage,
    ReceiptImageError,
    UnsupportedImageError,
    encode_receipt_image,
)
from spendwise.services.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
    NotFoundError,
    PersistentStore,
    StorageError,
    StorageUnavailableError,
)

__all__ = [
    # Image
    "ImageTooLargeError",
    "ReceiptImage",
    "ReceiptImageError",
    "UnsupportedImageError",
    "encode_receipt_image",
    # Storage
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "NotFoundError",
    "PersistentStore",
    "StorageError",
    "StorageUnavailableError",
]
