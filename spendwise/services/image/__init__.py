"""Receipt image services package."""

from spendwise.services.image.receipt_image import (
    ImageTooLargeError,
    ReceiptImage,
    ReceiptImageError,
    UnsupportedImageError,
    encode_receipt_image,
)

__all__ = [
    "ImageTooLargeError",
    "ReceiptImage",
    "ReceiptImageError",
    "UnsupportedImageError",
    "encode_receipt_image",
]
