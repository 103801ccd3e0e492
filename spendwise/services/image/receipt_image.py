"""
Receipt Image Preparation

Turns uploaded bytes into the payload the receipt analysis helper
expects: a base64 data URI with the image's MIME type.

DESIGN DECISION: We trust the image bytes, not the filename or the
browser-reported type. Pillow identifies the actual format, so a
renamed PDF or a truncated upload is rejected before any AI call.
"""

import base64
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, Field

from spendwise.config import get_settings


class ReceiptImageError(Exception):
    """Base exception for receipt image problems."""
    pass


class UnsupportedImageError(ReceiptImageError):
    """The bytes are not an image in a supported format."""
    pass


class ImageTooLargeError(ReceiptImageError):
    """The upload exceeds the configured size limit."""
    pass


class ReceiptImage(BaseModel):
    """A receipt image ready to send to the analysis helper."""

    data: bytes = Field(..., repr=False)
    mime_type: str
    width: int = Field(ge=1)
    height: int = Field(ge=1)
    quality_issues: list[str] = Field(
        default_factory=list,
        description="Non-blocking hints, e.g. low resolution"
    )

    @property
    def size_bytes(self) -> int:
        return len(self.data)

    @property
    def data_uri(self) -> str:
        """data:<mimetype>;base64,<encoded_data>"""
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


def _quality_issues(img: Image.Image) -> list[str]:
    """Cheap heuristics; the user can still proceed."""
    issues = []
    width, height = img.size
    if min(width, height) < 300:
        issues.append("Image resolution is low, the receipt text may be hard to read")

    gray = img.convert("L")
    histogram = gray.histogram()
    total_pixels = sum(histogram) or 1
    if sum(histogram[:50]) / total_pixels > 0.7:
        issues.append("Image is very dark")
    return issues


def encode_receipt_image(
    image_bytes: bytes,
    max_size_bytes: Optional[int] = None,
    supported_formats: Optional[list[str]] = None,
) -> ReceiptImage:
    """
    Validate uploaded bytes and wrap them as a ReceiptImage.

    Raises:
        ImageTooLargeError: Upload exceeds the size limit
        UnsupportedImageError: Not an image, or a format we don't accept
    """
    app_settings = get_settings().app
    if max_size_bytes is None:
        max_size_bytes = app_settings.max_upload_size_bytes
    if supported_formats is None:
        supported_formats = app_settings.supported_formats_list

    if not image_bytes:
        raise UnsupportedImageError("The uploaded file is empty")
    if len(image_bytes) > max_size_bytes:
        raise ImageTooLargeError(
            f"Receipt image is {len(image_bytes) / (1024 * 1024):.1f} MB, "
            f"the limit is {max_size_bytes / (1024 * 1024):.0f} MB"
        )

    try:
        img = Image.open(BytesIO(image_bytes))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise UnsupportedImageError(f"Could not read the file as an image: {e}")

    image_format = (img.format or "").lower()
    if image_format not in supported_formats:
        raise UnsupportedImageError(
            f"Unsupported image format: {image_format or 'unknown'}. "
            f"Allowed: {', '.join(supported_formats)}"
        )

    mime_type = Image.MIME.get(img.format, f"image/{image_format}")
    width, height = img.size

    return ReceiptImage(
        data=image_bytes,
        mime_type=mime_type,
        width=width,
        height=height,
        quality_issues=_quality_issues(img),
    )
