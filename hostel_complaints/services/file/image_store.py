"""
Image storage for complaint attachments.
"""

import io
import os
import uuid
from pathlib import Path
from typing import Optional, Protocol

from PIL import Image

from hostel_complaints.config.settings import settings
from hostel_complaints.core.exceptions import ValidationError
from hostel_complaints.core.logging import get_logger

logger = get_logger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
ALLOWED_IMAGE_FORMATS = {"JPEG", "PNG", "GIF", "WEBP"}
LOCAL_URL_PREFIX = "/uploads/"


class ImageStore(Protocol):
    """Stores attachment bytes and hands back a reference URL."""

    def save(self, content: bytes, filename: str) -> str:
        ...

    def delete(self, url: str) -> None:
        ...


def validate_image(content: bytes, filename: str, max_size: Optional[int] = None) -> str:
    """
    Check an upload before it is stored.

    Returns:
        The normalised file extension

    Raises:
        ValidationError: Unsupported type, empty, oversized or unreadable file
    """
    max_size = settings.MAX_UPLOAD_SIZE if max_size is None else max_size
    extension = Path(filename or "").suffix.lower()

    if extension not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError(
            "Unsupported image type",
            field_errors={"image": [f"Allowed types: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}"]},
        )
    if not content:
        raise ValidationError("Image is empty", field_errors={"image": ["Image is empty"]})
    if len(content) > max_size:
        raise ValidationError(
            "Image is too large",
            field_errors={"image": [f"Maximum size is {max_size // (1024 * 1024)}MB"]},
        )

    try:
        with Image.open(io.BytesIO(content)) as image:
            image_format = image.format
            image.verify()
    except Exception as e:
        raise ValidationError(
            "Image could not be read",
            field_errors={"image": ["File is not a valid image"]},
        ) from e

    if image_format not in ALLOWED_IMAGE_FORMATS:
        raise ValidationError(
            "Unsupported image type",
            field_errors={"image": [f"Unsupported format: {image_format}"]},
        )
    return extension


class LocalImageStore:
    """Writes images under ``UPLOAD_DIR`` with random file names."""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.UPLOAD_DIR)

    def save(self, content: bytes, filename: str) -> str:
        extension = Path(filename or "").suffix.lower()
        self.base_dir.mkdir(parents=True, exist_ok=True)

        stored_name = f"{uuid.uuid4().hex}{extension}"
        (self.base_dir / stored_name).write_bytes(content)

        logger.debug(f"Stored image {stored_name} ({len(content)} bytes)")
        return f"{LOCAL_URL_PREFIX}{stored_name}"

    def delete(self, url: str) -> None:
        if not url.startswith(LOCAL_URL_PREFIX):
            raise ValueError(f"Not a local image reference: {url}")

        name = os.path.basename(url[len(LOCAL_URL_PREFIX):])
        path = self.base_dir / name
        if path.exists():
            path.unlink()
            logger.debug(f"Deleted image {name}")
