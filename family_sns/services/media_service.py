"""Media service - image uploads stored on local disk and served from /uploads."""

import logging
import os
import shutil
import time
import uuid
from dataclasses import dataclass
from typing import BinaryIO

from family_sns.core.config import settings
from family_sns.core.exceptions import InvalidUpload

logger = logging.getLogger(__name__)

UPLOAD_URL_PREFIX = "/uploads"
MAX_EXTENSION_LENGTH = 10


@dataclass
class StoredImage:
    filename: str
    url: str
    size: int


def get_upload_dir() -> str:
    """Get the upload directory, creating it when missing."""
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    return settings.UPLOAD_DIR


def file_too_large() -> InvalidUpload:
    max_mb = settings.MAX_UPLOAD_BYTES / (1024 * 1024)
    return InvalidUpload(f"File too large (max {max_mb:.0f}MB)")


def validate_image(content_type: str | None, file_size: int) -> None:
    """Reject anything that is not an image or is over the size limit."""
    if not content_type or not content_type.lower().startswith("image/"):
        raise InvalidUpload("Only image files can be uploaded")

    if file_size > settings.MAX_UPLOAD_BYTES:
        raise file_too_large()


def build_filename(original_filename: str | None) -> str:
    """
    Generate a collision-free name: ``<uuid4>-<epoch-ms><ext>``.

    Only the extension of the client filename survives.
    """
    _, ext = os.path.splitext(os.path.basename(original_filename or ""))
    ext = ext.lower()
    if len(ext) > MAX_EXTENSION_LENGTH or not ext[1:].isalnum():
        ext = ""
    return f"{uuid.uuid4()}-{int(time.time() * 1000)}{ext}"


def store_image(
    filename: str | None,
    content_type: str | None,
    stream: BinaryIO,
    size: int,
) -> StoredImage:
    """Validate and persist an uploaded image."""
    validate_image(content_type, size)

    stored_name = build_filename(filename)
    path = os.path.join(get_upload_dir(), stored_name)
    stream.seek(0)
    with open(path, "wb") as f:
        shutil.copyfileobj(stream, f)

    logger.info("Stored image %s (%d bytes)", stored_name, size)
    return StoredImage(
        filename=stored_name,
        url=f"{UPLOAD_URL_PREFIX}/{stored_name}",
        size=size,
    )
