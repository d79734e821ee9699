"""Local image ingestion.

Uploaded photos are written to the upload directory, which main.py serves
as static files under /uploads, and are referenced by URL from then on.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional

from ..config import settings

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.webp', '.bmp'}
CONTENT_TYPE_EXTENSIONS = {
    'image/jpeg': '.jpg',
    'image/png': '.png',
    'image/webp': '.webp',
    'image/bmp': '.bmp'
}

def _pick_extension(filename: Optional[str], content_type: Optional[str]) -> str:
    suffix = Path(filename or "").suffix.lower()
    if suffix in ALLOWED_EXTENSIONS:
        return suffix
    return CONTENT_TYPE_EXTENSIONS.get(content_type or "", '.jpg')

def store_upload(
    image_bytes: bytes,
    filename: Optional[str] = None,
    content_type: Optional[str] = None,
    upload_dir: Optional[Path] = None,
    base_url: Optional[str] = None
) -> str:
    """Persist uploaded image bytes and return a retrievable URL.

    Args:
        image_bytes: Raw uploaded file contents.
        filename: Original client filename, used for its extension only.
        content_type: Declared MIME type of the upload.
        upload_dir: Target directory. Defaults to the configured upload dir.
        base_url: Public base URL of this service.

    Returns:
        URL of the stored file, e.g. "http://host/uploads/<name>.jpg".

    Raises:
        ValueError: If the upload is empty or not an image.
    """
    if content_type is not None and not content_type.startswith('image/'):
        raise ValueError("Invalid file type. Please upload an image file.")
    if not image_bytes:
        raise ValueError("Uploaded file is empty")

    upload_dir = Path(upload_dir or settings.upload_dir)
    base_url = (base_url or settings.public_base_url).rstrip('/')

    upload_dir.mkdir(parents=True, exist_ok=True)
    name = f"{uuid.uuid4().hex}{_pick_extension(filename, content_type)}"
    (upload_dir / name).write_bytes(image_bytes)

    logger.info(f"Stored upload {filename or '<unnamed>'} as {name} ({len(image_bytes)} bytes)")
    return f"{base_url}/uploads/{name}"
