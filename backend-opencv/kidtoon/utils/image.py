"""Image processing utilities.

This module provides utility functions for retrieving images by URL,
decoding them into OpenCV arrays and encoding rendered images as data URLs.
"""

import base64
import logging

import cv2
import numpy as np
import requests
from typing import Optional

from ..config import settings

logger = logging.getLogger(__name__)

class ImageProcessingError(Exception):
    """Base exception for image processing errors."""
    pass

class ImageFetchError(ImageProcessingError):
    """Exception raised when an image cannot be retrieved."""
    pass

class ImageDecodingError(ImageProcessingError):
    """Exception raised when image decoding fails."""
    pass

def fetch_image_bytes(url: str, timeout: Optional[float] = None) -> bytes:
    """Download raw image bytes, following a bounded number of redirects.

    Args:
        url: Image locator, typically returned by the upload endpoint.
        timeout: Request timeout in seconds. Defaults to the configured
            fetch timeout.

    Returns:
        Raw response body.

    Raises:
        ImageFetchError: On network errors, timeouts, too many redirects
            or a non-success status.
    """
    if timeout is None:
        timeout = settings.fetch_timeout

    with requests.Session() as session:
        session.max_redirects = settings.fetch_max_redirects
        try:
            response = session.get(url, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ImageFetchError(f"Failed to fetch image from {url}: {str(e)}")

    logger.debug(f"Fetched {len(response.content)} bytes from {url}")
    return response.content

def decode_image(image_bytes: bytes) -> np.ndarray:
    """Decode raw bytes to an OpenCV image.

    Args:
        image_bytes: Encoded image data (JPEG, PNG, ...).

    Returns:
        Decoded image as numpy array in BGR format. Any alpha channel is
        dropped.

    Raises:
        ImageDecodingError: If the data cannot be read as an image.
    """
    if not image_bytes:
        raise ImageDecodingError("Empty image data")

    # Convert bytes to numpy array
    nparr = np.frombuffer(image_bytes, np.uint8)

    # Decode image
    image = cv2.imdecode(nparr, cv2.IMREAD_COLOR)
    if image is None:
        raise ImageDecodingError("Failed to decode image data")

    return image

def load_image(url: str) -> np.ndarray:
    """Fetch and decode an image in one step.

    Raises:
        ImageProcessingError: If fetching or decoding fails.
    """
    return decode_image(fetch_image_bytes(url))

def encode_data_url(image_bytes: bytes, mime_type: str = "image/png") -> str:
    """Encode image bytes as a base64 data URL."""
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
