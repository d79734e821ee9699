"""Bounded region color sampling.

This module averages the color of a rectangular area of a remote image. The
requested rectangle is clamped to the image bounds before cropping, and any
failure along the way (fetch, decode, crop) degrades to a fixed fallback
color instead of raising, so one bad region never fails a whole request.
"""

import logging
from typing import Callable, Optional

import numpy as np

from ..models.types import ClampedRegion, ColorSample, Region
from ..utils.image import decode_image, fetch_image_bytes

logger = logging.getLogger(__name__)

FALLBACK_COLOR = "#d1bfa7"
MIN_REGION_SIZE = 10


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def clamp_region(region: Region, img_width: int, img_height: int) -> ClampedRegion:
    """Clamp a sampling request to the image bounds.

    The origin is clamped first and the size bounds are derived from the
    clamped origin, so the result is always fully inside the image. Sizes
    are raised to MIN_REGION_SIZE where the image leaves room for it; near
    the right or bottom edge the image bound wins and the side can be
    smaller than the minimum.

    Args:
        region: Requested rectangle, possibly outside the image.
        img_width: Image width in pixels.
        img_height: Image height in pixels.

    Returns:
        Integer rectangle with 0 <= x, 0 <= y, x + width <= img_width and
        y + height <= img_height.

    Raises:
        ValueError: If the image has no pixels.
    """
    if img_width < 1 or img_height < 1:
        raise ValueError(f"Invalid image size {img_width}x{img_height}")

    x = int(_clamp(region['x'], 0, img_width - 1))
    y = int(_clamp(region['y'], 0, img_height - 1))
    width = int(min(max(region['width'], MIN_REGION_SIZE), img_width - x))
    height = int(min(max(region['height'], MIN_REGION_SIZE), img_height - y))

    return {'x': x, 'y': y, 'width': width, 'height': height}


def crop(image: np.ndarray, region: ClampedRegion) -> np.ndarray:
    """Crop an image array to a clamped rectangle."""
    x, y = region['x'], region['y']
    return image[y:y + region['height'], x:x + region['width']]


def average_color(pixels: np.ndarray) -> str:
    """Average the RGB channels of a BGR(A) pixel array.

    Args:
        pixels: Image array in OpenCV BGR or BGRA channel order.

    Returns:
        Lowercase "#rrggbb" hex string. Alpha is ignored.

    Raises:
        ValueError: If the array holds no pixels.
    """
    if pixels.ndim == 2:
        pixels = np.stack([pixels] * 3, axis=-1)
    flat = pixels.reshape(-1, pixels.shape[-1])[:, :3]
    if flat.shape[0] == 0:
        raise ValueError("Cannot average an empty pixel area")

    blue, green, red = (int(round(float(c))) for c in flat.astype(np.float64).mean(axis=0))
    return "#{:02x}{:02x}{:02x}".format(red, green, blue)


def sample_region_color(
    image_url: str,
    region: Region,
    img_width: int,
    img_height: int,
    fetch: Optional[Callable[[str], bytes]] = None,
    label: str = "region"
) -> ColorSample:
    """Average the color of one region of a remote image.

    The image is fetched and decoded on every call. This function never
    raises: any failure yields the fallback color with the fallback flag set.

    Args:
        image_url: Locator of the source image.
        region: Requested rectangle, clamped before cropping.
        img_width: Width of the source image.
        img_height: Height of the source image.
        fetch: Callable returning raw image bytes for a URL. Defaults to
            fetch_image_bytes.
        label: Region name used in log messages.

    Returns:
        Color sample carrying the hex color and whether it is the fallback.
    """
    fetch = fetch or fetch_image_bytes
    try:
        image = decode_image(fetch(image_url))
        clamped = clamp_region(region, img_width, img_height)
        color = average_color(crop(image, clamped))
    except Exception as e:
        logger.warning(f"Color detection for {label} fell back to {FALLBACK_COLOR}: {str(e)}")
        return {'hex': FALLBACK_COLOR, 'fallback': True}

    logger.debug(f"Sampled {label} color {color} from {clamped}")
    return {'hex': color, 'fallback': False}


def sample_color(
    image_url: str,
    region: Region,
    img_width: int,
    img_height: int,
    fetch: Optional[Callable[[str], bytes]] = None
) -> str:
    """Same as sample_region_color, returning only the hex string."""
    return sample_region_color(image_url, region, img_width, img_height, fetch)['hex']
