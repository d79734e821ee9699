"""Photo to stylization parameter pipeline.

Runs one request end to end: fetch and decode the photo, detect the face,
plan the sampling regions, sample the three colors concurrently, estimate
pose and expression, and assemble the result. Nothing is retained between
requests.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, Optional, Tuple

from ..models.types import ColorSample, FaceAnalysis, StylizationParams
from ..utils.image import decode_image, fetch_image_bytes
from .color_sampler import sample_region_color
from .face_detection import NoFaceDetectedError, detector as default_detector
from .geometry import (
    calculate_head_tilt,
    detect_smile,
    estimate_head_turn,
    eye_distance,
    validate_landmarks
)
from .regions import plan_regions
from .stylization import assemble_params

logger = logging.getLogger(__name__)

Fetch = Callable[[str], bytes]


def sample_colors(
    image_url: str,
    face: FaceAnalysis,
    img_width: int,
    img_height: int,
    fetch: Optional[Fetch] = None
) -> Dict[str, ColorSample]:
    """Sample hair, eye and outfit colors in parallel.

    Returns:
        Color samples keyed by region name. Failed regions carry the
        fallback color.
    """
    regions = plan_regions(face['box'], face['landmarks'])

    with ThreadPoolExecutor(max_workers=len(regions)) as executor:
        futures = {
            name: executor.submit(
                sample_region_color, image_url, region, img_width, img_height, fetch, name
            )
            for name, region in regions.items()
        }
        return {name: future.result() for name, future in futures.items()}


def build_stylization(
    image_url: str,
    face: FaceAnalysis,
    img_width: int,
    img_height: int,
    fetch: Optional[Fetch] = None
) -> StylizationParams:
    """Derive stylization parameters for a detected face.

    Args:
        image_url: Locator of the source photo, re-fetched for each region.
        face: Detector output for the photo.
        img_width: Photo width in pixels.
        img_height: Photo height in pixels.
        fetch: Optional replacement for the image fetcher.

    Returns:
        Fully populated stylization parameters.
    """
    landmarks = face['landmarks']
    validate_landmarks(landmarks)

    colors = sample_colors(image_url, face, img_width, img_height, fetch)

    params = assemble_params(
        face,
        colors['hair'],
        colors['eyes'],
        colors['outfit'],
        head_tilt=calculate_head_tilt(landmarks),
        head_turn=estimate_head_turn(landmarks),
        smile=detect_smile(landmarks),
        eye_distance=eye_distance(landmarks)
    )
    if params['fallbackRegions']:
        logger.warning(f"Fallback color used for: {', '.join(params['fallbackRegions'])}")
    return params


def analyze_image(
    image_url: str,
    detector=None,
    fetch: Optional[Fetch] = None
) -> Tuple[FaceAnalysis, StylizationParams]:
    """Run the full analysis for one uploaded photo.

    Args:
        image_url: Locator of the photo.
        detector: Object with a detect(image) method. Defaults to the
            shared FaceDetector.
        fetch: Optional replacement for the image fetcher.

    Returns:
        Tuple of (face analysis, stylization parameters).

    Raises:
        ImageProcessingError: If the photo cannot be fetched or decoded.
        NoFaceDetectedError: If the photo has no face. No colors are sampled.
    """
    detector = detector or default_detector
    fetch = fetch or fetch_image_bytes

    logger.info(f"Analyzing {image_url}...")
    image = decode_image(fetch(image_url))

    face = detector.detect(image)
    if face is None:
        raise NoFaceDetectedError("No face detected")

    img_height, img_width = image.shape[:2]
    params = build_stylization(image_url, face, img_width, img_height, fetch)
    logger.info(
        f"Stylization: tilt {params['headTilt']:.1f}°, facing {params['headTurn']}, "
        f"{params['smile']}"
    )
    return face, params
