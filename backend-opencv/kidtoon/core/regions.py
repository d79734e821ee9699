"""Sampling region planning.

Derives the hair, eye and outfit rectangles from the face box and landmarks.
Regions are returned unclamped; they routinely fall outside the image (the
hair band above a face at the top edge, the outfit band below the frame) and
are clamped by the color sampler.
"""

from typing import Sequence

from ..models.types import Box, Point, Region, SamplingRegions
from .geometry import LEFT_EYE_OUTER, LEFT_EYE_UPPER_LID, RIGHT_EYE_OUTER, validate_landmarks

HAIR_BAND_RATIO = 0.25
OUTFIT_BAND_RATIO = 0.8
EYE_BAND_OFFSET = 5
EYE_BAND_HEIGHT = 20


def hair_region(box: Box) -> Region:
    """Band directly above the face box."""
    return {
        'x': box['x'],
        'y': box['y'] - box['height'] * HAIR_BAND_RATIO,
        'width': box['width'],
        'height': box['height'] * HAIR_BAND_RATIO
    }


def eye_region(landmarks: Sequence[Point]) -> Region:
    """Fixed-height band spanning the eye line between the outer corners."""
    validate_landmarks(landmarks)
    left_eye = landmarks[LEFT_EYE_OUTER]
    right_eye = landmarks[RIGHT_EYE_OUTER]
    return {
        'x': left_eye['x'],
        'y': landmarks[LEFT_EYE_UPPER_LID]['y'] - EYE_BAND_OFFSET,
        'width': right_eye['x'] - left_eye['x'],
        'height': EYE_BAND_HEIGHT
    }


def outfit_region(box: Box) -> Region:
    """Band below the chin, approximating the torso."""
    return {
        'x': box['x'],
        'y': box['y'] + box['height'],
        'width': box['width'],
        'height': box['height'] * OUTFIT_BAND_RATIO
    }


def plan_regions(box: Box, landmarks: Sequence[Point]) -> SamplingRegions:
    """Plan all three color sampling regions for a detected face.

    Args:
        box: Face bounding box.
        landmarks: 68-point landmark set.

    Returns:
        Dictionary with 'hair', 'eyes' and 'outfit' regions.
    """
    return {
        'hair': hair_region(box),
        'eyes': eye_region(landmarks),
        'outfit': outfit_region(box)
    }
