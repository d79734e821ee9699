"""Landmark geometry estimation.

Pure functions over the 68-point (iBUG) landmark set returned by the face
detector. They estimate the head pose and expression used to stylize the
cartoon: roll angle (head tilt), yaw class (head turn) and smile class.
"""

import math
from typing import Sequence

from ..models.types import HeadTurn, Point, Smile

LANDMARK_COUNT = 68

# iBUG 68-point indices
LEFT_EYE_OUTER = 36
LEFT_EYE_UPPER_LID = 37
RIGHT_EYE_OUTER = 45
NOSE_TIP = 30
MOUTH_LEFT = 48
MOUTH_RIGHT = 54
UPPER_LIP = 51
LOWER_LIP = 57

HEAD_TURN_THRESHOLD = 10.0  # pixels, not normalized by face size
SMILE_RATIO_THRESHOLD = 0.2


class InvalidLandmarksError(ValueError):
    """Exception raised when a landmark set is not a 68-point set."""
    pass


def validate_landmarks(landmarks: Sequence[Point]) -> None:
    """Ensure the landmark set has exactly 68 points.

    Raises:
        InvalidLandmarksError: If the point count is wrong.
    """
    if len(landmarks) != LANDMARK_COUNT:
        raise InvalidLandmarksError(
            f"Expected {LANDMARK_COUNT} landmarks, got {len(landmarks)}"
        )


def calculate_head_tilt(landmarks: Sequence[Point]) -> float:
    """Calculate head roll in degrees from the outer eye corners.

    Args:
        landmarks: 68-point landmark set in image coordinates.

    Returns:
        Signed angle of the left-to-right eye vector. Positive when the
        right eye sits lower in the image (y grows downward).
    """
    validate_landmarks(landmarks)
    left_eye = landmarks[LEFT_EYE_OUTER]
    right_eye = landmarks[RIGHT_EYE_OUTER]
    return math.atan2(
        right_eye['y'] - left_eye['y'],
        right_eye['x'] - left_eye['x']
    ) * (180 / math.pi)


def estimate_head_turn(landmarks: Sequence[Point]) -> HeadTurn:
    """Classify head yaw from the nose offset against the eye midpoint.

    Args:
        landmarks: 68-point landmark set in image coordinates.

    Returns:
        "right", "left" or "center".
    """
    validate_landmarks(landmarks)
    center_x = (landmarks[LEFT_EYE_OUTER]['x'] + landmarks[RIGHT_EYE_OUTER]['x']) / 2
    diff = landmarks[NOSE_TIP]['x'] - center_x

    if diff > HEAD_TURN_THRESHOLD:
        return "right"
    if diff < -HEAD_TURN_THRESHOLD:
        return "left"
    return "center"


def detect_smile(landmarks: Sequence[Point]) -> Smile:
    """Classify the expression from the mouth opening to width ratio.

    A zero-width mouth (collapsed or degenerate landmarks) is reported as
    "neutral" rather than producing a NaN or infinite ratio.

    Args:
        landmarks: 68-point landmark set in image coordinates.

    Returns:
        "smiling" or "neutral".
    """
    validate_landmarks(landmarks)
    mouth_open = abs(landmarks[LOWER_LIP]['y'] - landmarks[UPPER_LIP]['y'])
    mouth_width = abs(landmarks[MOUTH_RIGHT]['x'] - landmarks[MOUTH_LEFT]['x'])

    if mouth_width == 0:
        return "neutral"

    ratio = mouth_open / mouth_width
    if not math.isfinite(ratio):
        return "neutral"
    return "smiling" if ratio > SMILE_RATIO_THRESHOLD else "neutral"


def eye_distance(landmarks: Sequence[Point]) -> float:
    """Horizontal distance in pixels between the outer eye corners."""
    validate_landmarks(landmarks)
    return abs(landmarks[RIGHT_EYE_OUTER]['x'] - landmarks[LEFT_EYE_OUTER]['x'])
