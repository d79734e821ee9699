"""Face detection and landmark extraction module.

This module locates the child's face in a photo, extracts the 68-point
landmark set used for pose and expression estimation and, when the Caffe
age/gender networks are available, estimates age and gender. Detection uses
the dlib models shipped with face_recognition.
"""

import logging
import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import cv2
import numpy as np
import face_recognition

from ..config import settings
from ..models.types import Box, FaceAnalysis, Gender, Landmarks

logger = logging.getLogger(__name__)

class FaceDetectionError(Exception):
    """Base exception for face detection errors."""
    pass

class NoFaceDetectedError(FaceDetectionError):
    """Exception raised when no face is detected in an image."""
    pass

# face_recognition splits the 68 points into named features. The lips are
# reordered (and overlap at the corners), so they are mapped back point by point.
_SEQUENTIAL_FEATURES = (
    'chin', 'left_eyebrow', 'right_eyebrow', 'nose_bridge',
    'nose_tip', 'left_eye', 'right_eye'
)
_LIP_POINTS = (
    [('top_lip', i) for i in range(7)]                 # 48-54
    + [('bottom_lip', i) for i in range(1, 6)]         # 55-59
    + [('top_lip', i) for i in (11, 10, 9, 8, 7)]      # 60-64
    + [('bottom_lip', i) for i in (10, 9, 8)]          # 65-67
)

def landmarks_from_features(features: Dict[str, Sequence[Tuple[int, int]]]) -> Landmarks:
    """Rebuild the ordered 68-point landmark list from face_recognition output.

    Args:
        features: One entry of face_recognition.face_landmarks(model="large").

    Returns:
        List of 68 points in iBUG order.
    """
    points: List[Tuple[int, int]] = []
    for name in _SEQUENTIAL_FEATURES:
        points.extend(features[name])
    for name, index in _LIP_POINTS:
        points.append(features[name][index])
    return [{'x': float(x), 'y': float(y)} for x, y in points]

class FaceDetector:
    """Handles face detection, landmarks and age/gender estimation."""

    # Levi & Hassner age/gender nets
    AGE_BUCKET_MIDPOINTS = [1, 5, 10, 17, 28, 40, 50, 70]  # (0-2) ... (60-100)
    GENDER_LABELS: List[Gender] = ['male', 'female']
    MODEL_MEAN_VALUES = (78.4263377603, 87.7689143744, 114.895847746)
    NET_INPUT_SIZE = (227, 227)
    FACE_MARGIN = 0.2      # Margin around face for age/gender crop

    AGE_PROTO = 'age_deploy.prototxt'
    AGE_MODEL = 'age_net.caffemodel'
    GENDER_PROTO = 'gender_deploy.prototxt'
    GENDER_MODEL = 'gender_net.caffemodel'

    def __init__(self, models_dir: Optional[Path] = None, detection_model: Optional[str] = None):
        """Initialize detection settings. Networks are loaded on first use."""
        self.models_dir = Path(models_dir or settings.models_dir)
        self.detection_model = detection_model or settings.face_detection_model
        self._age_net = None
        self._gender_net = None
        self._nets_checked = False
        # The detector is shared by request threads; cv2.dnn.Net is not thread-safe
        self._load_lock = threading.Lock()
        self._net_lock = threading.Lock()

    def _load_age_gender_nets(self) -> None:
        if self._nets_checked:
            return

        with self._load_lock:
            if self._nets_checked:
                return

            paths = [self.models_dir / name for name in
                     (self.AGE_PROTO, self.AGE_MODEL, self.GENDER_PROTO, self.GENDER_MODEL)]
            missing = [p.name for p in paths if not p.exists()]
            if missing:
                logger.warning(f"Age/gender models missing ({', '.join(missing)}), using defaults")
            else:
                try:
                    self._age_net = cv2.dnn.readNetFromCaffe(str(paths[0]), str(paths[1]))
                    self._gender_net = cv2.dnn.readNetFromCaffe(str(paths[2]), str(paths[3]))
                    logger.info("Age/gender models loaded")
                except cv2.error as e:
                    logger.error(f"Failed to load age/gender models: {str(e)}")
                    self._age_net = self._gender_net = None

            # Published only after the nets are assigned
            self._nets_checked = True

    @property
    def age_gender_available(self) -> bool:
        self._load_age_gender_nets()
        return self._age_net is not None and self._gender_net is not None

    def locate_face(self, rgb_image: np.ndarray) -> Optional[Tuple[int, int, int, int]]:
        """Find the largest face.

        Args:
            rgb_image: Input image in RGB format.

        Returns:
            (top, right, bottom, left) of the largest face, or None.
        """
        face_locations = face_recognition.face_locations(rgb_image, model=self.detection_model)
        if not face_locations:
            return None

        logger.info(f"Found {len(face_locations)} face(s), keeping the largest")
        return max(face_locations, key=lambda loc: (loc[1] - loc[3]) * (loc[2] - loc[0]))

    def estimate_age_gender(self, image: np.ndarray, box: Box) -> Tuple[int, Gender]:
        """Estimate age and gender for a face box.

        Args:
            image: Input image in BGR format.
            box: Face bounding box.

        Returns:
            (age, gender). (0, "unknown") when the models are unavailable.
        """
        if not self.age_gender_available:
            return 0, 'unknown'

        x, y, w, h = (int(box[k]) for k in ('x', 'y', 'width', 'height'))
        margin_x = int(w * self.FACE_MARGIN)
        margin_y = int(h * self.FACE_MARGIN)

        height, width = image.shape[:2]
        x1 = max(0, x - margin_x)
        y1 = max(0, y - margin_y)
        x2 = min(width, x + w + margin_x)
        y2 = min(height, y + h + margin_y)
        face_roi = image[y1:y2, x1:x2]
        if face_roi.size == 0:
            return 0, 'unknown'

        blob = cv2.dnn.blobFromImage(
            face_roi, 1.0, self.NET_INPUT_SIZE, self.MODEL_MEAN_VALUES, swapRB=False
        )

        with self._net_lock:
            self._gender_net.setInput(blob)
            gender = self.GENDER_LABELS[int(self._gender_net.forward()[0].argmax())]

            self._age_net.setInput(blob)
            age = self.AGE_BUCKET_MIDPOINTS[int(self._age_net.forward()[0].argmax())]

        return age, gender

    def detect(self, image: np.ndarray) -> Optional[FaceAnalysis]:
        """Detect a single face with landmarks, age and gender.

        Args:
            image: Input image in BGR format.

        Returns:
            Face analysis for the largest face, or None if no face is found.

        Raises:
            ValueError: If input image is invalid.
        """
        if image is None:
            raise ValueError("Input image is None")

        logger.info(f"Image shape: {image.shape}")

        # face_recognition uses RGB
        rgb_image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

        location = self.locate_face(rgb_image)
        if location is None:
            return None

        landmark_sets = face_recognition.face_landmarks(
            rgb_image, face_locations=[location], model="large"
        )
        if not landmark_sets:
            return None

        top, right, bottom, left = location
        box: Box = {
            'x': float(left),
            'y': float(top),
            'width': float(right - left),
            'height': float(bottom - top)
        }
        age, gender = self.estimate_age_gender(image, box)
        logger.info(f"Face at {box}, age {age}, gender {gender}")

        return {
            'age': age,
            'gender': gender,
            'landmarks': landmarks_from_features(landmark_sets[0]),
            'box': box
        }

# Create global detector instance
detector = FaceDetector()

def detect_face(image: np.ndarray) -> Optional[FaceAnalysis]:
    """Detect the largest face in an image.

    Args:
        image: Input image.

    Returns:
        Face analysis, or None if no face is found.
    """
    return detector.detect(image)
