"""Shared test fixtures."""

from __future__ import annotations

import os
import tempfile

# Keep uploads and model lookups out of the source tree during tests
os.environ.setdefault("KIDTOON_UPLOAD_DIR", tempfile.mkdtemp(prefix="kidtoon-uploads-"))
os.environ.setdefault("KIDTOON_MODELS_DIR", tempfile.mkdtemp(prefix="kidtoon-models-"))

import cv2
import numpy as np
import pytest


def make_landmarks(overrides=None):
    """68 points of a frontal, neutral face in a 500x500 photo.

    Eyes at (200, 200) and (300, 200), nose tip centred, closed mouth.
    """
    points = [{'x': 250.0, 'y': 250.0} for _ in range(68)]
    defaults = {
        36: (200, 200),   # left eye outer corner
        37: (210, 192),   # left upper eyelid
        45: (300, 200),   # right eye outer corner
        30: (250, 260),   # nose tip
        48: (220, 320),   # mouth left corner
        54: (280, 320),   # mouth right corner
        51: (250, 315),   # upper lip
        57: (250, 325),   # lower lip
    }
    defaults.update(overrides or {})
    for index, (x, y) in defaults.items():
        points[index] = {'x': float(x), 'y': float(y)}
    return points


def make_face(landmarks=None, box=None, age=5, gender="female"):
    return {
        'age': age,
        'gender': gender,
        'landmarks': landmarks or make_landmarks(),
        'box': box or {'x': 180.0, 'y': 150.0, 'width': 140.0, 'height': 200.0},
    }


def encode_png(image: np.ndarray) -> bytes:
    ok, buffer = cv2.imencode(".png", image)
    assert ok
    return buffer.tobytes()


@pytest.fixture
def landmarks():
    return make_landmarks()


@pytest.fixture
def face():
    return make_face()


@pytest.fixture
def solid_png():
    """500x500 PNG filled with RGB (200, 100, 50)."""
    image = np.zeros((500, 500, 3), dtype=np.uint8)
    image[:, :] = (50, 100, 200)  # BGR
    return encode_png(image)


@pytest.fixture
def split_png():
    """500x500 PNG: top half white, bottom half RGB (0, 0, 255)."""
    image = np.zeros((500, 500, 3), dtype=np.uint8)
    image[:250, :] = (255, 255, 255)
    image[250:, :] = (255, 0, 0)  # BGR blue
    return encode_png(image)
