"""Tests for the face detector adapter (dlib calls faked)."""

from __future__ import annotations

import threading
import time

import numpy as np
import pytest

from kidtoon.core import face_detection
from kidtoon.core.face_detection import FaceDetector, detect_face, landmarks_from_features


def split_into_features(points):
    """Group 68 points the way face_recognition.face_landmarks does."""
    return {
        "chin": points[0:17],
        "left_eyebrow": points[17:22],
        "right_eyebrow": points[22:27],
        "nose_bridge": points[27:31],
        "nose_tip": points[31:36],
        "left_eye": points[36:42],
        "right_eye": points[42:48],
        "top_lip": points[48:55] + [points[64], points[63], points[62], points[61], points[60]],
        "bottom_lip": points[54:60] + [points[48], points[60], points[67], points[66], points[65], points[64]],
    }


ORDERED_POINTS = [(i, 1000 + i) for i in range(68)]


class TestLandmarksFromFeatures:
    def test_restores_ibug_order(self):
        landmarks = landmarks_from_features(split_into_features(ORDERED_POINTS))
        assert len(landmarks) == 68
        assert [(p['x'], p['y']) for p in landmarks] == [(float(x), float(y)) for x, y in ORDERED_POINTS]

    def test_points_are_floats(self):
        landmarks = landmarks_from_features(split_into_features(ORDERED_POINTS))
        assert all(isinstance(p['x'], float) and isinstance(p['y'], float) for p in landmarks)


@pytest.fixture
def fake_dlib(monkeypatch):
    calls = {}

    def face_locations(rgb_image, model="hog"):
        calls['model'] = model
        # (top, right, bottom, left): a small face and a large one
        return [(10, 60, 60, 10), (100, 400, 400, 150)]

    def face_landmarks(rgb_image, face_locations=None, model="large"):
        calls['landmark_locations'] = face_locations
        calls['landmark_model'] = model
        return [split_into_features(ORDERED_POINTS)]

    monkeypatch.setattr(face_detection.face_recognition, "face_locations", face_locations)
    monkeypatch.setattr(face_detection.face_recognition, "face_landmarks", face_landmarks)
    return calls


class TestFaceDetector:
    def test_detects_largest_face(self, fake_dlib, tmp_path):
        detector = FaceDetector(models_dir=tmp_path, detection_model="hog")
        face = detector.detect(np.zeros((480, 640, 3), dtype=np.uint8))

        assert face['box'] == {'x': 150.0, 'y': 100.0, 'width': 250.0, 'height': 300.0}
        assert len(face['landmarks']) == 68
        assert fake_dlib['landmark_locations'] == [(100, 400, 400, 150)]
        assert fake_dlib['landmark_model'] == "large"
        assert fake_dlib['model'] == "hog"

    def test_without_age_gender_models(self, fake_dlib, tmp_path):
        detector = FaceDetector(models_dir=tmp_path)
        face = detector.detect(np.zeros((480, 640, 3), dtype=np.uint8))
        assert detector.age_gender_available is False
        assert (face['age'], face['gender']) == (0, 'unknown')

    def test_no_face_returns_none(self, monkeypatch, tmp_path):
        monkeypatch.setattr(face_detection.face_recognition, "face_locations", lambda img, model="hog": [])
        assert FaceDetector(models_dir=tmp_path).detect(np.zeros((50, 50, 3), dtype=np.uint8)) is None

    def test_none_image_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            FaceDetector(models_dir=tmp_path).detect(None)

    def test_age_gender_from_nets(self, tmp_path):
        class FakeNet:
            def __init__(self, scores):
                self.scores = np.array([scores], dtype=np.float32)

            def setInput(self, blob):
                self.blob = blob

            def forward(self):
                return self.scores

        detector = FaceDetector(models_dir=tmp_path)
        detector._nets_checked = True
        detector._gender_net = FakeNet([0.2, 0.8])
        detector._age_net = FakeNet([0.0, 0.9, 0.1, 0, 0, 0, 0, 0])

        image = np.full((300, 300, 3), 128, dtype=np.uint8)
        age, gender = detector.estimate_age_gender(image, {'x': 50.0, 'y': 50.0, 'width': 100.0, 'height': 120.0})

        assert (age, gender) == (5, 'female')
        assert detector._gender_net.blob.shape == (1, 3, 227, 227)


def test_module_level_detect_face(fake_dlib, monkeypatch, tmp_path):
    monkeypatch.setattr(face_detection, "detector", FaceDetector(models_dir=tmp_path))
    face = detect_face(np.zeros((480, 640, 3), dtype=np.uint8))
    assert face['box']['width'] == 250.0


class BlobScoringNet:
    """Stand-in cv2.dnn.Net: scores depend on the blob passed to setInput.

    Bright faces score as female / age bucket 1, dark faces as male / bucket 0.
    The pause between setInput and forward widens any unsynchronised window.
    """

    def __init__(self, outputs):
        self.outputs = outputs
        self.blob = None

    def setInput(self, blob):
        self.blob = blob

    def forward(self):
        blob = self.blob
        time.sleep(0.05)
        scores = np.zeros((1, self.outputs), dtype=np.float32)
        scores[0, 1 if float(self.blob.mean()) > 0 else 0] = 1.0
        assert self.blob is blob
        return scores


def run_in_threads(target, args_list, stagger=0.02):
    results = [None] * len(args_list)
    errors = []

    def worker(i, args):
        try:
            results[i] = target(*args)
        except Exception as e:  # surfaced through the errors list
            errors.append(e)

    threads = []
    for i, args in enumerate(args_list):
        thread = threading.Thread(target=worker, args=(i, args))
        thread.start()
        threads.append(thread)
        time.sleep(stagger)
    for thread in threads:
        thread.join()
    assert errors == []
    return results


BOX = {'x': 50.0, 'y': 50.0, 'width': 100.0, 'height': 120.0}


class TestAgeGenderConcurrency:
    @pytest.fixture
    def model_files(self, tmp_path):
        for name in (FaceDetector.AGE_PROTO, FaceDetector.AGE_MODEL,
                     FaceDetector.GENDER_PROTO, FaceDetector.GENDER_MODEL):
            (tmp_path / name).write_bytes(b"stub")
        return tmp_path

    def test_concurrent_first_use_waits_for_slow_load(self, monkeypatch, model_files):
        loads = []

        def slow_read(proto, model):
            loads.append(proto)
            time.sleep(0.2)
            return BlobScoringNet(8 if 'age' in proto else 2)

        monkeypatch.setattr(face_detection.cv2.dnn, "readNetFromCaffe", slow_read)
        detector = FaceDetector(models_dir=model_files)
        bright = np.full((300, 300, 3), 255, dtype=np.uint8)

        results = run_in_threads(detector.estimate_age_gender, [(bright, BOX), (bright, BOX)])

        assert results == [(5, 'female'), (5, 'female')]
        assert len(loads) == 2

    def test_concurrent_inference_keeps_each_request_input(self, model_files):
        detector = FaceDetector(models_dir=model_files)
        detector._nets_checked = True
        detector._gender_net = BlobScoringNet(2)
        detector._age_net = BlobScoringNet(8)

        bright = np.full((300, 300, 3), 255, dtype=np.uint8)
        dark = np.zeros((300, 300, 3), dtype=np.uint8)

        results = run_in_threads(
            detector.estimate_age_gender,
            [(bright, BOX), (dark, BOX), (bright, BOX), (dark, BOX)],
            stagger=0.01,
        )

        assert results == [(5, 'female'), (1, 'male'), (5, 'female'), (1, 'male')]
