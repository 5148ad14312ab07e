# face_model.py
# Face detection and descriptor extraction on top of face_recognition.

import logging
from typing import List, Tuple

import cv2
import numpy as np

from config import DETECT_SCALE
from errors import ResourceUnavailable
from recognition_session import FaceDetection

logger = logging.getLogger(__name__)


class FaceModel:
    """
    Per-frame face detector + 128-d descriptor extractor.

    face_recognition does not classify expressions, so every detection
    carries an empty expressions mapping.
    """

    supports_expressions = False

    def __init__(self, scale: float = DETECT_SCALE, model: str = "hog"):
        try:
            import face_recognition
        except ImportError as e:
            raise ResourceUnavailable(f"Failed to load face detection models: {e}") from e
        self._fr = face_recognition
        self.scale = scale
        self.model = model
        logger.info(f"Face model ready (detector={model}, scale={scale})")

    def detect(self, frame_bgr: np.ndarray) -> List[FaceDetection]:
        if frame_bgr is None or frame_bgr.size == 0:
            return []

        img_small = cv2.resize(frame_bgr, (0, 0), fx=self.scale, fy=self.scale)
        img_small_rgb = cv2.cvtColor(img_small, cv2.COLOR_BGR2RGB)

        face_locations = self._fr.face_locations(
            img_small_rgb,
            number_of_times_to_upsample=1,
            model=self.model,
        )
        if not face_locations:
            return []
        face_encodings = self._fr.face_encodings(img_small_rgb, face_locations)

        up = 1 / self.scale
        detections = []
        for (top, right, bottom, left), encoding in zip(face_locations, face_encodings):
            bbox = (int(left * up), int(top * up), int(right * up), int(bottom * up))
            detections.append(
                FaceDetection(bbox=bbox, descriptor=np.array(encoding, dtype="float32"))
            )
        return detections


def crop_face(frame_bgr: np.ndarray, bbox: Tuple[int, int, int, int], padding: int = 20) -> np.ndarray:
    """Face region with some padding, clipped to the frame."""
    h, w = frame_bgr.shape[:2]
    left, top, right, bottom = bbox
    return frame_bgr[
        max(0, top - padding):min(h, bottom + padding),
        max(0, left - padding):min(w, right + padding),
    ]
