# recognition_session.py
# One recognition decision per frame, plus the feedback that follows it.

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from config import UNKNOWN_LABEL, RecognitionSettings
from data_export import build_export
from descriptor_store import DescriptorStore, Person, normalize_name
from errors import ConfigurationError, InputError
from feedback_ledger import Feedback, FeedbackLedger, FeedbackType
from matching import Matcher
from threshold_table import AdaptiveThresholdTable

logger = logging.getLogger(__name__)


@dataclass
class FaceDetection:
    bbox: Tuple[int, int, int, int]  # (left, top, right, bottom)
    descriptor: np.ndarray
    expressions: Dict[str, float] = field(default_factory=dict)


def top_expression(expressions: Dict[str, float]) -> Tuple[str, float]:
    best = ("neutral", 0.0)
    for label, score in expressions.items():
        if score > best[1]:
            best = (label, float(score))
    return best


class SessionState(Enum):
    IDLE = "idle"
    DETECTED = "detected"
    MATCHED = "matched"
    AWAITING_FEEDBACK = "awaiting_feedback"


@dataclass
class RecognitionResult:
    predicted_name: str
    confidence: float
    descriptor: np.ndarray
    timestamp: float = field(default_factory=time.time)

    @property
    def is_known(self) -> bool:
        return self.predicted_name != UNKNOWN_LABEL


class RecognitionSession:
    """
    Drives Idle -> Detected -> Matched -> AwaitingFeedback once per frame.

    A new frame always replaces the open result, so feedback is optional.
    All state is owned by the store, ledger and settings passed in.
    """

    def __init__(
        self,
        store: DescriptorStore,
        ledger: FeedbackLedger,
        settings: Optional[RecognitionSettings] = None,
    ):
        self.store = store
        self.ledger = ledger
        self.settings = settings or RecognitionSettings()
        self.matcher = Matcher(store)
        self.thresholds = AdaptiveThresholdTable(ledger.stats, self.settings)

        self.state = SessionState.IDLE
        self.current_detection: Optional[FaceDetection] = None
        self.result: Optional[RecognitionResult] = None

    # ---------- Per-frame ----------

    def tick(self, detections: Sequence[FaceDetection]) -> Optional[RecognitionResult]:
        self.result = None
        if not detections:
            self.state = SessionState.IDLE
            self.current_detection = None
            return None

        detection = detections[0]
        self.current_detection = detection
        self.state = SessionState.DETECTED

        descriptor = np.asarray(detection.descriptor, dtype="float32").reshape(-1)
        try:
            match = self.matcher.match(descriptor)
        except ConfigurationError:
            self.state = SessionState.IDLE
            self.current_detection = None
            raise
        self.state = SessionState.MATCHED

        confidence = match.confidence
        candidate = match.person.name if match.person is not None else None
        threshold = self.thresholds.effective_threshold(candidate)

        if match.person is not None and confidence >= threshold:
            predicted = match.person.name
        else:
            predicted = UNKNOWN_LABEL

        self.result = RecognitionResult(
            predicted_name=predicted,
            confidence=confidence,
            descriptor=descriptor.copy(),
        )
        self.state = SessionState.AWAITING_FEEDBACK
        logger.debug(f"Recognized {predicted} (confidence={confidence:.3f}, threshold={threshold:.2f})")
        return self.result

    @property
    def awaiting_feedback(self) -> bool:
        return self.state == SessionState.AWAITING_FEEDBACK and self.result is not None

    # ---------- Feedback ----------

    def _open_result(self) -> RecognitionResult:
        if not self.awaiting_feedback:
            raise InputError("No recognition data available.")
        return self.result

    def _apply(self, feedback: Feedback) -> Feedback:
        self.ledger.record(feedback)
        if self.thresholds.apply_feedback(feedback) is not None:
            self.ledger.save()
        self.result = None
        self.state = SessionState.IDLE
        return feedback

    def confirm(self) -> Feedback:
        result = self._open_result()
        return self._apply(
            Feedback(
                type=FeedbackType.CONFIRMED,
                predicted=result.predicted_name,
                actual=result.predicted_name,
                confidence=result.confidence,
            )
        )

    def correct(self, actual_name: str) -> Feedback:
        result = self._open_result()
        actual = normalize_name(actual_name)

        existing = self.store.find(actual)
        if existing is None:
            self.store.enroll(actual, result.descriptor)
        else:
            actual = existing.name

        return self._apply(
            Feedback(
                type=FeedbackType.CORRECTED,
                predicted=result.predicted_name,
                actual=actual,
                confidence=result.confidence,
            )
        )

    # ---------- Enrollment and maintenance ----------

    def enroll(self, name: str) -> Person:
        name = normalize_name(name)
        if self.current_detection is None:
            raise InputError("No face detected. Please ensure a face is visible in the camera.")
        previous = self.store.find(name)
        person = self.store.enroll(name, self.current_detection.descriptor)
        if previous is not None and previous.name != person.name:
            # thresholds are keyed by the exact stored spelling
            if self.thresholds.rename(previous.name, person.name):
                self.ledger.save()
        return person

    def reset_learning(self):
        self.ledger.reset()
        self.result = None
        self.state = SessionState.IDLE

    def reset_all(self):
        self.store.clear()
        self.reset_learning()

    def export_data(self) -> dict:
        return build_export(self.store, self.ledger)

    @property
    def accuracy(self) -> Optional[float]:
        return self.ledger.stats.accuracy

    def recent_feedback(self, n: int) -> List[Feedback]:
        return self.ledger.history(n)
