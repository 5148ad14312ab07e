# threshold_table.py

import logging
from typing import Dict, Optional

from config import (
    FALSE_NEGATIVE_DELTA,
    FALSE_POSITIVE_DELTA,
    THRESHOLD_MAX,
    THRESHOLD_MIN,
    TRUE_POSITIVE_DELTA,
    UNKNOWN_LABEL,
    RecognitionSettings,
)
from feedback_ledger import Feedback, FeedbackType, LearningStats

logger = logging.getLogger(__name__)


class AdaptiveThresholdTable:
    """
    Per-person acceptance thresholds that drift with feedback.

    Values live in LearningStats.adaptive_thresholds so they are persisted
    and reset together with the rest of the learning statistics.
    """

    def __init__(self, stats: LearningStats, settings: RecognitionSettings):
        self._stats = stats
        self._settings = settings

    @property
    def _thresholds(self) -> Dict[str, float]:
        return self._stats.adaptive_thresholds

    def threshold_for(self, name: Optional[str]) -> float:
        if name and name in self._thresholds:
            return self._thresholds[name]
        return self._settings.confidence_threshold

    def effective_threshold(self, name: Optional[str]) -> float:
        if self._settings.adaptive_learning:
            return self.threshold_for(name)
        return self._settings.confidence_threshold

    def apply_feedback(self, feedback: Feedback) -> Optional[float]:
        """
        Move the threshold of feedback.actual. Returns the new value, or None
        when adaptive learning is off.
        """
        if not self._settings.adaptive_learning:
            return None

        name = feedback.actual
        current = self._thresholds.setdefault(name, self._settings.confidence_threshold)
        updated = current

        if feedback.type == FeedbackType.CONFIRMED and feedback.predicted == name:
            updated = max(THRESHOLD_MIN, current - TRUE_POSITIVE_DELTA)
        elif feedback.type == FeedbackType.CORRECTED:
            if feedback.predicted == name:
                # false positive: make this name harder to accept
                updated = min(THRESHOLD_MAX, current + FALSE_POSITIVE_DELTA)
            elif feedback.predicted == UNKNOWN_LABEL:
                # false negative: make it easier
                updated = max(THRESHOLD_MIN, current - FALSE_NEGATIVE_DELTA)

        self._thresholds[name] = updated
        if updated != current:
            logger.info(f"Threshold for {name!r}: {current:.2f} -> {updated:.2f}")
        return updated

    def rename(self, old_name: str, new_name: str) -> bool:
        """Move a learned threshold to a new key. Returns True if one was moved."""
        if old_name not in self._thresholds or old_name == new_name:
            return False
        self._thresholds[new_name] = self._thresholds.pop(old_name)
        logger.info(f"Threshold for {old_name!r} now kept under {new_name!r}")
        return True

    def reset(self):
        self._thresholds.clear()

    def as_dict(self) -> Dict[str, float]:
        return dict(self._thresholds)
