# feedback_ledger.py

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from config import DATA_DIR, FEEDBACK_FILE, LEARNING_STATS_FILE, THRESHOLD_MAX, THRESHOLD_MIN
from errors import ConfigurationError
from persistence import load_json, save_json
from ResourcePath import data_file

logger = logging.getLogger(__name__)


class FeedbackType(str, Enum):
    CONFIRMED = "confirmed"
    CORRECTED = "corrected"


@dataclass
class Feedback:
    type: FeedbackType
    predicted: str
    actual: str
    confidence: float
    timestamp: float = field(default_factory=time.time)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def date_time(self) -> str:
        return datetime.fromtimestamp(self.timestamp).strftime("%Y-%m-%d %H:%M:%S")

    def describe(self) -> str:
        if self.type == FeedbackType.CONFIRMED:
            return f"Correctly identified as {self.predicted}"
        return f'Corrected from "{self.predicted}" to "{self.actual}"'

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "predicted": self.predicted,
            "actual": self.actual,
            "confidence": float(self.confidence),
            "timestamp": self.timestamp,
            "dateTime": self.date_time,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Feedback":
        return cls(
            type=FeedbackType(data["type"]),
            predicted=str(data["predicted"]),
            actual=str(data["actual"]),
            confidence=float(data.get("confidence", 0.0)),
            timestamp=float(data.get("timestamp", 0.0)),
            id=str(data.get("id") or uuid.uuid4().hex),
        )


@dataclass
class LearningStats:
    total_feedback: int = 0
    correct_count: int = 0
    adaptive_thresholds: Dict[str, float] = field(default_factory=dict)
    last_updated: float = field(default_factory=time.time)

    @property
    def accuracy(self) -> Optional[float]:
        """Share of confirmed feedback, or None before any feedback."""
        if self.total_feedback == 0:
            return None
        return self.correct_count / self.total_feedback

    def fold(self, feedback: Feedback):
        self.total_feedback += 1
        if feedback.type == FeedbackType.CONFIRMED:
            self.correct_count += 1
        self.last_updated = feedback.timestamp

    def clear(self):
        self.total_feedback = 0
        self.correct_count = 0
        self.adaptive_thresholds.clear()
        self.last_updated = time.time()

    def to_dict(self) -> dict:
        return {
            "totalFeedback": self.total_feedback,
            "correctPredictions": self.correct_count,
            "accuracy": self.accuracy,
            "adaptiveThresholds": dict(self.adaptive_thresholds),
            "lastUpdated": self.last_updated,
        }


class FeedbackLedger:
    """
    Append-only log of recognition outcomes plus the statistics folded from it.

    Totals and accuracy are always derived from the entries; only the
    adaptive thresholds and the last-updated time are read back from the
    statistics file.
    """

    def __init__(self, root_dir: str = DATA_DIR):
        self.feedback_path = data_file(root_dir, FEEDBACK_FILE)
        self.stats_path = data_file(root_dir, LEARNING_STATS_FILE)
        self._entries: List[Feedback] = self._load_entries()
        self.stats = self._load_stats()

    def _load_entries(self) -> List[Feedback]:
        try:
            data = load_json(self.feedback_path)
            if data is None:
                return []
            if not isinstance(data, list):
                raise ConfigurationError(f"{self.feedback_path} does not hold a list")
            return [Feedback.from_dict(raw) for raw in data]
        except (ConfigurationError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Error loading feedback database, starting empty: {e}")
            return []

    def _load_stats(self) -> LearningStats:
        stats = LearningStats()
        for entry in self._entries:
            stats.fold(entry)

        try:
            data = load_json(self.stats_path)
            if data is None:
                return stats
            if not isinstance(data, dict):
                raise ConfigurationError(f"{self.stats_path} does not hold an object")
            thresholds = data.get("adaptiveThresholds") or {}
            for name, value in thresholds.items():
                stats.adaptive_thresholds[str(name)] = min(THRESHOLD_MAX, max(THRESHOLD_MIN, float(value)))
            if data.get("lastUpdated") is not None:
                stats.last_updated = float(data["lastUpdated"])
        except (ConfigurationError, AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Error loading learning stats, using defaults: {e}")
            stats.adaptive_thresholds.clear()
        return stats

    def record(self, feedback: Feedback):
        self._entries.append(feedback)
        self.stats.fold(feedback)
        self.save()
        logger.info(f"Feedback recorded: {feedback.describe()} (confidence={feedback.confidence:.2f})")

    def history(self, n: int) -> List[Feedback]:
        if n <= 0:
            return []
        return list(reversed(self._entries[-n:]))

    def accuracy_history(self) -> List[float]:
        """Running accuracy after each feedback, oldest first."""
        points = []
        correct = 0
        for i, entry in enumerate(self._entries, start=1):
            if entry.type == FeedbackType.CONFIRMED:
                correct += 1
            points.append(correct / i)
        return points

    def entries(self) -> List[Feedback]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def reset(self):
        self._entries.clear()
        self.stats.clear()
        self.save()
        logger.info("Learning data reset")

    def save(self):
        save_json(self.feedback_path, [f.to_dict() for f in self._entries])
        save_json(self.stats_path, self.stats.to_dict())
