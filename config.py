# config.py
# Configuration constants for the face recognition application.

from dataclasses import dataclass

from errors import InputError

# Recognition thresholds
DEFAULT_CONFIDENCE_THRESHOLD = 0.6
UNKNOWN_LABEL = "Unknown"

# Adaptive threshold bounds and per-feedback deltas.
# Empirical values; tunable without changing the update rule.
THRESHOLD_MIN = 0.30
THRESHOLD_MAX = 0.90
TRUE_POSITIVE_DELTA = 0.02
FALSE_POSITIVE_DELTA = 0.05
FALSE_NEGATIVE_DELTA = 0.03

# face_recognition (dlib) embedding size
DESCRIPTOR_DIM = 128

# Persistence
DATA_DIR = "data"
FACE_DATABASE_FILE = "face_database.json"
FEEDBACK_FILE = "feedback.json"
LEARNING_STATS_FILE = "learning_stats.json"

# Detection settings
DETECT_SCALE = 0.5
FRAME_WIDTH = 640
FRAME_HEIGHT = 480
FRAME_INTERVAL_MS = 10

# UI
HISTORY_LIMIT = 10
STATUS_FLASH_MS = 3000


@dataclass
class RecognitionSettings:
    """Operator settings, adjustable while the app is running."""

    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    show_expressions: bool = True
    adaptive_learning: bool = True

    def set_confidence_threshold(self, value: float):
        value = float(value)
        if not 0.0 <= value <= 1.0:
            raise InputError(f"Confidence threshold must be between 0 and 1, got {value}")
        self.confidence_threshold = value
