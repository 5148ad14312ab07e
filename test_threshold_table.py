# test_threshold_table.py
"""Tests for the per-person adaptive threshold update rule."""

import unittest

from config import THRESHOLD_MAX, THRESHOLD_MIN, UNKNOWN_LABEL, RecognitionSettings
from errors import InputError
from feedback_ledger import Feedback, FeedbackType, LearningStats
from threshold_table import AdaptiveThresholdTable


def confirmed(name, predicted=None):
    return Feedback(type=FeedbackType.CONFIRMED, predicted=predicted or name, actual=name, confidence=0.8)


def corrected(predicted, actual):
    return Feedback(type=FeedbackType.CORRECTED, predicted=predicted, actual=actual, confidence=0.5)


class TestAdaptiveThresholdTable(unittest.TestCase):
    def setUp(self):
        self.settings = RecognitionSettings(confidence_threshold=0.6, adaptive_learning=True)
        self.stats = LearningStats()
        self.table = AdaptiveThresholdTable(self.stats, self.settings)

    def test_default_when_absent(self):
        self.assertEqual(self.table.threshold_for("Alice"), 0.6)
        self.assertEqual(self.table.threshold_for(None), 0.6)

    def test_default_follows_settings(self):
        self.settings.set_confidence_threshold(0.75)
        self.assertEqual(self.table.threshold_for("Alice"), 0.75)

    def test_true_positive_lowers(self):
        self.table.apply_feedback(confirmed("Alice"))
        self.assertAlmostEqual(self.table.threshold_for("Alice"), 0.58)

    def test_false_positive_raises(self):
        self.table.apply_feedback(corrected("Alice", "Alice"))
        self.assertAlmostEqual(self.table.threshold_for("Alice"), 0.65)

    def test_false_negative_lowers(self):
        self.table.apply_feedback(corrected(UNKNOWN_LABEL, "Alice"))
        self.assertAlmostEqual(self.table.threshold_for("Alice"), 0.57)

    def test_false_positive_then_false_negative(self):
        self.table.apply_feedback(corrected("Alice", "Alice"))
        self.table.apply_feedback(corrected(UNKNOWN_LABEL, "Alice"))
        self.assertAlmostEqual(self.table.threshold_for("Alice"), 0.62)

    def test_misidentified_as_other_person_initializes_only(self):
        self.table.apply_feedback(corrected("Bob", "Alice"))
        self.assertAlmostEqual(self.table.threshold_for("Alice"), 0.6)
        self.assertIn("Alice", self.table.as_dict())
        self.assertNotIn("Bob", self.table.as_dict())

    def test_initialized_from_current_default(self):
        self.settings.set_confidence_threshold(0.7)
        self.table.apply_feedback(confirmed("Alice"))
        self.assertAlmostEqual(self.table.threshold_for("Alice"), 0.68)

    def test_never_above_max(self):
        for _ in range(50):
            self.table.apply_feedback(corrected("Alice", "Alice"))
        self.assertAlmostEqual(self.table.threshold_for("Alice"), THRESHOLD_MAX)
        self.assertLessEqual(self.table.threshold_for("Alice"), THRESHOLD_MAX)

    def test_never_below_min(self):
        for i in range(50):
            fb = confirmed("Alice") if i % 2 else corrected(UNKNOWN_LABEL, "Alice")
            self.table.apply_feedback(fb)
        self.assertAlmostEqual(self.table.threshold_for("Alice"), THRESHOLD_MIN)
        self.assertGreaterEqual(self.table.threshold_for("Alice"), THRESHOLD_MIN)

    def test_disabled_learning_leaves_table_untouched(self):
        self.settings.adaptive_learning = False
        self.assertIsNone(self.table.apply_feedback(corrected("Alice", "Alice")))
        self.assertEqual(self.table.as_dict(), {})

    def test_effective_threshold_ignores_table_when_disabled(self):
        self.table.apply_feedback(corrected("Alice", "Alice"))
        self.settings.adaptive_learning = False
        self.assertEqual(self.table.effective_threshold("Alice"), 0.6)
        self.settings.adaptive_learning = True
        self.assertAlmostEqual(self.table.effective_threshold("Alice"), 0.65)

    def test_rename_moves_threshold(self):
        self.table.apply_feedback(corrected("Alice", "Alice"))

        self.assertTrue(self.table.rename("Alice", "alice"))

        self.assertAlmostEqual(self.table.threshold_for("alice"), 0.65)
        self.assertEqual(self.table.threshold_for("Alice"), 0.6)

    def test_rename_without_threshold_is_noop(self):
        self.assertFalse(self.table.rename("Alice", "alice"))
        self.assertEqual(self.table.as_dict(), {})

    def test_values_stored_in_learning_stats(self):
        self.table.apply_feedback(confirmed("Alice"))
        self.assertIn("Alice", self.stats.adaptive_thresholds)
        self.table.reset()
        self.assertEqual(self.stats.adaptive_thresholds, {})


class TestRecognitionSettings(unittest.TestCase):
    def test_threshold_out_of_range(self):
        settings = RecognitionSettings()
        with self.assertRaises(InputError):
            settings.set_confidence_threshold(1.5)
        self.assertEqual(settings.confidence_threshold, 0.6)


if __name__ == "__main__":
    unittest.main()
