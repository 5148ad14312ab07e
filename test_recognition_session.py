# test_recognition_session.py
"""Scenario tests for the per-frame recognition session and feedback flow."""

import shutil
import tempfile
import unittest

import numpy as np

from config import UNKNOWN_LABEL, RecognitionSettings
from descriptor_store import DescriptorStore
from errors import ConfigurationError, InputError
from feedback_ledger import FeedbackLedger, FeedbackType
from recognition_session import FaceDetection, RecognitionSession, SessionState, top_expression


class TestRecognitionSession(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.settings = RecognitionSettings(confidence_threshold=0.6, adaptive_learning=True)
        self.store = DescriptorStore(root_dir=self.temp_dir)
        self.ledger = FeedbackLedger(root_dir=self.temp_dir)
        self.session = RecognitionSession(self.store, self.ledger, self.settings)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _create_fake_embedding(self, seed=0):
        """Create a fake 128-dimensional embedding for testing."""
        np.random.seed(seed)
        return np.random.rand(128).astype("float32")

    def _detection(self, embedding, bbox=(100, 100, 200, 200)):
        return FaceDetection(bbox=bbox, descriptor=embedding)

    def test_no_detection_is_idle(self):
        result = self.session.tick([])
        self.assertIsNone(result)
        self.assertEqual(self.session.state, SessionState.IDLE)
        self.assertIsNone(self.session.current_detection)

    def test_empty_store_is_unknown_with_zero_confidence(self):
        result = self.session.tick([self._detection(self._create_fake_embedding(1))])
        self.assertEqual(result.predicted_name, UNKNOWN_LABEL)
        self.assertEqual(result.confidence, 0.0)
        self.assertEqual(self.session.state, SessionState.AWAITING_FEEDBACK)

    def test_exact_match_is_recognized(self):
        v = self._create_fake_embedding(2)
        self.store.enroll("Alice", v)

        result = self.session.tick([self._detection(v)])

        self.assertEqual(result.predicted_name, "Alice")
        self.assertAlmostEqual(result.confidence, 1.0)
        self.assertTrue(result.is_known)
        np.testing.assert_array_equal(result.descriptor, v)

    def test_below_threshold_is_unknown(self):
        v = np.zeros(128, dtype="float32")
        self.store.enroll("Alice", v)
        query = v.copy()
        query[0] = 0.5  # distance 0.5 -> confidence 0.5 < 0.6

        result = self.session.tick([self._detection(query)])
        self.assertEqual(result.predicted_name, UNKNOWN_LABEL)
        self.assertAlmostEqual(result.confidence, 0.5)

    def test_adaptive_threshold_changes_decision(self):
        v = np.zeros(128, dtype="float32")
        self.store.enroll("Alice", v)
        query = v.copy()
        query[0] = 0.45  # confidence 0.55

        self.assertEqual(self.session.tick([self._detection(query)]).predicted_name, UNKNOWN_LABEL)

        # Two false negatives bring Alice's threshold to 0.54
        self.session.correct("Alice")
        self.session.tick([self._detection(query)])
        self.session.correct("Alice")

        self.assertEqual(self.session.tick([self._detection(query)]).predicted_name, "Alice")

        # With adaptive learning off the global threshold applies again
        self.settings.adaptive_learning = False
        self.assertEqual(self.session.tick([self._detection(query)]).predicted_name, UNKNOWN_LABEL)

    def test_only_first_detection_is_used(self):
        a = self._create_fake_embedding(3)
        b = self._create_fake_embedding(4)
        self.store.enroll("Alice", a)
        self.store.enroll("Bob", b)

        result = self.session.tick([self._detection(b), self._detection(a)])
        self.assertEqual(result.predicted_name, "Bob")

    def test_new_detection_supersedes_open_result(self):
        first = self.session.tick([self._detection(self._create_fake_embedding(5))])
        second = self.session.tick([self._detection(self._create_fake_embedding(6))])
        self.assertIsNot(first, second)
        self.assertIs(self.session.result, second)
        self.assertEqual(len(self.ledger), 0)

    def test_idle_frame_discards_open_result(self):
        self.session.tick([self._detection(self._create_fake_embedding(5))])
        self.session.tick([])
        with self.assertRaises(InputError):
            self.session.confirm()

    def test_confirm_records_and_returns_to_idle(self):
        v = self._create_fake_embedding(7)
        self.store.enroll("Alice", v)
        self.session.tick([self._detection(v)])

        feedback = self.session.confirm()

        self.assertEqual(feedback.type, FeedbackType.CONFIRMED)
        self.assertEqual(feedback.predicted, "Alice")
        self.assertEqual(feedback.actual, "Alice")
        self.assertEqual(self.session.state, SessionState.IDLE)
        self.assertEqual(self.session.accuracy, 1.0)
        self.assertAlmostEqual(self.session.thresholds.threshold_for("Alice"), 0.58)

    def test_feedback_consumes_result(self):
        self.session.tick([self._detection(self._create_fake_embedding(8))])
        self.session.confirm()
        with self.assertRaises(InputError):
            self.session.confirm()
        self.assertEqual(len(self.ledger), 1)

    def test_feedback_without_result_rejected(self):
        with self.assertRaises(InputError):
            self.session.correct("Alice")
        self.assertEqual(len(self.ledger), 0)
        self.assertEqual(len(self.store), 0)

    def test_false_positive_then_false_negative_thresholds(self):
        v = self._create_fake_embedding(9)
        self.store.enroll("Alice", v)

        self.session.tick([self._detection(v)])
        self.session.correct("Alice")
        self.assertAlmostEqual(self.session.thresholds.threshold_for("Alice"), 0.65)

        query = v.copy()
        query[0] += 0.5  # confidence 0.5, below 0.65
        self.assertEqual(self.session.tick([self._detection(query)]).predicted_name, UNKNOWN_LABEL)
        self.session.correct("Alice")
        self.assertAlmostEqual(self.session.thresholds.threshold_for("Alice"), 0.62)

    def test_correction_with_new_name_enrolls(self):
        v = self._create_fake_embedding(10)
        self.session.tick([self._detection(v)])

        feedback = self.session.correct("  Carol ")

        self.assertEqual(feedback.actual, "Carol")
        self.assertEqual(feedback.predicted, UNKNOWN_LABEL)
        self.assertIn("Carol", self.store)

        result = self.session.tick([self._detection(v)])
        self.assertEqual(result.predicted_name, "Carol")

    def test_correction_to_existing_name_does_not_reenroll(self):
        a = self._create_fake_embedding(11)
        self.store.enroll("Alice", a)
        before = self.store.find("Alice")

        self.session.tick([self._detection(self._create_fake_embedding(12))])
        feedback = self.session.correct("alice")

        self.assertEqual(feedback.actual, "Alice")
        self.assertEqual(len(self.store), 1)
        self.assertEqual(self.store.find("Alice").id, before.id)

    def test_correction_empty_name_rejected(self):
        self.session.tick([self._detection(self._create_fake_embedding(13))])
        with self.assertRaises(InputError):
            self.session.correct("  ")
        self.assertTrue(self.session.awaiting_feedback)
        self.assertEqual(len(self.ledger), 0)

    def test_enroll_requires_detection(self):
        with self.assertRaises(InputError):
            self.session.enroll("Alice")
        self.assertEqual(len(self.store), 0)

    def test_enroll_current_detection(self):
        v = self._create_fake_embedding(14)
        self.session.tick([self._detection(v)])
        self.session.enroll("Dave")
        self.assertEqual(self.session.tick([self._detection(v)]).predicted_name, "Dave")

    def test_wrong_dimension_detection_returns_to_idle(self):
        self.store.enroll("Alice", self._create_fake_embedding(18))
        with self.assertRaises(ConfigurationError):
            self.session.tick([self._detection(np.zeros(64, dtype="float32"))])

        self.assertEqual(self.session.state, SessionState.IDLE)
        self.assertIsNone(self.session.current_detection)
        self.assertIsNone(self.session.result)

    def test_reenroll_with_new_case_keeps_learned_threshold(self):
        v = self._create_fake_embedding(19)
        self.store.enroll("Alice", v)
        self.session.tick([self._detection(v)])
        self.session.correct("Alice")
        self.assertAlmostEqual(self.session.thresholds.threshold_for("Alice"), 0.65)

        self.session.tick([self._detection(v)])
        self.session.enroll("alice")

        self.assertEqual(self.store.names(), ["alice"])
        self.assertAlmostEqual(self.session.thresholds.threshold_for("alice"), 0.65)
        self.assertNotIn("Alice", self.session.thresholds.as_dict())

        reloaded = FeedbackLedger(root_dir=self.temp_dir)
        self.assertAlmostEqual(reloaded.stats.adaptive_thresholds["alice"], 0.65)

    def test_reset_learning_keeps_faces(self):
        v = self._create_fake_embedding(15)
        self.store.enroll("Alice", v)
        self.session.tick([self._detection(v)])
        self.session.confirm()

        self.session.reset_learning()

        self.assertEqual(len(self.ledger), 0)
        self.assertEqual(self.session.thresholds.as_dict(), {})
        self.assertEqual(len(self.store), 1)

    def test_reset_all(self):
        v = self._create_fake_embedding(16)
        self.store.enroll("Alice", v)
        self.session.tick([self._detection(v)])
        self.session.confirm()

        self.session.reset_all()

        self.assertEqual(len(self.store), 0)
        self.assertEqual(len(self.ledger), 0)
        self.assertIsNone(self.session.accuracy)

    def test_thresholds_survive_restart(self):
        v = self._create_fake_embedding(17)
        self.store.enroll("Alice", v)
        self.session.tick([self._detection(v)])
        self.session.correct("Alice")

        ledger = FeedbackLedger(root_dir=self.temp_dir)
        session = RecognitionSession(DescriptorStore(root_dir=self.temp_dir), ledger, self.settings)
        self.assertAlmostEqual(session.thresholds.threshold_for("Alice"), 0.65)


class TestTopExpression(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(top_expression({}), ("neutral", 0.0))

    def test_picks_max(self):
        self.assertEqual(top_expression({"happy": 0.7, "sad": 0.2})[0], "happy")


if __name__ == "__main__":
    unittest.main()
