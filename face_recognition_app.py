# face_recognition_app.py
# Main application class for face recognition

import logging
import time

import cv2

from config import (
    DATA_DIR,
    FRAME_HEIGHT,
    FRAME_INTERVAL_MS,
    FRAME_WIDTH,
    STATUS_FLASH_MS,
    RecognitionSettings,
)
from data_export import default_export_filename, export_to_file
from descriptor_store import DescriptorStore
from errors import FaceAppError, InputError, ResourceUnavailable
from face_model import FaceModel, crop_face
from feedback_ledger import FeedbackLedger
from recognition_session import RecognitionSession, top_expression

import tkinter as tk
from tkinter import filedialog, messagebox
from PIL import Image, ImageTk
from AddFaceDialog import AddFaceDialog
from CorrectionDialog import CorrectionDialog
from LearningStatsDialog import LearningStatsDialog, format_accuracy
from SettingsDialog import SettingsDialog

logger = logging.getLogger(__name__)

STATUS_COLORS = {
    "known": "#1e7e34",
    "unknown": "#856404",
    "error": "#c82333",
}


class FaceRecognitionApp:
    def __init__(self, root, camera_index: int = 0, data_dir: str = DATA_DIR):
        self.root = root
        self.root.title("Face Recognition")

        # --- Core components ---
        self.settings = RecognitionSettings()
        self.store = DescriptorStore(root_dir=data_dir)
        self.ledger = FeedbackLedger(root_dir=data_dir)
        self.session = RecognitionSession(self.store, self.ledger, self.settings)

        self.model = None
        self.resource_error = None
        try:
            self.model = FaceModel()
        except ResourceUnavailable as e:
            logger.error(str(e))
            self.resource_error = str(e)

        # Frame and detection shown on screen, used for face crops
        self.current_frame = None
        # Recognition is paused while a modal dialog is open so the open
        # result is not superseded underneath it
        self.paused = False
        self._status_hold_until = 0.0

        # --- Camera setup ---
        self.camera_index = camera_index
        self.cap = None
        self.camera_on = False

        # --- UI layout ---
        self.video_label = tk.Label(self.root)
        self.video_label.pack(side=tk.TOP, fill=tk.BOTH, expand=True)

        info_frame = tk.Frame(self.root)
        info_frame.pack(side=tk.TOP, fill=tk.X, padx=5)

        self.status_label = tk.Label(info_frame, text="Loading...", font=("TkDefaultFont", 14, "bold"))
        self.status_label.pack(side=tk.LEFT)
        self.score_label = tk.Label(info_frame, text="Learning: -")
        self.score_label.pack(side=tk.RIGHT, padx=5)
        self.confidence_label = tk.Label(info_frame, text="Confidence: -")
        self.confidence_label.pack(side=tk.RIGHT, padx=5)
        self.expression_label = tk.Label(info_frame, text="Expression: -")
        self.expression_label.pack(side=tk.RIGHT, padx=5)

        self.feedback_frame = tk.Frame(self.root)
        tk.Button(self.feedback_frame, text="Correct", command=self._on_correct, width=10).pack(side=tk.LEFT, padx=5)
        tk.Button(self.feedback_frame, text="Incorrect", command=self._on_incorrect, width=10).pack(side=tk.LEFT, padx=5)
        self._feedback_visible = False

        self.bottom_frame = tk.Frame(self.root)
        self.bottom_frame.pack(side=tk.BOTTOM, fill=tk.X)

        tk.Button(self.bottom_frame, text="Add Face", command=self.add_face).pack(side=tk.LEFT, padx=5, pady=5)
        tk.Button(self.bottom_frame, text="Learning Stats", command=self.show_learning_stats).pack(side=tk.LEFT, padx=5, pady=5)
        tk.Button(self.bottom_frame, text="Settings", command=self.show_settings).pack(side=tk.LEFT, padx=5, pady=5)
        self.camera_button = tk.Button(self.bottom_frame, text="Stop Camera", command=self.toggle_camera)
        self.camera_button.pack(side=tk.RIGHT, padx=5, pady=5)

        self.root.protocol("WM_DELETE_WINDOW", self.on_close)

        if self.resource_error:
            self._set_status(self.resource_error, "error")
        else:
            self._open_camera(self.camera_index)
            if self.camera_on:
                self._set_status("Ready", "known")

        self._refresh_learning_score()
        self.update_frame()

    # ---------- Camera ----------

    def _open_camera(self, index: int):
        if self.cap is not None:
            self.cap.release()

        self.cap = cv2.VideoCapture(index)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, FRAME_WIDTH)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, FRAME_HEIGHT)

        if not self.cap.isOpened():
            logger.error(f"Could not open camera index {index}")
            self._set_status("Unable to access camera", "error")
            self.cap = None
            self.camera_on = False
            return
        self.camera_on = True

    def toggle_camera(self):
        if self.camera_on:
            if self.cap is not None:
                self.cap.release()
                self.cap = None
            self.camera_on = False
            self.session.tick([])
            self._show_feedback_controls(False)
            self._set_status("Camera stopped", "error")
            self.camera_button.config(text="Start Camera")
        else:
            self._open_camera(self.camera_index)
            if self.camera_on:
                self.camera_button.config(text="Stop Camera")
                self._set_status("Camera started", "known")

    # ---------- Status display ----------

    def _set_status(self, text: str, kind: str = "known"):
        self.status_label.config(text=text, fg=STATUS_COLORS.get(kind, "black"))

    def _show_temporary_status(self, text: str, kind: str):
        self._set_status(text, kind)
        self._status_hold_until = time.time() + STATUS_FLASH_MS / 1000.0

    def _refresh_learning_score(self):
        self.score_label.config(text=f"Learning: {format_accuracy(self.session.accuracy)}")

    def _show_feedback_controls(self, show: bool):
        if show == self._feedback_visible:
            return
        if show:
            self.feedback_frame.pack(side=tk.TOP, before=self.bottom_frame, pady=2)
        else:
            self.feedback_frame.pack_forget()
        self._feedback_visible = show

    def _update_info(self, detection, result):
        holding = time.time() < self._status_hold_until

        if result is None:
            if not holding:
                self._set_status("No face detected", "unknown")
            self.expression_label.config(text="Expression: -")
            self.confidence_label.config(text="Confidence: -")
            self._show_feedback_controls(False)
            return

        if not holding:
            self._set_status(result.predicted_name, "known" if result.is_known else "unknown")

        expression = "-"
        if self.settings.show_expressions and detection.expressions:
            expression = top_expression(detection.expressions)[0].capitalize()
        self.expression_label.config(text=f"Expression: {expression}")
        self.confidence_label.config(text=f"Confidence: {round(result.confidence * 100)}%")
        self._show_feedback_controls(self.session.awaiting_feedback)

    # ---------- Frame loop ----------

    def update_frame(self):
        try:
            self._process_frame()
        except Exception:
            logger.exception("Frame update failed")
        finally:
            self.root.after(FRAME_INTERVAL_MS, self.update_frame)

    def _process_frame(self):
        if self.paused or self.model is None or not self.camera_on or self.cap is None:
            return

        success, frame = self.cap.read()
        if not success:
            return

        self.current_frame = frame.copy()

        try:
            detections = self.model.detect(frame)
            result = self.session.tick(detections)
        except Exception:
            logger.exception("Detection error")
            detections = []
            result = self.session.tick(detections)

        detection = detections[0] if detections else None
        if detection is not None:
            self._draw_face_box(frame, detection.bbox)
        self._update_info(detection, result)
        self._show_frame(frame)

    def _show_frame(self, frame):
        # OpenCV is BGR; convert to RGB
        frame_rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        imgtk = ImageTk.PhotoImage(image=Image.fromarray(frame_rgb))

        # Keep a reference to avoid garbage collection
        self.video_label.imgtk = imgtk
        self.video_label.configure(image=imgtk)

    @staticmethod
    def _draw_face_box(frame, bbox, corner: int = 20):
        left, top, right, bottom = bbox
        cv2.rectangle(frame, (left, top), (right, bottom), (0, 255, 0), 3)

        white = (255, 255, 255)
        for (x, y, dx, dy) in (
            (left, top, 1, 1),
            (right, top, -1, 1),
            (left, bottom, 1, -1),
            (right, bottom, -1, -1),
        ):
            cv2.line(frame, (x, y), (x + dx * corner, y), white, 4)
            cv2.line(frame, (x, y), (x, y + dy * corner), white, 4)

    def _current_face_crop(self):
        detection = self.session.current_detection
        if detection is None or self.current_frame is None:
            return None
        return crop_face(self.current_frame, detection.bbox)

    def _run_dialog(self, dialog):
        self.paused = True
        try:
            self.root.wait_window(dialog)
        finally:
            self.paused = False
        return getattr(dialog, "result", None)

    # ---------- Actions ----------

    def add_face(self):
        if self.session.current_detection is None:
            messagebox.showwarning("Add Face", "No face detected. Please ensure a face is visible in the camera.")
            return

        dialog = AddFaceDialog(
            self.root,
            face_thumbnail=self._current_face_crop(),
            name_exists=lambda name: name in self.store,
        )
        name = self._run_dialog(dialog)
        if name is None:
            return

        try:
            person = self.session.enroll(name)
        except FaceAppError as e:
            messagebox.showerror("Add Face", str(e))
            return
        self._show_temporary_status(f"Added {person.name} to database", "known")

    def _on_correct(self):
        try:
            self.session.confirm()
        except InputError as e:
            messagebox.showwarning("Feedback", str(e))
            return
        self._show_feedback_controls(False)
        self._refresh_learning_score()
        self._show_temporary_status("✓ Thanks for the feedback!", "known")

    def _on_incorrect(self):
        result = self.session.result
        if result is None:
            messagebox.showwarning("Feedback", "No recognition data available.")
            return

        self._show_feedback_controls(False)
        dialog = CorrectionDialog(
            self.root,
            predicted_name=result.predicted_name,
            known_names=self.store.names(),
            face_thumbnail=self._current_face_crop(),
        )
        name = self._run_dialog(dialog)
        if name is None:
            return

        try:
            feedback = self.session.correct(name)
        except FaceAppError as e:
            messagebox.showerror("Feedback", str(e))
            return
        self._refresh_learning_score()
        self._show_temporary_status(f"✓ Corrected to: {feedback.actual}", "known")

    def show_learning_stats(self):
        dialog = LearningStatsDialog(self.root, self.ledger, self.settings.confidence_threshold)
        self._run_dialog(dialog)

    def show_settings(self):
        dialog = SettingsDialog(
            self.root,
            self.settings,
            on_reset_learning=self.reset_learning,
            on_reset_all=self.reset_all,
            on_export=self.export_data,
            expressions_available=self.model is not None and self.model.supports_expressions,
        )
        self._run_dialog(dialog)

    def reset_learning(self):
        if not messagebox.askyesno(
            "Reset Learning",
            "Are you sure you want to reset all learning data? "
            "This will clear feedback history and adaptive thresholds.",
        ):
            return
        self.session.reset_learning()
        self._refresh_learning_score()
        self._show_temporary_status("Learning data reset", "error")

    def reset_all(self):
        if not messagebox.askyesno(
            "Reset All",
            "Are you sure you want to clear all face data AND learning data? This cannot be undone.",
        ):
            return
        self.session.reset_all()
        self._refresh_learning_score()
        self._show_temporary_status("All data cleared", "error")

    def export_data(self):
        path = filedialog.asksaveasfilename(
            title="Export Data",
            defaultextension=".json",
            initialfile=default_export_filename(),
            filetypes=[("JSON", "*.json")],
        )
        if not path:
            return
        if not export_to_file(self.store, self.ledger, path):
            messagebox.showerror("Export Data", f"Could not write {path}")

    def on_close(self):
        if self.cap is not None:
            self.cap.release()
        self.root.destroy()
