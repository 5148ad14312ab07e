import tkinter as tk
from typing import Callable

from config import RecognitionSettings
from thumbnail import center_over_parent

EXPRESSIONS_UNAVAILABLE = "Expressions are not available with the current face detector"


def expression_toggle_state(available: bool) -> str:
    return tk.NORMAL if available else tk.DISABLED


class SettingsDialog(tk.Toplevel):
    """Live-editing settings window. Changes apply to `settings` immediately."""

    def __init__(
        self,
        parent,
        settings: RecognitionSettings,
        on_reset_learning: Callable[[], None],
        on_reset_all: Callable[[], None],
        on_export: Callable[[], None],
        expressions_available: bool = True,
    ):
        super().__init__(parent)
        self.title("Settings")
        self.settings = settings

        self.transient(parent)
        self.grab_set()
        self.resizable(False, False)

        main_frame = tk.Frame(self, padx=15, pady=15)
        main_frame.pack(fill=tk.BOTH, expand=True)

        self.threshold_var = tk.DoubleVar(value=settings.confidence_threshold)
        tk.Scale(
            main_frame,
            label="Confidence threshold",
            from_=0.1,
            to=1.0,
            resolution=0.05,
            orient=tk.HORIZONTAL,
            length=250,
            variable=self.threshold_var,
            command=self._on_threshold,
        ).pack(fill=tk.X)

        self.expressions_var = tk.BooleanVar(value=settings.show_expressions)
        tk.Checkbutton(
            main_frame,
            text="Show expressions",
            variable=self.expressions_var,
            command=self._on_toggle,
            state=expression_toggle_state(expressions_available),
        ).pack(anchor="w", pady=(10, 0))
        if not expressions_available:
            tk.Label(main_frame, text=EXPRESSIONS_UNAVAILABLE, fg="#666").pack(anchor="w")

        self.adaptive_var = tk.BooleanVar(value=settings.adaptive_learning)
        tk.Checkbutton(
            main_frame,
            text="Adaptive learning",
            variable=self.adaptive_var,
            command=self._on_toggle,
        ).pack(anchor="w")

        btn_frame = tk.Frame(main_frame)
        btn_frame.pack(fill=tk.X, pady=(15, 0))
        tk.Button(btn_frame, text="Export Data", command=on_export).pack(side=tk.LEFT)
        tk.Button(btn_frame, text="Reset Learning", command=on_reset_learning).pack(side=tk.LEFT, padx=5)
        tk.Button(btn_frame, text="Reset All", fg="red", command=on_reset_all).pack(side=tk.LEFT)
        tk.Button(btn_frame, text="Close", command=self.destroy, width=8).pack(side=tk.RIGHT)

        self.protocol("WM_DELETE_WINDOW", self.destroy)
        self.bind("<Escape>", lambda e: self.destroy())
        center_over_parent(self, parent)

    def _on_threshold(self, _value):
        self.settings.set_confidence_threshold(self.threshold_var.get())

    def _on_toggle(self):
        self.settings.show_expressions = bool(self.expressions_var.get())
        self.settings.adaptive_learning = bool(self.adaptive_var.get())
