import tkinter as tk
from typing import List

from config import HISTORY_LIMIT
from feedback_ledger import FeedbackLedger, FeedbackType
from thumbnail import center_over_parent

CHART_WIDTH = 400
CHART_HEIGHT = 200
CHART_PADDING = 40


def format_accuracy(accuracy) -> str:
    return "-" if accuracy is None else f"{round(accuracy * 100)}%"


class LearningStatsDialog(tk.Toplevel):
    """Totals, accuracy-over-time chart and the most recent feedback."""

    def __init__(self, parent, ledger: FeedbackLedger, current_threshold: float):
        super().__init__(parent)
        self.title("Learning Statistics")

        self.transient(parent)
        self.grab_set()

        stats = ledger.stats
        main_frame = tk.Frame(self, padx=15, pady=15)
        main_frame.pack(fill=tk.BOTH, expand=True)

        grid = tk.Frame(main_frame)
        grid.pack(fill=tk.X)
        rows = [
            ("Total feedback", str(stats.total_feedback)),
            ("Correct predictions", str(stats.correct_count)),
            ("Accuracy", format_accuracy(stats.accuracy)),
            ("Current threshold", f"{current_threshold:.2f}"),
        ]
        for i, (label, value) in enumerate(rows):
            tk.Label(grid, text=f"{label}:", anchor="w").grid(row=i, column=0, sticky="w")
            tk.Label(grid, text=value, anchor="e").grid(row=i, column=1, sticky="e", padx=(10, 0))

        self.chart = tk.Canvas(main_frame, width=CHART_WIDTH, height=CHART_HEIGHT, bg="white")
        self.chart.pack(pady=10)
        self._draw_chart(ledger.accuracy_history())

        tk.Label(main_frame, text="Recent feedback", anchor="w").pack(fill=tk.X)
        history = tk.Listbox(main_frame, width=60, height=HISTORY_LIMIT)
        history.pack(fill=tk.BOTH, expand=True)

        recent = ledger.history(HISTORY_LIMIT)
        if not recent:
            history.insert(tk.END, "No feedback recorded yet.")
        for i, feedback in enumerate(recent):
            history.insert(tk.END, f"{feedback.date_time}  {feedback.describe()}")
            color = "#1e7e34" if feedback.type == FeedbackType.CONFIRMED else "#c82333"
            history.itemconfig(i, fg=color)

        tk.Button(main_frame, text="Close", command=self.destroy, width=8).pack(side=tk.RIGHT, pady=(10, 0))
        self.protocol("WM_DELETE_WINDOW", self.destroy)
        self.bind("<Escape>", lambda e: self.destroy())
        center_over_parent(self, parent)

    def _draw_chart(self, points: List[float]):
        c = self.chart
        if len(points) < 2:
            c.create_text(CHART_WIDTH / 2, CHART_HEIGHT / 2, text="Not enough data to display chart", fill="#666")
            return

        chart_w = CHART_WIDTH - CHART_PADDING * 2
        chart_h = CHART_HEIGHT - CHART_PADDING * 2
        bottom = CHART_HEIGHT - CHART_PADDING

        c.create_line(CHART_PADDING, CHART_PADDING, CHART_PADDING, bottom, fill="#ddd")
        c.create_line(CHART_PADDING, bottom, CHART_WIDTH - CHART_PADDING, bottom, fill="#ddd")

        coords = []
        for i, point in enumerate(points):
            coords.append(CHART_PADDING + (i / (len(points) - 1)) * chart_w)
            coords.append(bottom - point * chart_h)
        c.create_line(*coords, fill="#007bff", width=2)

        c.create_text(CHART_WIDTH / 2, 20, text="Learning Progress Over Time", fill="#666")
        c.create_text(CHART_PADDING, CHART_HEIGHT - 10, text="0%", fill="#666")
        c.create_text(CHART_PADDING, 25, text="100%", fill="#666")
