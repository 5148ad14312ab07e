import tkinter as tk
from typing import List, Optional

import numpy as np

from thumbnail import center_over_parent, make_thumbnail


class CorrectionDialog(tk.Toplevel):
    """Ask who the face really was: pick an enrolled person or type a new name."""

    PLACEHOLDER = "Select correct person..."

    def __init__(self, parent, predicted_name: str, known_names: List[str],
                 face_thumbnail: Optional[np.ndarray] = None):
        super().__init__(parent)
        self.title("Correct Recognition")
        self.result = None

        self.transient(parent)
        self.grab_set()
        self.resizable(False, False)

        main_frame = tk.Frame(self, padx=15, pady=15)
        main_frame.pack(fill=tk.BOTH, expand=True)

        self.photo_image = make_thumbnail(face_thumbnail, max_size=150)
        if self.photo_image is not None:
            tk.Label(main_frame, image=self.photo_image).pack(pady=(0, 10))

        tk.Label(main_frame, text=f"Recognized as: {predicted_name}").pack(anchor="w")

        options = [self.PLACEHOLDER] + list(known_names)
        self.select_var = tk.StringVar(value=self.PLACEHOLDER)
        tk.OptionMenu(main_frame, self.select_var, *options).pack(fill=tk.X, pady=5)

        tk.Label(main_frame, text="...or enter a new name:").pack(anchor="w")
        self.name_var = tk.StringVar(value="")
        self.name_entry = tk.Entry(main_frame, width=30, textvariable=self.name_var)
        self.name_entry.pack(fill=tk.X, pady=5)

        self.validation_label = tk.Label(main_frame, text="", fg="red", height=1)
        self.validation_label.pack(fill=tk.X)

        btn_frame = tk.Frame(main_frame)
        btn_frame.pack(fill=tk.X, pady=(10, 0))
        tk.Button(btn_frame, text="Submit", command=self._on_submit, width=8).pack(side=tk.RIGHT, padx=(5, 0))
        tk.Button(btn_frame, text="Cancel", command=self._on_cancel, width=8).pack(side=tk.RIGHT)

        self.protocol("WM_DELETE_WINDOW", self._on_cancel)
        self.name_entry.bind("<Return>", lambda e: self._on_submit())
        self.bind("<Escape>", lambda e: self._on_cancel())

        self.name_entry.focus_set()
        center_over_parent(self, parent)

    def _on_submit(self):
        selected = self.select_var.get()
        if selected == self.PLACEHOLDER:
            selected = ""
        name = selected or self.name_var.get().strip()
        if not name:
            self.validation_label.configure(text="Please select or enter the correct name.")
            return
        self.result = name
        self.destroy()

    def _on_cancel(self):
        self.result = None
        self.destroy()
