# AddFaceDialog.py
# Modal dialog for enrolling the face currently in view

import tkinter as tk
from tkinter import messagebox
from typing import Callable, Optional

import numpy as np

from thumbnail import center_over_parent, make_thumbnail


class AddFaceDialog(tk.Toplevel):
    """
    Modal dialog for saving the current face under a name.

    Displays:
    - Face thumbnail (crop of the current detection)
    - Text input for Name
    - Buttons: Save, Cancel

    `name_exists` is asked before saving so the user can confirm replacing
    an already enrolled person. `result` is the trimmed name, or None if
    cancelled.
    """

    def __init__(
        self,
        parent,
        face_thumbnail: Optional[np.ndarray],
        name_exists: Callable[[str], bool],
    ):
        super().__init__(parent)
        self.title("Add Face")
        self.result = None
        self._name_exists = name_exists

        self.transient(parent)
        self.grab_set()
        self.resizable(False, False)

        main_frame = tk.Frame(self, padx=15, pady=15)
        main_frame.pack(fill=tk.BOTH, expand=True)

        self.thumbnail_label = tk.Label(main_frame)
        self.thumbnail_label.pack(pady=(0, 10))
        self._set_thumbnail(face_thumbnail)

        name_frame = tk.Frame(main_frame)
        name_frame.pack(fill=tk.X, pady=5)

        tk.Label(name_frame, text="Name:", width=8, anchor="w").pack(side=tk.LEFT)
        self.name_var = tk.StringVar(value="")
        self.name_entry = tk.Entry(name_frame, width=25, textvariable=self.name_var)
        self.name_entry.pack(side=tk.LEFT, padx=(0, 5))

        self.validation_label = tk.Label(main_frame, text="", fg="red", height=1)
        self.validation_label.pack(fill=tk.X, pady=5)

        btn_frame = tk.Frame(main_frame)
        btn_frame.pack(fill=tk.X, pady=(10, 0))

        tk.Button(btn_frame, text="Save", command=self._on_save, width=8).pack(side=tk.RIGHT, padx=(5, 0))
        tk.Button(btn_frame, text="Cancel", command=self._on_cancel, width=8).pack(side=tk.RIGHT)

        self.protocol("WM_DELETE_WINDOW", self._on_cancel)
        self.name_entry.bind("<Return>", lambda e: self._on_save())
        self.bind("<Escape>", lambda e: self._on_cancel())

        self.name_entry.focus_set()
        center_over_parent(self, parent)

    def _set_thumbnail(self, face_thumbnail: Optional[np.ndarray]):
        self.photo_image = make_thumbnail(face_thumbnail, max_size=200)
        if self.photo_image is None:
            self.thumbnail_label.configure(
                text="No thumbnail\navailable",
                width=15,
                height=5,
                bg="#e0e0e0"
            )
            return
        self.thumbnail_label.configure(image=self.photo_image, text="")

    def _on_save(self):
        name = self.name_var.get().strip()
        if not name:
            self.validation_label.configure(text="Please enter a name for this person.")
            return

        if self._name_exists(name):
            replace = messagebox.askyesno(
                "Person Exists",
                f'A person named "{name}" already exists. Do you want to update their data?',
                parent=self,
            )
            if not replace:
                return

        self.result = name
        self.destroy()

    def _on_cancel(self):
        self.result = None
        self.destroy()
