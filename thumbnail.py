# thumbnail.py
# Face crop -> Tkinter image conversion shared by the dialogs.

from typing import Optional

import cv2
import numpy as np
from PIL import Image, ImageTk


def make_thumbnail(face_bgr: Optional[np.ndarray], max_size: int = 150) -> Optional[ImageTk.PhotoImage]:
    """Scale a BGR crop to fit max_size and wrap it for Tk. None if there is nothing to show."""
    if face_bgr is None or face_bgr.size == 0:
        return None

    if len(face_bgr.shape) == 3 and face_bgr.shape[2] == 3:
        rgb = cv2.cvtColor(face_bgr, cv2.COLOR_BGR2RGB)
    else:
        rgb = face_bgr

    h, w = rgb.shape[:2]
    scale = min(max_size / w, max_size / h)
    new_w = max(1, int(w * scale))
    new_h = max(1, int(h * scale))
    interpolation = cv2.INTER_AREA if scale < 1.0 else cv2.INTER_LINEAR
    rgb = cv2.resize(rgb, (new_w, new_h), interpolation=interpolation)

    return ImageTk.PhotoImage(image=Image.fromarray(rgb))


def center_over_parent(window, parent):
    window.update_idletasks()
    if parent is not None:
        x = parent.winfo_rootx() + parent.winfo_width() // 2 - window.winfo_width() // 2
        y = parent.winfo_rooty() + parent.winfo_height() // 2 - window.winfo_height() // 2
        window.geometry(f"+{x}+{y}")
