# main.py
import logging
import tkinter as tk

from face_recognition_app import FaceRecognitionApp


def main():
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    root = tk.Tk()
    app = FaceRecognitionApp(root, camera_index=0)
    root.mainloop()


if __name__ == "__main__":
    main()
