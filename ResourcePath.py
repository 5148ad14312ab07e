import os
import sys

# Directories that hold user data and must survive rebuilds of the executable
PERSISTENT_DIRS = ("data",)


def get_executable_dir() -> str:
    """Get the directory where the executable is located (for persistent data)"""
    if getattr(sys, 'frozen', False):
        return os.path.dirname(sys.executable)
    return os.path.abspath(".")


def resource_path(relative_path: str) -> str:
    """ Get absolute path to resource, works for dev and for PyInstaller """
    if os.path.isabs(relative_path):
        return relative_path

    first = relative_path.replace("\\", "/").split("/", 1)[0].lower()
    if first in PERSISTENT_DIRS:
        # Learned faces and feedback live next to the executable
        base_path = get_executable_dir()
    else:
        base_path = getattr(sys, "_MEIPASS", os.path.abspath("."))
    return os.path.join(base_path, relative_path)


def data_file(root_dir: str, filename: str) -> str:
    """Absolute path of a JSON file inside the data directory, creating the directory."""
    root = resource_path(root_dir)
    os.makedirs(root, exist_ok=True)
    return os.path.join(root, filename)
