# persistence.py
# JSON file helpers for the three persisted records.

import json
import logging
import os

from errors import ConfigurationError

logger = logging.getLogger(__name__)


def load_json(path: str):
    """
    Read a JSON document. Returns None when the file does not exist.

    Raises ConfigurationError when the file exists but cannot be parsed.
    """
    if not os.path.exists(path):
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Could not read {path}: {e}") from e


def save_json(path: str, data) -> bool:
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        return True
    except (OSError, TypeError, ValueError):
        logger.exception(f"Error saving {path}")
        return False
