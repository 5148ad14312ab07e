# errors.py
# Error types shared by the recognition core and the UI.


class FaceAppError(Exception):
    """Base class for application errors."""


class ConfigurationError(FaceAppError):
    """Persisted data or descriptor shapes do not match what the app expects."""


class InputError(FaceAppError):
    """A user action was rejected before any state changed."""


class ResourceUnavailable(FaceAppError):
    """The camera or the face model could not be initialised."""
