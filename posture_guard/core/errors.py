"""Domain-specific exceptions for the posture pipeline."""


class PostureGuardError(Exception):
    """Base exception for every error raised by the posture pipeline."""


class PreprocessError(PostureGuardError):
    """Raised when a camera frame cannot be turned into a model input.

    The frame is skipped and the previous posture state is kept.
    """


class InferenceError(PostureGuardError):
    """Base class for failures inside the landmark extractor."""


class TensorShapeError(InferenceError):
    """Raised when the extractor receives a tensor of the wrong shape or dtype.

    This is a programming error and is never swallowed by the pipeline.
    """


class InferenceBackendError(InferenceError):
    """Raised when the model backend fails on a single frame (transient)."""


class InferenceBackendUnavailable(PostureGuardError):
    """Raised when the backend failed too many consecutive frames to be usable."""
