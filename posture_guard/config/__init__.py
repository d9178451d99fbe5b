"""Reexportaciones para poder escribir ``from posture_guard import config``."""

from __future__ import annotations

from .constants import (
    APP_NAME,
    MIN_DETECTION_CONFIDENCE,
    MIN_TRACKING_CONFIDENCE,
    PROJECT_ROOT,
    RESIZE_LETTERBOX,
    RESIZE_STRETCH,
    SUPPORTED_ROTATIONS,
)
from .models import (
    CalibrationConfig,
    CameraConfig,
    Config,
    OverlayConfig,
    PoseConfig,
    PostureConfig,
)
from .settings import configure_environment
from .utils import from_yaml, load_default

__all__ = [
    # Models
    "Config",
    "CameraConfig",
    "PoseConfig",
    "CalibrationConfig",
    "PostureConfig",
    "OverlayConfig",

    # Utilities
    "load_default",
    "from_yaml",
    "configure_environment",

    # Constants
    "APP_NAME",
    "PROJECT_ROOT",
    "MIN_DETECTION_CONFIDENCE",
    "MIN_TRACKING_CONFIDENCE",
    "RESIZE_LETTERBOX",
    "RESIZE_STRETCH",
    "SUPPORTED_ROTATIONS",
]
