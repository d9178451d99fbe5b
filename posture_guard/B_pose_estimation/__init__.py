"""Exportaciones principales del paquete de estimación de pose."""

from .constants import KEYPOINT_NAMES, MEDIAPIPE_INDEX_MAP, UPPER_BODY_CONNECTIONS
from .estimators import LandmarkExtractor, MediaPipeLandmarkExtractor
from .types import Keypoint, Pose

__all__ = [
    "Keypoint",
    "Pose",
    "KEYPOINT_NAMES",
    "MEDIAPIPE_INDEX_MAP",
    "UPPER_BODY_CONNECTIONS",
    "LandmarkExtractor",
    "MediaPipeLandmarkExtractor",
]
