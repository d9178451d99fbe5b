"""API pública de extractores de *landmarks* disponibles en el paquete."""

from .base import LandmarkExtractor
from .mediapipe_estimators import MediaPipeLandmarkExtractor, landmarks_to_pose

__all__ = [
    "LandmarkExtractor",
    "MediaPipeLandmarkExtractor",
    "landmarks_to_pose",
]
