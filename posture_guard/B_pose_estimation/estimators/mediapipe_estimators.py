"""Extractor de *landmarks* basado en Mediapipe Pose."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Sequence

import numpy as np

from posture_guard.config.constants import MIN_DETECTION_CONFIDENCE, MIN_TRACKING_CONFIDENCE
from posture_guard.config.settings import DEFAULT_MODEL_INPUT_SIZE, MODEL_COMPLEXITY
from posture_guard.core.errors import InferenceBackendError, TensorShapeError

from ..constants import MEDIAPIPE_INDEX_MAP, SPACE_INPUT
from ..types import Keypoint, Pose
from .base import LandmarkExtractor

if TYPE_CHECKING:
    from posture_guard.A_preprocessing.frame_preprocessor import InputTensor

logger = logging.getLogger(__name__)


def _coerce(value: object) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def landmarks_to_pose(landmarks: Sequence[object]) -> Pose:
    """Convierte la lista de landmarks de Mediapipe en una :class:`Pose` nombrada.

    Mediapipe devuelve coordenadas normalizadas a la imagen de entrada y una
    ``visibility`` que usamos como confianza (recortada a ``[0, 1]``).
    """

    keypoints = {}
    for name, index in MEDIAPIPE_INDEX_MAP.items():
        if index >= len(landmarks):
            keypoints[name] = Keypoint.missing(name)
            continue
        lm = landmarks[index]
        visibility = _coerce(getattr(lm, "visibility", math.nan))
        confidence = float(np.clip(visibility, 0.0, 1.0)) if math.isfinite(visibility) else 0.0
        keypoints[name] = Keypoint(
            name=name,
            x=_coerce(getattr(lm, "x", math.nan)),
            y=_coerce(getattr(lm, "y", math.nan)),
            confidence=confidence,
        )
    return Pose(keypoints=keypoints, space=SPACE_INPUT)


class MediaPipeLandmarkExtractor(LandmarkExtractor):
    """Ejecuta el grafo ``Pose`` de Mediapipe sobre tensores RGB cuadrados.

    El grafo se crea una sola vez (en :meth:`load` o en la primera llamada) y
    se reutiliza en modo vídeo, de modo que Mediapipe pueda seguir al usuario
    entre fotogramas. ``graph_factory`` permite inyectar un grafo alternativo.
    """

    def __init__(
        self,
        input_size: int = DEFAULT_MODEL_INPUT_SIZE,
        *,
        model_complexity: int = MODEL_COMPLEXITY,
        min_detection_confidence: float = MIN_DETECTION_CONFIDENCE,
        min_tracking_confidence: float = MIN_TRACKING_CONFIDENCE,
        graph_factory: Optional[Callable[[], object]] = None,
    ) -> None:
        self.input_size = int(input_size)
        self.model_complexity = int(model_complexity)
        self.min_detection_confidence = float(min_detection_confidence)
        self.min_tracking_confidence = float(min_tracking_confidence)
        self._graph_factory = graph_factory
        self._graph: Optional[object] = None

    @classmethod
    def from_config(cls, cfg, **kwargs) -> "MediaPipeLandmarkExtractor":
        return cls(
            cfg.pose.model_input_size,
            model_complexity=cfg.pose.model_complexity,
            min_detection_confidence=cfg.pose.min_detection_confidence,
            min_tracking_confidence=cfg.pose.min_tracking_confidence,
            **kwargs,
        )

    def _create_graph(self) -> object:
        if self._graph_factory is not None:
            return self._graph_factory()
        from mediapipe.python.solutions import pose as mp_pose

        return mp_pose.Pose(
            static_image_mode=False,
            model_complexity=self.model_complexity,
            smooth_landmarks=True,
            enable_segmentation=False,
            min_detection_confidence=self.min_detection_confidence,
            min_tracking_confidence=self.min_tracking_confidence,
        )

    def load(self) -> None:
        if self._graph is None:
            self._graph = self._create_graph()
            logger.info(
                "Mediapipe pose graph loaded (complexity=%d, input=%dpx)",
                self.model_complexity,
                self.input_size,
            )

    def _validate(self, image: np.ndarray) -> None:
        expected = (self.input_size, self.input_size, 3)
        if not isinstance(image, np.ndarray):
            raise TensorShapeError(f"Expected a numpy array, got {type(image).__name__}")
        if image.shape != expected or image.dtype != np.uint8:
            raise TensorShapeError(
                f"Expected uint8 tensor of shape {expected}, got {image.dtype} {image.shape}"
            )

    def extract(self, tensor: "InputTensor") -> Pose:
        image = tensor.image
        self._validate(image)
        self.load()
        try:
            results = self._graph.process(image)  # type: ignore[union-attr]
        except Exception as exc:
            raise InferenceBackendError(f"Mediapipe inference failed: {exc}") from exc

        pose_landmarks = getattr(results, "pose_landmarks", None)
        if not pose_landmarks:
            return Pose.empty(space=SPACE_INPUT)
        landmarks: Iterable[object] = getattr(pose_landmarks, "landmark", ())
        return landmarks_to_pose(list(landmarks))

    def close(self) -> None:
        if self._graph is not None:
            close = getattr(self._graph, "close", None)
            if callable(close):
                close()
            self._graph = None


__all__ = ["MediaPipeLandmarkExtractor", "landmarks_to_pose"]
