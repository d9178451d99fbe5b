"""Modelos ``dataclass`` inmutables que describen la configuración del monitor."""
from __future__ import annotations
from dataclasses import dataclass, field, fields, is_dataclass, replace
from typing import Any, Dict, Optional, Tuple
import hashlib
import json

from posture_guard.B_pose_estimation.constants import KEYPOINT_NAMES

from .constants import (
    MIN_DETECTION_CONFIDENCE,
    MIN_TRACKING_CONFIDENCE,
    RESIZE_MODES,
    SUPPORTED_ROTATIONS,
)
from .settings import (
    DEBOUNCE_FRAMES,
    DEFAULT_CALIBRATION_FRAMES,
    DEFAULT_CALIBRATION_MAX_JITTER_PX,
    DEFAULT_CALIBRATION_MIN_CONFIDENCE,
    DEFAULT_CALIBRATION_TIMEOUT_FRAMES,
    DEFAULT_CAMERA_INDEX,
    DEFAULT_FRAME_HEIGHT,
    DEFAULT_FRAME_WIDTH,
    DEFAULT_INFERENCE_BUDGET_MS,
    DEFAULT_LANDMARK_MIN_CONFIDENCE,
    DEFAULT_MAX_CONSECUTIVE_FAILURES,
    DEFAULT_MAX_READ_FAILURES,
    DEFAULT_MIN_LANDMARKS,
    DEFAULT_MODEL_INPUT_SIZE,
    DEFAULT_RESIZE_MODE,
    DEFAULT_ROTATION_DEG,
    DEFAULT_SHOW_WINDOW,
    DEFAULT_TRACKED_LANDMARKS,
    DEFAULT_TRACKING_LOSS_FRAMES,
    FADE_SPEED,
    GOOD_POSTURE_DEVIATION,
    MAX_ALPHA,
    MODEL_COMPLEXITY,
)


@dataclass(frozen=True)
class CameraConfig:
    """Fuente de vídeo y geometría del fotograma de referencia."""
    index: int = DEFAULT_CAMERA_INDEX
    frame_width: int = DEFAULT_FRAME_WIDTH
    frame_height: int = DEFAULT_FRAME_HEIGHT
    rotation_deg: int = DEFAULT_ROTATION_DEG
    max_read_failures: int = DEFAULT_MAX_READ_FAILURES

    def __post_init__(self) -> None:
        if self.frame_width <= 0 or self.frame_height <= 0:
            raise ValueError("frame_width and frame_height must be positive")
        if self.rotation_deg not in SUPPORTED_ROTATIONS:
            raise ValueError(
                f"rotation_deg must be one of {SUPPORTED_ROTATIONS}, got {self.rotation_deg!r}"
            )


@dataclass(frozen=True)
class PoseConfig:
    """Interruptores para el preprocesado y la inferencia de pose."""
    model_input_size: int = DEFAULT_MODEL_INPUT_SIZE
    resize_mode: str = DEFAULT_RESIZE_MODE
    model_complexity: int = MODEL_COMPLEXITY
    min_detection_confidence: float = float(MIN_DETECTION_CONFIDENCE)
    min_tracking_confidence: float = float(MIN_TRACKING_CONFIDENCE)
    inference_budget_ms: float = DEFAULT_INFERENCE_BUDGET_MS
    max_consecutive_failures: int = DEFAULT_MAX_CONSECUTIVE_FAILURES

    def __post_init__(self) -> None:
        if self.model_input_size <= 0:
            raise ValueError("model_input_size must be positive")
        if self.resize_mode not in RESIZE_MODES:
            raise ValueError(f"resize_mode must be one of {RESIZE_MODES}, got {self.resize_mode!r}")
        if self.model_complexity not in (0, 1, 2):
            raise ValueError("model_complexity must be 0, 1 or 2")
        if self.max_consecutive_failures < 1:
            raise ValueError("max_consecutive_failures must be >= 1")


@dataclass(frozen=True)
class CalibrationConfig:
    """Criterio de estabilidad para fijar la línea base."""
    stable_frames: int = DEFAULT_CALIBRATION_FRAMES
    min_confidence: float = DEFAULT_CALIBRATION_MIN_CONFIDENCE
    max_jitter_px: float = DEFAULT_CALIBRATION_MAX_JITTER_PX
    timeout_frames: int = DEFAULT_CALIBRATION_TIMEOUT_FRAMES

    def __post_init__(self) -> None:
        if self.stable_frames < 1:
            raise ValueError("stable_frames must be >= 1")
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError("min_confidence must be within [0, 1]")
        if self.max_jitter_px < 0:
            raise ValueError("max_jitter_px must be >= 0")
        if self.timeout_frames < 1:
            raise ValueError("timeout_frames must be >= 1")


@dataclass(frozen=True)
class PostureConfig:
    """Umbrales y ventanas de *debounce* de la máquina de estados."""
    tracked_landmarks: Tuple[str, ...] = DEFAULT_TRACKED_LANDMARKS
    threshold_px: float = GOOD_POSTURE_DEVIATION
    debounce_frames: int = DEBOUNCE_FRAMES
    recovery_frames: Optional[int] = None
    min_confidence: float = DEFAULT_LANDMARK_MIN_CONFIDENCE
    min_landmarks: int = DEFAULT_MIN_LANDMARKS
    tracking_loss_frames: int = DEFAULT_TRACKING_LOSS_FRAMES

    def __post_init__(self) -> None:
        # YAML entrega listas; las normalizamos a tupla para mantener la inmutabilidad.
        object.__setattr__(self, "tracked_landmarks", tuple(self.tracked_landmarks))
        if not self.tracked_landmarks:
            raise ValueError("tracked_landmarks must not be empty")
        unknown = [name for name in self.tracked_landmarks if name not in KEYPOINT_NAMES]
        if unknown:
            raise ValueError(f"Unknown tracked_landmarks {unknown}; expected names from {KEYPOINT_NAMES}")
        if self.threshold_px <= 0:
            raise ValueError("threshold_px must be greater than 0")
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError("min_confidence must be within [0, 1]")
        if self.debounce_frames < 1:
            raise ValueError("debounce_frames must be >= 1")
        if self.recovery_frames is not None and self.recovery_frames < 1:
            raise ValueError("recovery_frames must be >= 1")
        if not 1 <= self.min_landmarks <= len(self.tracked_landmarks):
            raise ValueError("min_landmarks must be between 1 and the number of tracked landmarks")
        if self.tracking_loss_frames < 0:
            raise ValueError("tracking_loss_frames must be >= 0")

    @property
    def effective_recovery_frames(self) -> int:
        """Ventana de recuperación BAD → GOOD (por defecto la misma que la de entrada)."""
        return self.debounce_frames if self.recovery_frames is None else self.recovery_frames


@dataclass(frozen=True)
class OverlayConfig:
    """Parámetros visuales del velo de aviso y de la ventana de depuración."""
    max_alpha: int = MAX_ALPHA
    fade_speed: int = FADE_SPEED
    show_window: bool = DEFAULT_SHOW_WINDOW

    def __post_init__(self) -> None:
        if not 0 <= self.max_alpha <= 255:
            raise ValueError("max_alpha must be within [0, 255]")
        if self.fade_speed < 1:
            raise ValueError("fade_speed must be >= 1")


@dataclass(frozen=True)
class Config:
    """Configuración de alto nivel consumida por la *pipeline* completa."""
    camera: CameraConfig = field(default_factory=CameraConfig)
    pose: PoseConfig = field(default_factory=PoseConfig)
    calibration: CalibrationConfig = field(default_factory=CalibrationConfig)
    posture: PostureConfig = field(default_factory=PostureConfig)
    overlay: OverlayConfig = field(default_factory=OverlayConfig)

    # --- Serialisation helpers -------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Entrega la configuración como diccionario de Python."""
        return _dataclass_to_dict(self)

    def with_updates(self, updates: Dict[str, Any]) -> "Config":
        """Devuelve una copia con ``updates`` (diccionario anidado) aplicados."""
        return _merge_dataclass(self, updates)

    # --- Fingerprint -----------------------------------------------------------
    def fingerprint(self) -> str:
        """Calcula un hash SHA1 de los parámetros que afectan a la decisión."""
        payload = {
            "pose": _dataclass_to_dict(self.pose),
            "calibration": _dataclass_to_dict(self.calibration),
            "posture": _dataclass_to_dict(self.posture),
        }
        encoded = json.dumps(payload, sort_keys=True, ensure_ascii=False).encode("utf-8")
        return hashlib.sha1(encoded).hexdigest()


# --- Internal utilities -------------------------------------------------------

def _dataclass_to_dict(obj: Any) -> Any:
    """Convierte recursivamente ``dataclasses`` (y anidados) en diccionarios."""
    if is_dataclass(obj):
        return {f.name: _dataclass_to_dict(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, dict):
        return {key: _dataclass_to_dict(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_dataclass_to_dict(value) for value in obj]
    return obj


def _merge_dataclass(instance: Any, updates: Dict[str, Any]) -> Any:
    """Crea una copia de ``instance`` con ``updates`` respetando los límites de cada ``dataclass``."""
    changes: Dict[str, Any] = {}
    known = {f.name for f in fields(instance)}
    for key, value in updates.items():
        if key not in known:
            continue
        current = getattr(instance, key)
        if is_dataclass(current) and isinstance(value, dict):
            changes[key] = _merge_dataclass(current, value)
        else:
            changes[key] = value
    return replace(instance, **changes)
