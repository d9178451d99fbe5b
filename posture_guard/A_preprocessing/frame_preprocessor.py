"""Conversión de fotogramas de cámara a la entrada cuadrada del modelo de pose.

El preprocesado aplica, en este orden: validación, rotación fija, conversión a
RGB y redimensionado (con bandas negras o estirando). Cada tensor guarda la
transformación usada para que los *keypoints* del modelo puedan devolverse al
espacio del fotograma de referencia sin depender de la resolución de captura.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

from posture_guard.B_pose_estimation.constants import SPACE_FRAME, SPACE_INPUT
from posture_guard.B_pose_estimation.types import Pose
from posture_guard.core.errors import PreprocessError
from posture_guard.config.constants import RESIZE_LETTERBOX, RESIZE_MODES, SUPPORTED_ROTATIONS

logger = logging.getLogger(__name__)

_ROTATE_CODES = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}

_COLOR_CONVERSIONS = {
    1: cv2.COLOR_GRAY2RGB,
    3: cv2.COLOR_BGR2RGB,
    4: cv2.COLOR_BGRA2RGB,
}


def normalize_rotation_deg(value: int) -> int:
    """Valida ``value`` como una de las rotaciones admitidas por ``cv2.rotate``.

    A diferencia de los metadatos de vídeo, la rotación de la cámara se fija a
    mano en la configuración: un valor fuera de ``{0, 90, 180, 270}`` es un
    error del usuario y no se redondea en silencio.
    """

    rotation = int(value) % 360
    if rotation not in SUPPORTED_ROTATIONS or int(value) != rotation:
        raise ValueError(f"Unsupported rotation {value!r}; expected one of {SUPPORTED_ROTATIONS}")
    return rotation


@dataclass(frozen=True)
class FrameTransform:
    """Relación geométrica entre el fotograma rotado y la entrada del modelo."""

    source_width: int
    source_height: int
    input_size: int
    scale_x: float
    scale_y: float
    pad_x: int
    pad_y: int
    reference_width: int
    reference_height: int

    def to_frame_normalized(self, x: float, y: float) -> Tuple[float, float]:
        """Convierte coordenadas normalizadas de la entrada a ``[0, 1]`` del fotograma."""

        x_src = (float(x) * self.input_size - self.pad_x) / max(self.scale_x, 1e-9)
        y_src = (float(y) * self.input_size - self.pad_y) / max(self.scale_y, 1e-9)
        u = float(np.clip(x_src / max(self.source_width, 1), 0.0, 1.0))
        v = float(np.clip(y_src / max(self.source_height, 1), 0.0, 1.0))
        return u, v

    def to_reference(self, x: float, y: float) -> Tuple[float, float]:
        """Convierte coordenadas normalizadas de la entrada a píxeles de referencia."""

        u, v = self.to_frame_normalized(x, y)
        return u * self.reference_width, v * self.reference_height


@dataclass(frozen=True)
class InputTensor:
    """Imagen RGB ``uint8`` cuadrada lista para el modelo y su transformación."""

    image: np.ndarray
    transform: FrameTransform

    @property
    def size(self) -> int:
        return self.transform.input_size


def _resize_with_letterbox(image: np.ndarray, target: int) -> tuple[np.ndarray, float, float, int, int]:
    height, width = image.shape[:2]
    scale = min(target / width, target / height)
    new_w = min(max(int(round(width * scale)), 1), target)
    new_h = min(max(int(round(height * scale)), 1), target)
    resized = cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_LINEAR)

    x_offset = (target - new_w) // 2
    y_offset = (target - new_h) // 2
    canvas = np.zeros((target, target, 3), dtype=np.uint8)
    canvas[y_offset : y_offset + new_h, x_offset : x_offset + new_w] = resized
    # Escala efectiva por eje tras el redondeo: es la que invierte la transformación.
    return canvas, new_w / width, new_h / height, x_offset, y_offset


def _resize_stretch(image: np.ndarray, target: int) -> tuple[np.ndarray, float, float, int, int]:
    height, width = image.shape[:2]
    resized = cv2.resize(image, (target, target), interpolation=cv2.INTER_LINEAR)
    return resized, target / width, target / height, 0, 0


class FramePreprocessor:
    """Prepara fotogramas arbitrarios para un modelo de entrada cuadrada fija.

    La rotación, el tamaño de entrada y el modo de redimensionado se fijan al
    construir el objeto y no cambian entre fotogramas.
    """

    def __init__(
        self,
        input_size: int,
        *,
        rotation_deg: int = 0,
        resize_mode: str = RESIZE_LETTERBOX,
        reference_size: Tuple[int, int] = (640, 480),
    ) -> None:
        if int(input_size) <= 0:
            raise ValueError("input_size must be positive")
        if resize_mode not in RESIZE_MODES:
            raise ValueError(f"resize_mode must be one of {RESIZE_MODES}, got {resize_mode!r}")
        ref_w, ref_h = (int(v) for v in reference_size)
        if ref_w <= 0 or ref_h <= 0:
            raise ValueError("reference_size must be positive")
        self.input_size = int(input_size)
        self.rotation_deg = normalize_rotation_deg(rotation_deg)
        self.resize_mode = resize_mode
        self.reference_size = (ref_w, ref_h)

    @classmethod
    def from_config(cls, cfg) -> "FramePreprocessor":
        return cls(
            cfg.pose.model_input_size,
            rotation_deg=cfg.camera.rotation_deg,
            resize_mode=cfg.pose.resize_mode,
            reference_size=(cfg.camera.frame_width, cfg.camera.frame_height),
        )

    def _to_rgb(self, frame: np.ndarray) -> np.ndarray:
        if frame.ndim == 2:
            channels = 1
        elif frame.ndim == 3:
            channels = int(frame.shape[2])
        else:
            raise PreprocessError(f"Unsupported frame dimensionality: shape={frame.shape}")

        code = _COLOR_CONVERSIONS.get(channels)
        if code is None:
            raise PreprocessError(f"Unsupported channel count: {channels}")

        if frame.dtype != np.uint8:
            if not np.issubdtype(frame.dtype, np.number):
                raise PreprocessError(f"Unsupported frame dtype: {frame.dtype}")
            logger.debug("Casting %s frame to uint8", frame.dtype)
            frame = np.clip(frame, 0, 255).astype(np.uint8)
        if channels == 1 and frame.ndim == 3:
            frame = frame[:, :, 0]
        return cv2.cvtColor(np.ascontiguousarray(frame), code)

    def prepare(self, frame: np.ndarray) -> InputTensor:
        """Convierte ``frame`` en un :class:`InputTensor` o lanza :class:`PreprocessError`."""

        if not isinstance(frame, np.ndarray):
            raise PreprocessError(f"Frame must be a numpy array, got {type(frame).__name__}")
        if frame.ndim < 2 or frame.shape[0] == 0 or frame.shape[1] == 0:
            raise PreprocessError(f"Frame has zero area: shape={frame.shape}")

        rgb = self._to_rgb(frame)
        if self.rotation_deg:
            rgb = cv2.rotate(rgb, _ROTATE_CODES[self.rotation_deg])

        height, width = rgb.shape[:2]
        if self.resize_mode == RESIZE_LETTERBOX:
            image, scale_x, scale_y, pad_x, pad_y = _resize_with_letterbox(rgb, self.input_size)
        else:
            image, scale_x, scale_y, pad_x, pad_y = _resize_stretch(rgb, self.input_size)

        transform = FrameTransform(
            source_width=int(width),
            source_height=int(height),
            input_size=self.input_size,
            scale_x=float(scale_x),
            scale_y=float(scale_y),
            pad_x=int(pad_x),
            pad_y=int(pad_y),
            reference_width=self.reference_size[0],
            reference_height=self.reference_size[1],
        )
        return InputTensor(image=image, transform=transform)

    def to_frame_space(self, pose: Pose, tensor: Optional[InputTensor] = None, *, transform: Optional[FrameTransform] = None) -> Pose:
        """Devuelve ``pose`` (normalizada a la entrada) en píxeles de referencia."""

        if pose.space == SPACE_FRAME:
            return pose
        if pose.space != SPACE_INPUT:
            raise ValueError(f"Unknown pose space: {pose.space!r}")
        active = transform if transform is not None else (tensor.transform if tensor is not None else None)
        if active is None:
            raise ValueError("A tensor or transform is required to map the pose to frame space")
        return pose.map_coordinates(active.to_reference, space=SPACE_FRAME)


__all__ = ["FramePreprocessor", "FrameTransform", "InputTensor", "normalize_rotation_deg"]
