"""Constantes de *keypoints* compartidas por los extractores de pose."""

from __future__ import annotations

from typing import Dict, Tuple

# Identificadores de los puntos que entiende el resto de la aplicación. Solo
# interesa el tren superior: cara y hombros.
NOSE = "nose"
LEFT_EYE = "left_eye"
RIGHT_EYE = "right_eye"
LEFT_EAR = "left_ear"
RIGHT_EAR = "right_ear"
LEFT_SHOULDER = "left_shoulder"
RIGHT_SHOULDER = "right_shoulder"

KEYPOINT_NAMES: Tuple[str, ...] = (
    NOSE,
    LEFT_EYE,
    RIGHT_EYE,
    LEFT_EAR,
    RIGHT_EAR,
    LEFT_SHOULDER,
    RIGHT_SHOULDER,
)

# Índices de Mediapipe Pose (33 landmarks) para cada identificador.
MEDIAPIPE_LANDMARK_COUNT: int = 33
MEDIAPIPE_INDEX_MAP: Dict[str, int] = {
    NOSE: 0,
    LEFT_EYE: 2,
    RIGHT_EYE: 5,
    LEFT_EAR: 7,
    RIGHT_EAR: 8,
    LEFT_SHOULDER: 11,
    RIGHT_SHOULDER: 12,
}

# Segmentos dibujados en la ventana de depuración.
UPPER_BODY_CONNECTIONS: Tuple[Tuple[str, str], ...] = (
    (LEFT_EAR, LEFT_EYE),
    (LEFT_EYE, NOSE),
    (NOSE, RIGHT_EYE),
    (RIGHT_EYE, RIGHT_EAR),
    (LEFT_SHOULDER, RIGHT_SHOULDER),
)

SPACE_INPUT = "input"
SPACE_FRAME = "frame"

__all__ = [
    "KEYPOINT_NAMES",
    "MEDIAPIPE_INDEX_MAP",
    "MEDIAPIPE_LANDMARK_COUNT",
    "UPPER_BODY_CONNECTIONS",
    "SPACE_INPUT",
    "SPACE_FRAME",
    "NOSE",
    "LEFT_EYE",
    "RIGHT_EYE",
    "LEFT_EAR",
    "RIGHT_EAR",
    "LEFT_SHOULDER",
    "RIGHT_SHOULDER",
]
