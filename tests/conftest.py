# tests/conftest.py
"""Utilidades comunes para la batería de pruebas."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

import numpy as np
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
root_str = str(PROJECT_ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

from posture_guard.B_pose_estimation.constants import SPACE_FRAME, SPACE_INPUT  # noqa: E402
from posture_guard.B_pose_estimation.estimators.base import LandmarkExtractor  # noqa: E402
from posture_guard.B_pose_estimation.types import Pose  # noqa: E402

REFERENCE_SIZE = (640, 480)


def _make_eye_pose(
    left_y: float,
    right_y: Optional[float] = None,
    *,
    confidence: float = 0.9,
    right_confidence: Optional[float] = None,
    space: str = SPACE_FRAME,
) -> Pose:
    """Pose con ambos ojos a la altura indicada (px del fotograma de referencia)."""

    right_y = left_y if right_y is None else right_y
    right_conf = confidence if right_confidence is None else right_confidence
    points = {
        "left_eye": (300.0, float(left_y), confidence),
        "right_eye": (340.0, float(right_y), right_conf),
    }
    if space == SPACE_INPUT:
        # Con ``resize_mode="stretch"`` la entrada normalizada coincide con el fotograma normalizado.
        width, height = REFERENCE_SIZE
        points = {name: (x / width, y / height, c) for name, (x, y, c) in points.items()}
    return Pose.from_points(points, space=space)


ScriptItem = Union[Pose, BaseException]


class _ScriptedExtractor(LandmarkExtractor):
    """Extractor falso que devuelve (o lanza) los elementos de un guion en orden.

    Cuando el guion se agota repite el último elemento.
    """

    def __init__(self, script: Sequence[ScriptItem] = ()) -> None:
        self.script = list(script)
        self.calls = 0
        self.loaded = False
        self.closed = False
        self.tensors: list = []

    def load(self) -> None:
        self.loaded = True

    def extract(self, tensor) -> Pose:
        self.tensors.append(tensor)
        self.calls += 1
        if not self.script:
            return Pose.empty()
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, BaseException):
            raise item
        return item

    def close(self) -> None:
        self.closed = True


def _make_input_poses(values: Iterable[float], **kwargs) -> list[Pose]:
    return [_make_eye_pose(value, space=SPACE_INPUT, **kwargs) for value in values]


@pytest.fixture
def blank_frame() -> np.ndarray:
    width, height = REFERENCE_SIZE
    return np.zeros((height, width, 3), dtype=np.uint8)


@pytest.fixture
def eye_pose():
    """Fábrica de poses con los dos ojos a una altura dada."""

    return _make_eye_pose


@pytest.fixture
def input_poses():
    """Fábrica de listas de poses en espacio de entrada (modo ``stretch``)."""

    return _make_input_poses


@pytest.fixture
def scripted_extractor() -> _ScriptedExtractor:
    """Extractor falso con guion vacío; cada prueba asigna ``script``."""

    return _ScriptedExtractor()
