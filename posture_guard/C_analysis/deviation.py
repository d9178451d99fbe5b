"""Cálculo de la desviación vertical respecto a la línea base."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from posture_guard.B_pose_estimation.constants import SPACE_FRAME
from posture_guard.B_pose_estimation.types import Pose
from posture_guard.config.settings import (
    DEFAULT_LANDMARK_MIN_CONFIDENCE,
    DEFAULT_MIN_LANDMARKS,
    DEFAULT_TRACKED_LANDMARKS,
)

from .calibration import Baseline


@dataclass(frozen=True)
class DeviationSample:
    """Caída media (px de referencia) de los *landmarks* fiables.

    ``value`` es positivo cuando los puntos están por debajo de la línea base
    (el eje ``y`` crece hacia abajo). Una muestra inválida nunca lleva número.
    """

    value: Optional[float]
    landmarks: Tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return self.value is not None

    @classmethod
    def invalid(cls) -> "DeviationSample":
        return cls(value=None, landmarks=())


class DeviationTracker:
    def __init__(
        self,
        tracked_landmarks: Sequence[str] = DEFAULT_TRACKED_LANDMARKS,
        *,
        min_confidence: float = DEFAULT_LANDMARK_MIN_CONFIDENCE,
        min_landmarks: int = DEFAULT_MIN_LANDMARKS,
    ) -> None:
        if not tracked_landmarks:
            raise ValueError("tracked_landmarks must not be empty")
        self.tracked_landmarks = tuple(tracked_landmarks)
        self.min_confidence = float(min_confidence)
        self.min_landmarks = max(1, int(min_landmarks))

    @classmethod
    def from_config(cls, cfg) -> "DeviationTracker":
        return cls(
            cfg.posture.tracked_landmarks,
            min_confidence=cfg.posture.min_confidence,
            min_landmarks=cfg.posture.min_landmarks,
        )

    def measure(self, pose: Pose, baseline: Optional[Baseline]) -> DeviationSample:
        """Desviación de ``pose`` frente a ``baseline`` o una muestra inválida."""

        if baseline is None:
            return DeviationSample.invalid()
        if pose.space != SPACE_FRAME:
            raise ValueError("Deviation must be measured on frame-space poses")

        usable = [
            kp
            for kp in pose.confident(self.tracked_landmarks, self.min_confidence)
            if kp.name in baseline.positions
        ]
        if len(usable) < self.min_landmarks:
            return DeviationSample.invalid()

        # Diferencia por landmark contra su propia referencia: si solo un ojo es
        # fiable no se introduce el sesgo de una cabeza ladeada.
        drops = [float(kp.y) - baseline.y(kp.name) for kp in usable]
        return DeviationSample(value=float(np.mean(drops)), landmarks=tuple(kp.name for kp in usable))


__all__ = ["DeviationSample", "DeviationTracker"]
