"""Calibración de la línea base de "buena postura".

El calibrador acumula poses fiables y quietas; cuando reúne una ventana de
fotogramas estables fija como línea base la posición media de cada *landmark*
seguido. Los fotogramas poco fiables se ignoran sin perder el progreso, salvo
que se encadenen tantos que salte el tiempo límite.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from posture_guard.B_pose_estimation.types import Pose
from posture_guard.config.settings import (
    DEFAULT_CALIBRATION_FRAMES,
    DEFAULT_CALIBRATION_MAX_JITTER_PX,
    DEFAULT_CALIBRATION_MIN_CONFIDENCE,
    DEFAULT_CALIBRATION_TIMEOUT_FRAMES,
    DEFAULT_TRACKED_LANDMARKS,
)
from posture_guard.core.types import CalibrationStatus

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


@dataclass(frozen=True)
class Baseline:
    """Posición de referencia (px del fotograma de referencia) de cada *landmark*."""

    positions: Dict[str, Point]
    frames: int

    def y(self, name: str) -> float:
        return float(self.positions[name][1])

    @property
    def mean_y(self) -> float:
        """Altura media de los puntos de referencia (útil para dibujar)."""
        return float(np.mean([pos[1] for pos in self.positions.values()]))


class BaselineCalibrator:
    """Dueño exclusivo de la :class:`Baseline` activa."""

    def __init__(
        self,
        tracked_landmarks: Sequence[str] = DEFAULT_TRACKED_LANDMARKS,
        *,
        stable_frames: int = DEFAULT_CALIBRATION_FRAMES,
        min_confidence: float = DEFAULT_CALIBRATION_MIN_CONFIDENCE,
        max_jitter_px: float = DEFAULT_CALIBRATION_MAX_JITTER_PX,
        timeout_frames: int = DEFAULT_CALIBRATION_TIMEOUT_FRAMES,
    ) -> None:
        if not tracked_landmarks:
            raise ValueError("tracked_landmarks must not be empty")
        self.tracked_landmarks = tuple(tracked_landmarks)
        self.stable_frames = max(1, int(stable_frames))
        self.min_confidence = float(min_confidence)
        self.max_jitter_px = float(max_jitter_px)
        self.timeout_frames = max(1, int(timeout_frames))

        self._baseline: Optional[Baseline] = None
        self._window: List[Dict[str, Point]] = []
        self._misses = 0

    @classmethod
    def from_config(cls, cfg) -> "BaselineCalibrator":
        return cls(
            cfg.posture.tracked_landmarks,
            stable_frames=cfg.calibration.stable_frames,
            min_confidence=cfg.calibration.min_confidence,
            max_jitter_px=cfg.calibration.max_jitter_px,
            timeout_frames=cfg.calibration.timeout_frames,
        )

    @property
    def baseline(self) -> Optional[Baseline]:
        return self._baseline

    @property
    def is_calibrated(self) -> bool:
        return self._baseline is not None

    @property
    def progress(self) -> int:
        """Fotogramas estables acumulados en la ventana actual."""
        return len(self._window)

    def reset(self) -> None:
        """Descarta la línea base y cualquier progreso de calibración."""

        if self._baseline is not None:
            logger.info("Baseline cleared; recalibrating")
        self._baseline = None
        self._window.clear()
        self._misses = 0

    def _confident_positions(self, pose: Pose) -> Optional[Dict[str, Point]]:
        confident = pose.confident(self.tracked_landmarks, self.min_confidence)
        if len(confident) != len(self.tracked_landmarks):
            return None
        return {kp.name: (float(kp.x), float(kp.y)) for kp in confident}

    def _jitter(self, positions: Dict[str, Point]) -> float:
        previous = self._window[-1]
        return max(
            math.hypot(positions[name][0] - previous[name][0], positions[name][1] - previous[name][1])
            for name in self.tracked_landmarks
        )

    def _commit(self) -> Baseline:
        positions = {
            name: (
                float(np.mean([sample[name][0] for sample in self._window])),
                float(np.mean([sample[name][1] for sample in self._window])),
            )
            for name in self.tracked_landmarks
        }
        baseline = Baseline(positions=positions, frames=len(self._window))
        self._baseline = baseline
        self._window.clear()
        self._misses = 0
        logger.info("Baseline committed from %d frames (mean y=%.1fpx)", baseline.frames, baseline.mean_y)
        return baseline

    def observe(self, pose: Pose) -> CalibrationStatus:
        """Incorpora ``pose`` (en espacio de fotograma) a la calibración en curso."""

        if self._baseline is not None:
            return CalibrationStatus.READY

        positions = self._confident_positions(pose)
        if positions is None:
            self._misses += 1
            if self._misses >= self.timeout_frames:
                logger.debug(
                    "Calibration timed out after %d frames without confident landmarks", self._misses
                )
                self._window.clear()
                self._misses = 0
                return CalibrationStatus.TIMED_OUT
            return CalibrationStatus.PENDING

        self._misses = 0
        if self._window and self._jitter(positions) > self.max_jitter_px:
            # El usuario se ha movido: la ventana vuelve a empezar con este fotograma.
            self._window.clear()
        self._window.append(positions)

        if len(self._window) >= self.stable_frames:
            self._commit()
            return CalibrationStatus.COMMITTED
        return CalibrationStatus.PENDING


__all__ = ["Baseline", "BaselineCalibrator"]
