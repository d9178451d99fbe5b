"""Máquina de estados con *debounce* que decide cuándo avisar de mala postura.

Reglas:

- CALIBRATING → GOOD cuando el calibrador fija la línea base.
- GOOD → BAD tras ``debounce_frames`` muestras válidas consecutivas por
  encima del umbral; una muestra válida por debajo reinicia la racha.
- BAD → GOOD de forma simétrica con ``recovery_frames``.
- Cualquier estado → CALIBRATING solo con :meth:`PostureStateMachine.reset`.

Las muestras inválidas (poca confianza, sin línea base) mantienen el contador
tal cual: ni lo avanzan ni lo reinician. Así una oclusión momentánea no
provoca parpadeo ni borra una racha legítima.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from posture_guard.config.settings import DEBOUNCE_FRAMES, GOOD_POSTURE_DEVIATION
from posture_guard.core.types import PostureStatus

from .deviation import DeviationSample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostureState:
    """Instantánea del estado postural tras un fotograma."""

    status: PostureStatus = PostureStatus.CALIBRATING
    counter: int = 0
    last_sample: Optional[DeviationSample] = None

    @property
    def is_bad(self) -> bool:
        return self.status is PostureStatus.BAD


class PostureStateMachine:
    """Único escritor del :class:`PostureState`."""

    def __init__(
        self,
        *,
        threshold_px: float = GOOD_POSTURE_DEVIATION,
        debounce_frames: int = DEBOUNCE_FRAMES,
        recovery_frames: Optional[int] = None,
    ) -> None:
        if debounce_frames < 1:
            raise ValueError("debounce_frames must be >= 1")
        if recovery_frames is not None and recovery_frames < 1:
            raise ValueError("recovery_frames must be >= 1")
        self.threshold_px = float(threshold_px)
        self.debounce_frames = int(debounce_frames)
        self.recovery_frames = int(recovery_frames) if recovery_frames is not None else self.debounce_frames
        self._state = PostureState()

    @classmethod
    def from_config(cls, cfg) -> "PostureStateMachine":
        return cls(
            threshold_px=cfg.posture.threshold_px,
            debounce_frames=cfg.posture.debounce_frames,
            recovery_frames=cfg.posture.effective_recovery_frames,
        )

    @property
    def state(self) -> PostureState:
        return self._state

    @property
    def status(self) -> PostureStatus:
        return self._state.status

    @property
    def intensity(self) -> float:
        """Intensidad continua en ``[0, 1]`` pensada para el fundido del overlay."""

        state = self._state
        if state.status is PostureStatus.GOOD:
            return min(state.counter / self.debounce_frames, 1.0)
        if state.status is PostureStatus.BAD:
            return max(1.0 - state.counter / self.recovery_frames, 0.0)
        return 0.0

    def reset(self) -> PostureState:
        """Vuelve a CALIBRATING descartando contadores y la última muestra."""

        if self._state.status is not PostureStatus.CALIBRATING:
            logger.info("Posture state reset from %s", self._state.status.value)
        self._state = PostureState()
        return self._state

    def baseline_committed(self) -> PostureState:
        if self._state.status is PostureStatus.CALIBRATING:
            self._state = PostureState(status=PostureStatus.GOOD)
            logger.info("Calibration complete; posture GOOD")
        return self._state

    def is_bad_sample(self, sample: DeviationSample) -> bool:
        return sample.valid and float(sample.value) > self.threshold_px  # type: ignore[arg-type]

    def update(self, sample: DeviationSample) -> PostureState:
        """Avanza la máquina con la muestra de un fotograma."""

        state = self._state
        if state.status is PostureStatus.CALIBRATING or not sample.valid:
            return state

        bad = self.is_bad_sample(sample)
        if state.status is PostureStatus.GOOD:
            counter = state.counter + 1 if bad else 0
            if counter >= self.debounce_frames:
                logger.info("Posture BAD (deviation %.1fpx > %.1fpx)", sample.value, self.threshold_px)
                self._state = PostureState(status=PostureStatus.BAD, counter=0, last_sample=sample)
            else:
                self._state = PostureState(status=PostureStatus.GOOD, counter=counter, last_sample=sample)
        else:
            counter = state.counter + 1 if not bad else 0
            if counter >= self.recovery_frames:
                logger.info("Posture GOOD again (deviation %.1fpx)", sample.value)
                self._state = PostureState(status=PostureStatus.GOOD, counter=0, last_sample=sample)
            else:
                self._state = PostureState(status=PostureStatus.BAD, counter=counter, last_sample=sample)
        return self._state


__all__ = ["PostureState", "PostureStateMachine"]
