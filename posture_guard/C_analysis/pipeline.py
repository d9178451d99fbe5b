"""Orquestación fotograma a fotograma del monitor de postura.

Cada llamada a :meth:`PosturePipeline.process_frame` ejecuta, en orden:

1. la petición de reinicio pendiente, si la hay;
2. preprocesado e inferencia;
3. calibración (mientras no haya línea base) o desviación + máquina de estados.

Los fallos recuperables (fotograma inválido, fallo puntual del modelo) dejan el
estado intacto y se devuelven en el resultado para que el llamador los
registre. Solo un fallo sostenido del modelo se eleva como excepción.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from posture_guard.A_preprocessing.frame_preprocessor import FramePreprocessor
from posture_guard.B_pose_estimation.estimators.base import LandmarkExtractor
from posture_guard.B_pose_estimation.types import Pose
from posture_guard.config.models import Config
from posture_guard.core.errors import (
    InferenceBackendError,
    InferenceBackendUnavailable,
    PostureGuardError,
    PreprocessError,
)
from posture_guard.core.types import CalibrationStatus, PostureStatus

from .calibration import Baseline, BaselineCalibrator
from .deviation import DeviationSample, DeviationTracker
from .posture_state import PostureState, PostureStateMachine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineOutcome:
    """Resultado de un fotograma para los consumidores externos."""

    state: PostureState
    intensity: float
    frame_index: int
    pose: Optional[Pose] = None
    sample: Optional[DeviationSample] = None
    baseline: Optional[Baseline] = None
    calibration: Optional[CalibrationStatus] = None
    skipped: bool = False
    error: Optional[PostureGuardError] = None
    inference_ms: Optional[float] = None
    auto_reset: bool = False

    @property
    def status(self) -> PostureStatus:
        return self.state.status


class PosturePipeline:
    """Secuencia preprocesado → extracción → calibración/desviación → estado.

    ``reset_baseline`` puede invocarse desde cualquier hilo; se aplica al
    comienzo de la siguiente pasada, nunca a mitad de una inferencia.
    """

    def __init__(
        self,
        cfg: Config,
        extractor: LandmarkExtractor,
        *,
        preprocessor: Optional[FramePreprocessor] = None,
        calibrator: Optional[BaselineCalibrator] = None,
        tracker: Optional[DeviationTracker] = None,
        state_machine: Optional[PostureStateMachine] = None,
    ) -> None:
        self.cfg = cfg
        self.extractor = extractor
        self.preprocessor = preprocessor or FramePreprocessor.from_config(cfg)
        self.calibrator = calibrator or BaselineCalibrator.from_config(cfg)
        self.tracker = tracker or DeviationTracker.from_config(cfg)
        self.state_machine = state_machine or PostureStateMachine.from_config(cfg)

        self._reset_requested = threading.Event()
        self._pass_lock = threading.Lock()
        self._frame_index = 0
        self._consecutive_failures = 0
        self._invalid_streak = 0

    # --- API pública -------------------------------------------------------
    @property
    def state(self) -> PostureState:
        return self.state_machine.state

    def reset_baseline(self) -> None:
        """Solicita recalibrar; vuelve de inmediato."""

        self._reset_requested.set()

    def process_frame(self, frame: np.ndarray) -> PipelineOutcome:
        with self._pass_lock:
            frame_index = self._frame_index
            self._frame_index += 1
            if self._reset_requested.is_set():
                self._reset_requested.clear()
                self._apply_reset()
                logger.info("Baseline reset requested; calibrating")
            return self._process(frame, frame_index)

    def close(self) -> None:
        self.extractor.close()

    def __enter__(self) -> "PosturePipeline":
        self.extractor.load()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # --- Internos -----------------------------------------------------------
    def _apply_reset(self) -> None:
        self.calibrator.reset()
        self.state_machine.reset()
        self._invalid_streak = 0

    def _skipped(self, frame_index: int, error: PostureGuardError, inference_ms: Optional[float] = None) -> PipelineOutcome:
        return PipelineOutcome(
            state=self.state_machine.state,
            intensity=self.state_machine.intensity,
            frame_index=frame_index,
            baseline=self.calibrator.baseline,
            skipped=True,
            error=error,
            inference_ms=inference_ms,
        )

    def _infer(self, frame: np.ndarray) -> tuple[Pose, float]:
        tensor = self.preprocessor.prepare(frame)
        started = time.perf_counter()
        try:
            pose_input = self.extractor.extract(tensor)
        finally:
            inference_ms = (time.perf_counter() - started) * 1000.0
        budget = float(self.cfg.pose.inference_budget_ms)
        if budget > 0 and inference_ms > budget:
            logger.warning("Inference took %.1fms (budget %.1fms)", inference_ms, budget)
        return self.preprocessor.to_frame_space(pose_input, tensor), inference_ms

    def _process(self, frame: np.ndarray, frame_index: int) -> PipelineOutcome:
        try:
            pose, inference_ms = self._infer(frame)
        except PreprocessError as exc:
            logger.debug("Frame %d skipped: %s", frame_index, exc)
            return self._skipped(frame_index, exc)
        except InferenceBackendError as exc:
            self._consecutive_failures += 1
            limit = int(self.cfg.pose.max_consecutive_failures)
            logger.debug("Inference failure %d/%d on frame %d: %s", self._consecutive_failures, limit, frame_index, exc)
            if self._consecutive_failures >= limit:
                raise InferenceBackendUnavailable(
                    f"Pose backend failed {self._consecutive_failures} consecutive frames"
                ) from exc
            return self._skipped(frame_index, exc)
        self._consecutive_failures = 0

        if self.state_machine.status is PostureStatus.CALIBRATING:
            calibration = self.calibrator.observe(pose)
            if calibration is CalibrationStatus.COMMITTED:
                self.state_machine.baseline_committed()
            return PipelineOutcome(
                state=self.state_machine.state,
                intensity=self.state_machine.intensity,
                frame_index=frame_index,
                pose=pose,
                baseline=self.calibrator.baseline,
                calibration=calibration,
                inference_ms=inference_ms,
            )

        sample = self.tracker.measure(pose, self.calibrator.baseline)
        state = self.state_machine.update(sample)
        auto_reset = self._track_loss(sample)
        if auto_reset:
            state = self.state_machine.state
        return PipelineOutcome(
            state=state,
            intensity=self.state_machine.intensity,
            frame_index=frame_index,
            pose=pose,
            sample=sample,
            baseline=self.calibrator.baseline,
            calibration=CalibrationStatus.PENDING if auto_reset else CalibrationStatus.READY,
            inference_ms=inference_ms,
            auto_reset=auto_reset,
        )

    def _track_loss(self, sample: DeviationSample) -> bool:
        """Recalibra tras una pérdida sostenida de seguimiento."""

        if sample.valid:
            self._invalid_streak = 0
            return False
        self._invalid_streak += 1
        limit = int(self.cfg.posture.tracking_loss_frames)
        if limit <= 0 or self._invalid_streak < limit:
            return False
        logger.info("Tracking lost for %d frames; recalibrating", self._invalid_streak)
        self._apply_reset()
        return True


__all__ = ["PipelineOutcome", "PosturePipeline"]
