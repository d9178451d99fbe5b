"""Entrega de fotogramas entre el hilo de captura y la *pipeline*.

La captura corre en su propio hilo y deja cada fotograma en una ranura única
que se sobrescribe: si la inferencia va más lenta que la cámara se descartan
fotogramas intermedios en lugar de encolarlos, lo que acota la latencia.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

from .pipeline import PipelineOutcome, PosturePipeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotFrame:
    frame: np.ndarray
    sequence: int


class LatestFrameSlot:
    """Ranura de un solo fotograma con semántica de sobrescritura."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._item: Optional[SlotFrame] = None
        self._sequence = 0
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def put(self, frame: np.ndarray) -> int:
        """Publica ``frame`` reemplazando el que no se haya consumido aún."""

        with self._cond:
            if self._closed:
                raise RuntimeError("Cannot put frames into a closed slot")
            if self._item is not None:
                self.dropped += 1
            self._sequence += 1
            self._item = SlotFrame(frame=frame, sequence=self._sequence)
            self._cond.notify()
            return self._sequence

    def take(self, timeout: Optional[float] = None) -> Optional[SlotFrame]:
        """Extrae el fotograma más reciente o ``None`` si expira o se cierra."""

        with self._cond:
            if self._item is None and not self._closed:
                self._cond.wait_for(lambda: self._item is not None or self._closed, timeout=timeout)
            item, self._item = self._item, None
            return item

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()


class FrameGrabber(threading.Thread):
    """Hilo que lee de una fuente tipo ``cv2.VideoCapture`` y alimenta la ranura."""

    def __init__(self, source, slot: LatestFrameSlot, *, max_read_failures: int = 30) -> None:
        super().__init__(name="frame-grabber", daemon=True)
        self.source = source
        self.slot = slot
        self.max_read_failures = max(1, int(max_read_failures))
        self._stop_event = threading.Event()
        self.frames_read = 0
        self.failed = False

    def stop(self) -> None:
        self._stop_event.set()

    def run(self) -> None:
        failures = 0
        try:
            while not self._stop_event.is_set():
                ok, frame = self.source.read()
                if not ok or frame is None:
                    failures += 1
                    if failures >= self.max_read_failures:
                        logger.error("Camera returned no frame %d times in a row; stopping capture", failures)
                        self.failed = True
                        break
                    continue
                failures = 0
                self.frames_read += 1
                self.slot.put(frame)
        finally:
            self.slot.close()


def run_monitor_loop(
    slot: LatestFrameSlot,
    pipeline: PosturePipeline,
    on_outcome: Callable[[PipelineOutcome, np.ndarray], None],
    *,
    should_stop: Callable[[], bool] = lambda: False,
    poll_timeout: float = 0.5,
) -> int:
    """Procesa el fotograma más reciente disponible hasta que se pida parar.

    Devuelve el número de fotogramas procesados. Las excepciones fatales de la
    *pipeline* se propagan al llamador.
    """

    processed = 0
    while not should_stop():
        item = slot.take(timeout=poll_timeout)
        if item is None:
            if slot.closed:
                break
            continue
        outcome = pipeline.process_frame(item.frame)
        processed += 1
        on_outcome(outcome, item.frame)
    logger.info("Monitor loop finished: %d frames processed, %d dropped", processed, slot.dropped)
    return processed


__all__ = ["FrameGrabber", "LatestFrameSlot", "SlotFrame", "run_monitor_loop"]
