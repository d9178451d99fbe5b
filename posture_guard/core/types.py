"""Tipos y utilidades comunes para etiquetar el estado postural.

El objetivo del módulo es normalizar las etiquetas que circulan entre la
máquina de estados, el orquestador y los consumidores externos (overlay,
ventana de depuración), evitando comparar cadenas sueltas."""

from __future__ import annotations

from enum import Enum

class PostureStatus(str, Enum):
    """Estados posibles de la máquina de postura."""

    CALIBRATING = "calibrating"
    GOOD = "good"
    BAD = "bad"


class CalibrationStatus(str, Enum):
    """Resultado de observar un fotograma durante la calibración."""

    PENDING = "pending"
    COMMITTED = "committed"
    TIMED_OUT = "timed_out"
    READY = "ready"


STATUS_HUMAN_LABEL = {
    PostureStatus.CALIBRATING: "Calibrating",
    PostureStatus.GOOD: "Good Posture",
    PostureStatus.BAD: "BAD POSTURE",
}

