"""Estilos de superposición para la ventana de depuración.
Define dataclasses que documentan cómo trazamos puntos y líneas de referencia
para compartir un lenguaje común entre los componentes de depuración."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from posture_guard.config import video_landmarks_visualization as vlv

__all__ = ["OverlayStyle"]


@dataclass(frozen=True)
class OverlayStyle:
    """Modelo sencillo con los parámetros visuales usados al dibujar."""

    # Grosor de las líneas (esqueleto y referencias).
    connection_thickness: int = vlv.THICKNESS_DEFAULT
    # Radio de los círculos que representan cada punto clave.
    landmark_radius: int = vlv.RADIUS_DEFAULT
    connection_bgr: Tuple[int, int, int] = tuple(vlv.CONNECTION_COLOR)
    landmark_bgr: Tuple[int, int, int] = tuple(vlv.LANDMARK_COLOR)
    baseline_bgr: Tuple[int, int, int] = tuple(vlv.BASELINE_COLOR)
    threshold_bgr: Tuple[int, int, int] = tuple(vlv.THRESHOLD_COLOR)
    good_bgr: Tuple[int, int, int] = tuple(vlv.GOOD_COLOR)
    warn_bgr: Tuple[int, int, int] = tuple(vlv.WARN_COLOR)
    bad_bgr: Tuple[int, int, int] = tuple(vlv.BAD_COLOR)
    text_scale: float = vlv.TEXT_SCALE
    text_thickness: int = vlv.TEXT_THICKNESS
