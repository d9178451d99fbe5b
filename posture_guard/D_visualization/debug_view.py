"""Rutinas de dibujo para la ventana de depuración del monitor.
Reúne la lógica de anotación (esqueleto, línea base, umbrales y estado) para
mantener un estilo consistente entre la ventana en vivo y las pruebas."""

from __future__ import annotations

import math
from typing import Mapping, Optional, Sequence, Tuple

import cv2
import numpy as np

from posture_guard.B_pose_estimation.constants import UPPER_BODY_CONNECTIONS
from posture_guard.B_pose_estimation.types import Pose
from posture_guard.C_analysis.pipeline import PipelineOutcome
from posture_guard.core.types import STATUS_HUMAN_LABEL, PostureStatus

from .landmark_overlay_styles import OverlayStyle

__all__ = ["draw_pose_on_frame", "line_color_for_delta", "render_debug_frame"]

_ROTATE_CODES = {
    90: cv2.ROTATE_90_CLOCKWISE,
    180: cv2.ROTATE_180,
    270: cv2.ROTATE_90_COUNTERCLOCKWISE,
}


def draw_pose_on_frame(
    frame: np.ndarray,
    pose: Pose,
    *,
    min_confidence: float = 0.3,
    connections: Sequence[Tuple[str, str]] = UPPER_BODY_CONNECTIONS,
    style: OverlayStyle = OverlayStyle(),
) -> Mapping[str, Tuple[int, int]]:
    """Dibuja los puntos fiables de ``pose`` (espacio de fotograma) sobre ``frame``."""

    points = {
        kp.name: (int(round(kp.x)), int(round(kp.y)))
        for kp in pose.values()
        if kp.is_confident(min_confidence)
    }
    for a, b in connections:
        if a in points and b in points:
            cv2.line(frame, points[a], points[b], style.connection_bgr, style.connection_thickness)
    for p in points.values():
        cv2.circle(frame, p, style.landmark_radius, style.landmark_bgr, -1)
    return points


def line_color_for_delta(delta: float, threshold_px: float, style: OverlayStyle = OverlayStyle()) -> Tuple[int, int, int]:
    """Rojo por encima del umbral, amarillo por debajo de la base, verde en otro caso."""

    if delta > threshold_px:
        return style.bad_bgr
    if delta > 0.0:
        return style.warn_bgr
    return style.good_bgr


def _hline(frame: np.ndarray, y: float, color: Tuple[int, int, int], thickness: int) -> None:
    if not math.isfinite(y):
        return
    width = frame.shape[1]
    yi = int(round(y))
    cv2.line(frame, (0, yi), (width - 1, yi), color, thickness)


def render_debug_frame(
    frame_bgr: np.ndarray,
    outcome: PipelineOutcome,
    *,
    reference_size: Tuple[int, int],
    threshold_px: float,
    rotation_deg: int = 0,
    veil_opacity: float = 0.0,
    style: OverlayStyle = OverlayStyle(),
    min_confidence: float = 0.3,
) -> np.ndarray:
    """Compone la imagen de depuración de un fotograma.

    La imagen se rota y escala al fotograma de referencia para que las
    coordenadas de la pose y de la línea base caigan en su sitio.
    """

    view = frame_bgr
    if view.ndim == 2:
        view = cv2.cvtColor(view, cv2.COLOR_GRAY2BGR)
    elif view.shape[2] == 4:
        view = cv2.cvtColor(view, cv2.COLOR_BGRA2BGR)
    if rotation_deg in _ROTATE_CODES:
        view = cv2.rotate(view, _ROTATE_CODES[rotation_deg])
    view = cv2.resize(view, tuple(int(v) for v in reference_size), interpolation=cv2.INTER_LINEAR)

    if outcome.pose is not None:
        draw_pose_on_frame(view, outcome.pose, min_confidence=min_confidence, style=style)

    baseline = outcome.baseline
    delta: Optional[float] = None
    if baseline is not None:
        base_y = baseline.mean_y
        _hline(view, base_y, style.baseline_bgr, style.connection_thickness)
        _hline(view, base_y + threshold_px, style.threshold_bgr, 1)
        _hline(view, base_y - threshold_px, style.threshold_bgr, 1)
        if outcome.sample is not None and outcome.sample.valid:
            delta = float(outcome.sample.value)  # type: ignore[arg-type]
            _hline(view, base_y + delta, line_color_for_delta(delta, threshold_px, style), style.connection_thickness)

    if veil_opacity > 0.0:
        veil = np.zeros_like(view)
        view = cv2.addWeighted(veil, float(veil_opacity), view, 1.0 - float(veil_opacity), 0.0)

    status = outcome.status
    label = STATUS_HUMAN_LABEL[status]
    color = style.bad_bgr if status is PostureStatus.BAD else (
        style.good_bgr if status is PostureStatus.GOOD else style.warn_bgr
    )
    cv2.putText(view, label, (10, 25), cv2.FONT_HERSHEY_SIMPLEX, style.text_scale, color, style.text_thickness)
    if delta is not None:
        cv2.putText(
            view,
            f"Delta: {delta:.1f}px",
            (10, 50),
            cv2.FONT_HERSHEY_SIMPLEX,
            style.text_scale,
            style.baseline_bgr,
            style.text_thickness,
        )
    elif outcome.skipped:
        cv2.putText(
            view,
            "Frame skipped",
            (10, 50),
            cv2.FONT_HERSHEY_SIMPLEX,
            style.text_scale,
            style.warn_bgr,
            style.text_thickness,
        )
    return view
