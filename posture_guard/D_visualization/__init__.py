"""Visualización: velo de aviso y ventana de depuración."""

from .debug_view import draw_pose_on_frame, line_color_for_delta, render_debug_frame
from .landmark_overlay_styles import OverlayStyle
from .overlay import OverlayFader

__all__ = [
    "OverlayFader",
    "OverlayStyle",
    "draw_pose_on_frame",
    "line_color_for_delta",
    "render_debug_frame",
]
