"""Parámetros de visualización: colores BGR y trazos de la ventana de depuración."""

# --- ESQUELETO ---
LANDMARK_COLOR = (0, 255, 0)  # Verde
CONNECTION_COLOR = (0, 0, 255)  # Rojo

THICKNESS_DEFAULT = 2
RADIUS_DEFAULT = 4

# --- LÍNEAS DE REFERENCIA ---
BASELINE_COLOR = (255, 255, 255)  # Blanco
THRESHOLD_COLOR = (160, 160, 160)  # Gris
GOOD_COLOR = (0, 255, 0)  # Verde: postura correcta
WARN_COLOR = (0, 255, 255)  # Amarillo: por debajo de la base sin llegar al umbral
BAD_COLOR = (0, 0, 255)  # Rojo: encorvado

TEXT_SCALE = 0.6
TEXT_THICKNESS = 2

__all__ = [
    "LANDMARK_COLOR",
    "CONNECTION_COLOR",
    "THICKNESS_DEFAULT",
    "RADIUS_DEFAULT",
    "BASELINE_COLOR",
    "THRESHOLD_COLOR",
    "GOOD_COLOR",
    "WARN_COLOR",
    "BAD_COLOR",
    "TEXT_SCALE",
    "TEXT_THICKNESS",
]
