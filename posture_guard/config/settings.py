"""Parámetros por defecto y utilidades de entorno para el monitor de postura."""

from __future__ import annotations

import os

from .constants import RESIZE_LETTERBOX


def configure_environment() -> None:
    """Ajusta variables de entorno antes de cargar MediaPipe."""

    os.environ["TF_CPP_MIN_LOG_LEVEL"] = "2"
    os.environ["GLOG_minloglevel"] = "2"

    try:
        from absl import logging as absl_logging  # type: ignore[import-not-found]
    except ImportError:
        pass
    else:
        # Forzamos a ``absl`` a emitir solo errores para no saturar la consola.
        absl_logging.set_verbosity(absl_logging.ERROR)


# --- CÁMARA ---
# Índice del dispositivo que abre ``cv2.VideoCapture``.
DEFAULT_CAMERA_INDEX = 0

# Tamaño del fotograma de referencia. Todas las coordenadas en espacio de
# fotograma (y por tanto la desviación en píxeles) se expresan en este tamaño,
# independientemente de la resolución real de captura.
DEFAULT_FRAME_WIDTH = 640
DEFAULT_FRAME_HEIGHT = 480

# Rotación fija aplicada antes de redimensionar (cámaras montadas del revés).
DEFAULT_ROTATION_DEG = 0

# Fallos de lectura consecutivos tolerados antes de dar la cámara por perdida.
DEFAULT_MAX_READ_FAILURES = 30

# --- MODELO DE POSE ---
# Lado de la entrada cuadrada del modelo.
DEFAULT_MODEL_INPUT_SIZE = 256

# Conservamos la relación de aspecto con bandas negras: estirar la imagen
# desplazaría los *landmarks* de forma distinta según la cámara.
DEFAULT_RESIZE_MODE = RESIZE_LETTERBOX

# Complejidad del grafo de MediaPipe (0/1/2). El modelo intermedio basta para
# el tren superior y mantiene la inferencia por debajo del periodo de cámara.
MODEL_COMPLEXITY = 1

# Presupuesto orientativo por inferencia; se registra un aviso si se supera.
DEFAULT_INFERENCE_BUDGET_MS = 100.0

# Fallos de backend consecutivos antes de considerar el modelo inutilizable.
DEFAULT_MAX_CONSECUTIVE_FAILURES = 30

# --- CALIBRACIÓN ---
# Fotogramas estables consecutivos necesarios para fijar la línea base.
DEFAULT_CALIBRATION_FRAMES = 15

# Confianza mínima de cada *landmark* requerido durante la calibración.
DEFAULT_CALIBRATION_MIN_CONFIDENCE = 0.3

# Desplazamiento máximo entre fotogramas (px de referencia) para considerar
# que el usuario está quieto.
DEFAULT_CALIBRATION_MAX_JITTER_PX = 6.0

# Fotogramas seguidos sin *landmarks* fiables antes de reiniciar la ventana.
DEFAULT_CALIBRATION_TIMEOUT_FRAMES = 150

# --- DECISIÓN DE POSTURA ---
# Landmarks seguidos por defecto: la altura de los ojos delata el encorvamiento.
DEFAULT_TRACKED_LANDMARKS = ("left_eye", "right_eye")

# Caída (px de referencia) por encima de la cual un fotograma cuenta como malo.
GOOD_POSTURE_DEVIATION = 20.0

# Fotogramas malos consecutivos antes de activar el aviso.
DEBOUNCE_FRAMES = 15

# Confianza mínima para usar un *landmark* en la desviación.
DEFAULT_LANDMARK_MIN_CONFIDENCE = 0.3

# Número mínimo de *landmarks* fiables para emitir una muestra válida.
DEFAULT_MIN_LANDMARKS = 1

# Muestras inválidas consecutivas tras las que se recalibra (0 = nunca).
DEFAULT_TRACKING_LOSS_FRAMES = 300

# --- OVERLAY ---
# Opacidad máxima (0-255) del velo y velocidad de fundido por fotograma.
MAX_ALPHA = 180
FADE_SPEED = 15

# Mostrar la ventana de depuración con el vídeo y las líneas de referencia.
DEFAULT_SHOW_WINDOW = True
