"""Constantes globales de la aplicación y rutas del proyecto."""
from pathlib import Path

# --- CONFIGURACIÓN GENERAL ---
APP_NAME = "POSTURE GUARD"

# --- RUTAS DE ARCHIVOS ---
# NOTA: usamos ``parents[2]`` porque este archivo vive en ``posture_guard/config/``.
PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config.yaml"

# --- CONSTANTES DEL GRAFO DE POSE ---
# Umbrales permisivos: la cámara de escritorio suele tener poca luz y el torso
# queda parcialmente fuera de cuadro.
MIN_DETECTION_CONFIDENCE = 0.5
MIN_TRACKING_CONFIDENCE = 0.5

# --- GEOMETRÍA DEL FOTOGRAMA ---
# Rotaciones admitidas por ``cv2.rotate`` (múltiplos de 90°, sentido horario).
SUPPORTED_ROTATIONS = (0, 90, 180, 270)

# Estrategias de redimensionado hacia la entrada cuadrada del modelo.
RESIZE_LETTERBOX = "letterbox"
RESIZE_STRETCH = "stretch"
RESIZE_MODES = (RESIZE_LETTERBOX, RESIZE_STRETCH)
