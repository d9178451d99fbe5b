"""Utilidades para cargar configuraciones por defecto o desde archivos YAML.

La configuración se lee una sola vez al arrancar; los objetos resultantes son
inmutables y se pasan explícitamente a la *pipeline*."""
from pathlib import Path

from .models import Config

try:  # Optional dependency – only needed when loading from YAML files.
    import yaml  # type: ignore
except ImportError:  # pragma: no cover - PyYAML is optional at runtime
    yaml = None  # type: ignore


def load_default() -> Config:
    """Obtener la configuración por defecto del monitor."""
    return Config()


def from_yaml(path: str | Path) -> Config:
    """Cargar una configuración desde un YAML y mezclarla con los valores base."""
    if yaml is None:  # pragma: no cover - optional dependency guard
        raise RuntimeError("PyYAML is not available. Install it to load YAML files.")

    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping at the top level")
    return load_default().with_updates(data)
