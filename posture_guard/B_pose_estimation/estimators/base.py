"""Interfaz base que comparten todos los extractores de *landmarks*."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from ..types import Pose

if TYPE_CHECKING:
    from posture_guard.A_preprocessing.frame_preprocessor import InputTensor


class LandmarkExtractor(ABC):
    """Contrato mínimo de un extractor: tensor de entrada → :class:`Pose`.

    Es el único punto donde se ejecuta inferencia. La pose devuelta está
    normalizada a la entrada del modelo (``space == "input"``); el
    orquestador se encarga de llevarla al espacio del fotograma.
    """

    def load(self) -> None:
        """Carga el modelo por adelantado (sobrescribible)."""

    @abstractmethod
    def extract(self, tensor: "InputTensor") -> Pose:
        """Estima los *keypoints* presentes en ``tensor``."""

    def close(self) -> None:
        """Libera recursos asociados al extractor (sobrescribible)."""

    def __enter__(self):
        """Permite usar el extractor como *context manager* estándar."""
        self.load()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> Optional[bool]:
        """Cierra el extractor al salir del contexto gestionado."""
        self.close()
        return None


__all__ = ["LandmarkExtractor"]
