"""Tipos ligeros que describen *keypoints* y poses de un fotograma."""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Optional, Tuple

from .constants import KEYPOINT_NAMES, SPACE_FRAME, SPACE_INPUT


@dataclass(frozen=True)
class Keypoint:
    """Punto corporal con nombre, coordenadas 2D y confianza en ``[0, 1]``."""

    name: str
    x: float
    y: float
    confidence: float

    def is_confident(self, threshold: float) -> bool:
        """``True`` si las coordenadas son finitas y la confianza alcanza ``threshold``."""

        return (
            math.isfinite(self.x)
            and math.isfinite(self.y)
            and math.isfinite(self.confidence)
            and self.confidence >= threshold
        )

    def to_dict(self) -> dict[str, float]:
        return {"x": float(self.x), "y": float(self.y), "confidence": float(self.confidence)}

    @classmethod
    def missing(cls, name: str) -> "Keypoint":
        """Punto no detectado: coordenadas NaN y confianza nula."""

        return cls(name=name, x=math.nan, y=math.nan, confidence=0.0)


@dataclass(frozen=True)
class Pose(Mapping[str, Keypoint]):
    """Colección inmutable de *keypoints* indexada por nombre.

    Siempre contiene un ``Keypoint`` por cada identificador conocido; los que
    el modelo no detecta se rellenan con :meth:`Keypoint.missing`. ``space``
    indica si las coordenadas están normalizadas a la entrada del modelo
    (``"input"``) o en píxeles del fotograma de referencia (``"frame"``).
    """

    keypoints: Dict[str, Keypoint] = field(default_factory=dict)
    space: str = SPACE_INPUT

    def __post_init__(self) -> None:
        completed = {name: self.keypoints.get(name, Keypoint.missing(name)) for name in KEYPOINT_NAMES}
        for name, keypoint in self.keypoints.items():
            completed.setdefault(name, keypoint)
        object.__setattr__(self, "keypoints", completed)

    def __getitem__(self, name: str) -> Keypoint:
        return self.keypoints[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.keypoints)

    def __len__(self) -> int:
        return len(self.keypoints)

    def confident(self, names: Iterable[str], threshold: float) -> Tuple[Keypoint, ...]:
        """Devuelve, en orden, los puntos de ``names`` que superan ``threshold``."""

        return tuple(
            self.keypoints[name]
            for name in names
            if name in self.keypoints and self.keypoints[name].is_confident(threshold)
        )

    def has_detection(self) -> bool:
        return any(kp.confidence > 0.0 for kp in self.keypoints.values())

    def map_coordinates(
        self, fn: Callable[[float, float], Tuple[float, float]], *, space: str = SPACE_FRAME
    ) -> "Pose":
        """Aplica ``fn`` a cada par ``(x, y)`` finito y devuelve una pose nueva."""

        mapped: Dict[str, Keypoint] = {}
        for name, kp in self.keypoints.items():
            if math.isfinite(kp.x) and math.isfinite(kp.y):
                x, y = fn(kp.x, kp.y)
                mapped[name] = Keypoint(name=name, x=float(x), y=float(y), confidence=kp.confidence)
            else:
                mapped[name] = kp
        return Pose(keypoints=mapped, space=space)

    @classmethod
    def empty(cls, space: str = SPACE_INPUT) -> "Pose":
        """Pose sin detección: todos los puntos ausentes."""

        return cls(keypoints={}, space=space)

    @classmethod
    def from_points(
        cls,
        points: Mapping[str, Tuple[float, float, float]],
        *,
        space: str = SPACE_INPUT,
    ) -> "Pose":
        """Crea una pose a partir de ``{nombre: (x, y, confianza)}``."""

        return cls(
            keypoints={
                name: Keypoint(name=name, x=float(x), y=float(y), confidence=float(conf))
                for name, (x, y, conf) in points.items()
            },
            space=space,
        )

    def get(self, name: str, default: Optional[Keypoint] = None) -> Optional[Keypoint]:  # type: ignore[override]
        return self.keypoints.get(name, default)


__all__ = ["Keypoint", "Pose"]
