"""Fundido del velo de aviso a partir de la señal binaria de postura."""

from __future__ import annotations

from posture_guard.config.settings import FADE_SPEED, MAX_ALPHA


class OverlayFader:
    """Aproxima la opacidad actual a la objetivo a velocidad constante.

    La señal de postura es binaria; el fundido evita que el velo aparezca o
    desaparezca de golpe. ``alpha`` está en ``[0, max_alpha]`` (escala 0-255).
    """

    def __init__(self, max_alpha: int = MAX_ALPHA, fade_speed: int = FADE_SPEED) -> None:
        if not 0 <= int(max_alpha) <= 255:
            raise ValueError("max_alpha must be within [0, 255]")
        if int(fade_speed) < 1:
            raise ValueError("fade_speed must be >= 1")
        self.max_alpha = int(max_alpha)
        self.fade_speed = int(fade_speed)
        self.alpha = 0
        self.target_alpha = 0

    @classmethod
    def from_config(cls, cfg) -> "OverlayFader":
        return cls(cfg.overlay.max_alpha, cfg.overlay.fade_speed)

    @property
    def visible(self) -> bool:
        return self.alpha > 0

    @property
    def opacity(self) -> float:
        """Opacidad actual normalizada a ``[0, 1]``."""
        return self.alpha / 255.0

    def set_target_visible(self, visible: bool) -> None:
        self.target_alpha = self.max_alpha if visible else 0

    def update(self) -> int:
        """Avanza un paso de fundido y devuelve la opacidad resultante."""

        if self.alpha < self.target_alpha:
            self.alpha = min(self.alpha + self.fade_speed, self.target_alpha)
        elif self.alpha > self.target_alpha:
            self.alpha = max(self.alpha - self.fade_speed, self.target_alpha)
        return self.alpha


__all__ = ["OverlayFader"]
