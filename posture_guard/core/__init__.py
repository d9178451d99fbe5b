"""Tipos compartidos entre las etapas de la *pipeline*."""

from .types import STATUS_HUMAN_LABEL, CalibrationStatus, PostureStatus

__all__ = ["CalibrationStatus", "PostureStatus", "STATUS_HUMAN_LABEL"]
