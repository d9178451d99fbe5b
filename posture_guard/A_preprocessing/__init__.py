"""Preprocesado de fotogramas de cámara previo a la inferencia."""

from .frame_preprocessor import FramePreprocessor, FrameTransform, InputTensor, normalize_rotation_deg

__all__ = ["FramePreprocessor", "FrameTransform", "InputTensor", "normalize_rotation_deg"]
