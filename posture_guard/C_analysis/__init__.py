"""Calibración, desviación y decisión de postura."""

from .calibration import Baseline, BaselineCalibrator
from .deviation import DeviationSample, DeviationTracker
from .pipeline import PipelineOutcome, PosturePipeline
from .posture_state import PostureState, PostureStateMachine
from .streaming import FrameGrabber, LatestFrameSlot, run_monitor_loop

__all__ = [
    "Baseline",
    "BaselineCalibrator",
    "DeviationSample",
    "DeviationTracker",
    "PipelineOutcome",
    "PosturePipeline",
    "PostureState",
    "PostureStateMachine",
    "FrameGrabber",
    "LatestFrameSlot",
    "run_monitor_loop",
]
