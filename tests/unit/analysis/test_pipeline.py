from __future__ import annotations

import threading

import numpy as np
import pytest

from posture_guard.B_pose_estimation.estimators.base import LandmarkExtractor
from posture_guard.B_pose_estimation.types import Pose
from posture_guard.C_analysis.pipeline import PosturePipeline
from posture_guard.config import load_default
from posture_guard.core.errors import (
    InferenceBackendError,
    InferenceBackendUnavailable,
    PreprocessError,
    TensorShapeError,
)
from posture_guard.core.types import CalibrationStatus, PostureStatus


def _config(**posture):
    posture_updates = {"debounce_frames": 3, "tracking_loss_frames": 4}
    posture_updates.update(posture)
    return load_default().with_updates(
        {
            "pose": {"resize_mode": "stretch", "max_consecutive_failures": 3},
            "calibration": {"stable_frames": 3},
            "posture": posture_updates,
        }
    )


def _calibrated(extractor, frame: np.ndarray, poses, **posture) -> PosturePipeline:
    pipeline = PosturePipeline(_config(**posture), extractor)
    extractor.script = poses([240.0] * 3)
    for _ in range(3):
        outcome = pipeline.process_frame(frame)
    assert outcome.calibration is CalibrationStatus.COMMITTED
    assert outcome.status is PostureStatus.GOOD
    return pipeline


def test_calibration_then_slouch_then_recovery(blank_frame, scripted_extractor, input_poses) -> None:
    extractor = scripted_extractor
    pipeline = _calibrated(extractor, blank_frame, input_poses)
    assert pipeline.calibrator.baseline.y("left_eye") == pytest.approx(240.0)

    extractor.script = input_poses([270.0] * 3 + [245.0] * 3)
    outcomes = [pipeline.process_frame(blank_frame) for _ in range(6)]

    assert [o.status for o in outcomes] == [PostureStatus.GOOD] * 2 + [PostureStatus.BAD] * 3 + [PostureStatus.GOOD]
    assert outcomes[0].sample.value == pytest.approx(30.0)
    assert outcomes[0].calibration is CalibrationStatus.READY
    assert [o.frame_index for o in outcomes] == [3, 4, 5, 6, 7, 8]


def test_reset_during_bad_returns_to_calibrating(blank_frame, scripted_extractor, input_poses) -> None:
    extractor = scripted_extractor
    pipeline = _calibrated(extractor, blank_frame, input_poses)
    extractor.script = input_poses([280.0] * 3)
    for _ in range(3):
        pipeline.process_frame(blank_frame)
    assert pipeline.state.status is PostureStatus.BAD

    pipeline.reset_baseline()
    outcome = pipeline.process_frame(blank_frame)

    assert outcome.status is PostureStatus.CALIBRATING
    assert outcome.calibration is CalibrationStatus.PENDING
    assert outcome.intensity == 0.0

    pipeline.process_frame(blank_frame)
    outcome = pipeline.process_frame(blank_frame)
    assert outcome.status is PostureStatus.GOOD
    assert pipeline.calibrator.baseline.y("left_eye") == pytest.approx(280.0)


def test_reset_requested_from_another_thread_applies_on_next_pass(blank_frame, scripted_extractor, input_poses) -> None:
    extractor = scripted_extractor
    pipeline = _calibrated(extractor, blank_frame, input_poses)

    worker = threading.Thread(target=pipeline.reset_baseline)
    worker.start()
    worker.join()

    assert pipeline.state.status is PostureStatus.GOOD
    assert pipeline.process_frame(blank_frame).status is PostureStatus.CALIBRATING


def test_invalid_frames_are_skipped_without_touching_state(blank_frame, scripted_extractor, input_poses) -> None:
    extractor = scripted_extractor
    pipeline = _calibrated(extractor, blank_frame, input_poses)
    extractor.script = input_poses([270.0] * 2)
    pipeline.process_frame(blank_frame)
    calls = extractor.calls

    outcome = pipeline.process_frame(np.zeros((0, 0, 3), dtype=np.uint8))

    assert outcome.skipped
    assert isinstance(outcome.error, PreprocessError)
    assert outcome.state.counter == 1
    assert extractor.calls == calls
    assert pipeline.process_frame(blank_frame).state.counter == 2


def test_transient_backend_errors_escalate_after_the_limit(blank_frame, scripted_extractor, input_poses) -> None:
    failure = InferenceBackendError("graph crashed")
    extractor = scripted_extractor
    pipeline = _calibrated(extractor, blank_frame, input_poses)
    extractor.script = [failure, failure, input_poses([240.0])[0], failure, failure, failure]

    first = pipeline.process_frame(blank_frame)
    assert first.skipped and first.error is failure
    pipeline.process_frame(blank_frame)
    assert not pipeline.process_frame(blank_frame).skipped
    pipeline.process_frame(blank_frame)
    pipeline.process_frame(blank_frame)

    with pytest.raises(InferenceBackendUnavailable):
        pipeline.process_frame(blank_frame)


def test_tensor_shape_errors_propagate(blank_frame, scripted_extractor) -> None:
    scripted_extractor.script = [TensorShapeError("bad tensor")]
    pipeline = PosturePipeline(_config(), scripted_extractor)

    with pytest.raises(TensorShapeError):
        pipeline.process_frame(blank_frame)


def test_sustained_tracking_loss_recalibrates(blank_frame, scripted_extractor, input_poses) -> None:
    extractor = scripted_extractor
    pipeline = _calibrated(extractor, blank_frame, input_poses)
    extractor.script = [Pose.empty()]

    outcomes = [pipeline.process_frame(blank_frame) for _ in range(4)]

    assert [o.auto_reset for o in outcomes] == [False, False, False, True]
    assert outcomes[2].status is PostureStatus.GOOD
    assert outcomes[3].status is PostureStatus.CALIBRATING
    assert pipeline.calibrator.baseline is None


def test_tracking_loss_reset_can_be_disabled(blank_frame, scripted_extractor, input_poses) -> None:
    extractor = scripted_extractor
    pipeline = _calibrated(extractor, blank_frame, input_poses, tracking_loss_frames=0)
    extractor.script = [Pose.empty()]

    outcomes = [pipeline.process_frame(blank_frame) for _ in range(10)]

    assert not any(o.auto_reset for o in outcomes)
    assert pipeline.state.status is PostureStatus.GOOD


class _BrightBlockExtractor(LandmarkExtractor):
    """Coloca ambos ojos en el centroide de los píxeles claros del tensor."""

    def extract(self, tensor) -> Pose:
        image = tensor.image
        rows, cols = np.nonzero(image[:, :, 0] > 127)
        size = float(image.shape[0])
        x = (cols.mean() + 0.5) / size
        y = (rows.mean() + 0.5) / size
        return Pose.from_points({"left_eye": (x, y, 1.0), "right_eye": (x, y, 1.0)})


def _block_frame(height: int, width: int) -> np.ndarray:
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    top, bottom = int(height * 200 / 480), int(height * 240 / 480)
    left, right = int(width * 300 / 640), int(width * 340 / 640)
    frame[top:bottom, left:right] = 255
    return frame


def test_deviation_does_not_depend_on_capture_resolution() -> None:
    cfg = load_default().with_updates({"calibration": {"stable_frames": 3}})
    pipeline = PosturePipeline(cfg, _BrightBlockExtractor())

    for _ in range(3):
        pipeline.process_frame(_block_frame(480, 640))
    assert pipeline.calibrator.baseline.y("left_eye") == pytest.approx(220.0, abs=2.0)

    outcome = pipeline.process_frame(_block_frame(960, 1280))

    assert outcome.sample.valid
    assert abs(outcome.sample.value) < 2.0
    assert outcome.status is PostureStatus.GOOD


def test_context_manager_loads_and_closes_the_extractor(blank_frame, scripted_extractor) -> None:
    extractor = scripted_extractor

    with PosturePipeline(_config(), extractor) as pipeline:
        pipeline.process_frame(blank_frame)

    assert extractor.loaded
    assert extractor.closed
