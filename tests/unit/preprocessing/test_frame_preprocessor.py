from __future__ import annotations

import numpy as np
import pytest

from posture_guard.A_preprocessing.frame_preprocessor import (
    FramePreprocessor,
    normalize_rotation_deg,
)
from posture_guard.B_pose_estimation.constants import SPACE_FRAME, SPACE_INPUT
from posture_guard.B_pose_estimation.types import Pose
from posture_guard.config import load_default
from posture_guard.core.errors import PreprocessError


def _frame(height: int, width: int, value: int = 255) -> np.ndarray:
    return np.full((height, width, 3), value, dtype=np.uint8)


def test_letterbox_pads_short_axis_with_black_bands() -> None:
    tensor = FramePreprocessor(256).prepare(_frame(480, 640))

    assert tensor.image.shape == (256, 256, 3)
    assert tensor.image.dtype == np.uint8
    assert tensor.transform.pad_x == 0
    assert tensor.transform.pad_y == 32
    assert np.all(tensor.image[:32] == 0)
    assert np.all(tensor.image[-32:] == 0)
    assert np.all(tensor.image[32:224] == 255)


def test_stretch_mode_fills_the_whole_input() -> None:
    tensor = FramePreprocessor(256, resize_mode="stretch").prepare(_frame(480, 640))

    assert tensor.transform.pad_x == 0 and tensor.transform.pad_y == 0
    assert np.all(tensor.image == 255)


def test_bgr_frames_are_converted_to_rgb() -> None:
    frame = np.zeros((100, 100, 3), dtype=np.uint8)
    frame[:, :, 0] = 255  # azul en BGR

    tensor = FramePreprocessor(64).prepare(frame)

    assert tuple(tensor.image[32, 32]) == (0, 0, 255)


@pytest.mark.parametrize(
    "frame",
    [
        np.full((120, 160), 200, dtype=np.uint8),
        np.full((120, 160, 1), 200, dtype=np.uint8),
        np.full((120, 160, 4), 200, dtype=np.uint8),
        np.full((120, 160, 3), 200.0, dtype=np.float32),
    ],
)
def test_supported_layouts_produce_rgb_uint8(frame: np.ndarray) -> None:
    tensor = FramePreprocessor(64).prepare(frame)

    assert tensor.image.shape == (64, 64, 3)
    assert tensor.image.dtype == np.uint8


@pytest.mark.parametrize(
    "frame",
    [
        np.zeros((0, 0, 3), dtype=np.uint8),
        np.zeros((0, 10, 3), dtype=np.uint8),
        np.zeros((10, 10, 2), dtype=np.uint8),
        np.zeros((4, 4, 3, 1), dtype=np.uint8),
        [[0, 0], [0, 0]],
        None,
    ],
)
def test_invalid_frames_raise_preprocess_error(frame) -> None:
    with pytest.raises(PreprocessError):
        FramePreprocessor(64).prepare(frame)


def test_rotation_swaps_source_dimensions() -> None:
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    frame[:10, :, :] = 255  # franja superior

    tensor = FramePreprocessor(256, rotation_deg=90).prepare(frame)

    assert tensor.transform.source_width == 480
    assert tensor.transform.source_height == 640
    # Tras girar 90° en sentido horario la franja superior queda a la derecha.
    content = tensor.image[:, tensor.transform.pad_x : 256 - tensor.transform.pad_x]
    assert content[:, -1].max() == 255
    assert content[:, 0].max() == 0


@pytest.mark.parametrize("value", [45, -90, 360, 91])
def test_unsupported_rotation_is_rejected(value: int) -> None:
    with pytest.raises(ValueError):
        normalize_rotation_deg(value)


def test_inverse_mapping_lands_on_reference_frame() -> None:
    transform = FramePreprocessor(256, reference_size=(640, 480)).prepare(_frame(480, 640)).transform

    assert transform.to_reference(0.5, 0.5) == pytest.approx((320.0, 240.0))
    assert transform.to_reference(0.0, 32 / 256) == pytest.approx((0.0, 0.0))
    assert transform.to_reference(1.0, 224 / 256) == pytest.approx((640.0, 480.0))
    # Las bandas negras se recortan al borde del fotograma.
    assert transform.to_reference(0.5, 0.0)[1] == pytest.approx(0.0)


def test_reference_coordinates_do_not_depend_on_capture_resolution() -> None:
    preprocessor = FramePreprocessor(256, reference_size=(640, 480))
    small = preprocessor.prepare(_frame(480, 640)).transform
    large = preprocessor.prepare(_frame(960, 1280)).transform

    for point in [(0.25, 0.3), (0.5, 0.5), (0.8, 0.7)]:
        assert small.to_reference(*point) == pytest.approx(large.to_reference(*point))


def test_to_frame_space_maps_keypoints_and_keeps_missing_ones() -> None:
    preprocessor = FramePreprocessor(256, resize_mode="stretch")
    tensor = preprocessor.prepare(_frame(480, 640))
    pose = Pose.from_points({"left_eye": (0.5, 0.25, 0.9)}, space=SPACE_INPUT)

    mapped = preprocessor.to_frame_space(pose, tensor)

    assert mapped.space == SPACE_FRAME
    assert (mapped["left_eye"].x, mapped["left_eye"].y) == pytest.approx((320.0, 120.0))
    assert mapped["left_eye"].confidence == pytest.approx(0.9)
    assert np.isnan(mapped["right_eye"].y)
    assert preprocessor.to_frame_space(mapped) is mapped


def test_to_frame_space_requires_a_transform() -> None:
    pose = Pose.from_points({"left_eye": (0.5, 0.5, 1.0)}, space=SPACE_INPUT)

    with pytest.raises(ValueError):
        FramePreprocessor(256).to_frame_space(pose)


def test_from_config_uses_camera_and_pose_sections() -> None:
    cfg = load_default().with_updates(
        {"camera": {"rotation_deg": 180, "frame_width": 320, "frame_height": 240}, "pose": {"resize_mode": "stretch"}}
    )

    preprocessor = FramePreprocessor.from_config(cfg)

    assert preprocessor.input_size == cfg.pose.model_input_size
    assert preprocessor.rotation_deg == 180
    assert preprocessor.resize_mode == "stretch"
    assert preprocessor.reference_size == (320, 240)
