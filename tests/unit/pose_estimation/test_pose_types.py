from __future__ import annotations

import math

import pytest

from posture_guard.B_pose_estimation.constants import KEYPOINT_NAMES, SPACE_FRAME, SPACE_INPUT
from posture_guard.B_pose_estimation.types import Keypoint, Pose


def test_pose_always_contains_every_known_keypoint() -> None:
    pose = Pose.from_points({"nose": (0.5, 0.4, 0.8)})

    assert set(KEYPOINT_NAMES) <= set(pose)
    assert len(pose) == len(KEYPOINT_NAMES)
    assert pose.space == SPACE_INPUT
    assert pose["nose"].confidence == pytest.approx(0.8)
    assert math.isnan(pose["left_eye"].x)
    assert pose["left_eye"].confidence == 0.0


def test_keypoint_confidence_requires_finite_coordinates() -> None:
    assert Keypoint("nose", 1.0, 2.0, 0.5).is_confident(0.5)
    assert not Keypoint("nose", 1.0, 2.0, 0.49).is_confident(0.5)
    assert not Keypoint("nose", math.nan, 2.0, 0.9).is_confident(0.5)
    assert not Keypoint.missing("nose").is_confident(0.0 + 1e-9)


def test_confident_preserves_requested_order() -> None:
    pose = Pose.from_points(
        {"left_eye": (1.0, 1.0, 0.9), "right_eye": (2.0, 1.0, 0.1), "nose": (3.0, 3.0, 0.7)},
        space=SPACE_FRAME,
    )

    names = [kp.name for kp in pose.confident(["nose", "right_eye", "left_eye"], 0.3)]

    assert names == ["nose", "left_eye"]


def test_map_coordinates_skips_missing_points() -> None:
    pose = Pose.from_points({"left_eye": (0.5, 0.5, 1.0)})

    mapped = pose.map_coordinates(lambda x, y: (x * 2, y * 4))

    assert mapped.space == SPACE_FRAME
    assert (mapped["left_eye"].x, mapped["left_eye"].y) == (1.0, 2.0)
    assert math.isnan(mapped["right_eye"].x)
    assert pose["left_eye"].x == 0.5


def test_empty_pose_has_no_detection() -> None:
    assert not Pose.empty().has_detection()
    assert Pose.from_points({"nose": (0.0, 0.0, 0.2)}).has_detection()
    assert Pose.empty().get("unknown") is None
