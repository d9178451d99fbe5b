"""Command-line runner for the live posture monitor."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

import cv2
import numpy as np

from posture_guard import config
from posture_guard.B_pose_estimation.estimators import MediaPipeLandmarkExtractor
from posture_guard.config.constants import DEFAULT_CONFIG_PATH
from posture_guard.C_analysis.pipeline import PipelineOutcome, PosturePipeline
from posture_guard.C_analysis.streaming import FrameGrabber, LatestFrameSlot, run_monitor_loop
from posture_guard.core.errors import InferenceBackendUnavailable, TensorShapeError
from posture_guard.core.types import CalibrationStatus, PostureStatus
from posture_guard.D_visualization import OverlayFader, render_debug_frame

LOGGER = logging.getLogger(__name__)
WINDOW_TITLE = f"{config.APP_NAME} - Monitor"
RESET_KEYS = {ord("r"), ord("R")}
QUIT_KEYS = {ord("q"), ord("Q"), 27}


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:  # pragma: no cover - defensive guard
        raise argparse.ArgumentTypeError(f"{value!r} no es un entero válido") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError("El valor debe ser un entero positivo")
    return number


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError as exc:  # pragma: no cover - defensive guard
        raise argparse.ArgumentTypeError(f"{value!r} no es un número válido") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError("El valor debe ser mayor que 0")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Monitors posture from a webcam and warns when you slouch.",
    )
    parser.add_argument("--camera", type=int, default=None, help="Camera index for cv2.VideoCapture.")
    parser.add_argument("--config", default=None, help="Optional YAML file merged over the defaults.")
    parser.add_argument(
        "--rotate",
        type=int,
        choices=config.SUPPORTED_ROTATIONS,
        default=None,
        help="Fixed clockwise camera rotation in degrees.",
    )
    parser.add_argument(
        "--threshold",
        type=_positive_float,
        default=None,
        help="Deviation (reference pixels) above which a frame counts as slouching.",
    )
    parser.add_argument(
        "--debounce",
        type=_positive_int,
        default=None,
        help="Consecutive slouching frames required before warning.",
    )
    parser.add_argument(
        "--no-window",
        action="store_true",
        help="Run without the debug window. Keys r (recalibrate) and q (quit) need the window; use Ctrl+C to stop.",
    )
    parser.add_argument("--verbose", action="store_true", help="Show detailed log messages.")
    return parser


def _configure_logging(verbose: bool) -> None:
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format="[%(levelname)s] %(name)s: %(message)s")


def build_config(args: argparse.Namespace) -> config.Config:
    config_path = Path(args.config).expanduser() if args.config else DEFAULT_CONFIG_PATH
    cfg = config.from_yaml(config_path) if config_path.is_file() else config.load_default()
    updates: dict[str, dict[str, object]] = {"camera": {}, "posture": {}, "overlay": {}}
    if args.camera is not None:
        updates["camera"]["index"] = int(args.camera)
    if args.rotate is not None:
        updates["camera"]["rotation_deg"] = int(args.rotate)
    if args.threshold is not None:
        updates["posture"]["threshold_px"] = float(args.threshold)
    if args.debounce is not None:
        updates["posture"]["debounce_frames"] = int(args.debounce)
    if args.no_window:
        updates["overlay"]["show_window"] = False
    return cfg.with_updates(updates)


class MonitorSession:
    """Consumes pipeline outcomes: logs, fades the veil and drives the window."""

    def __init__(self, cfg: config.Config, pipeline: PosturePipeline) -> None:
        self.cfg = cfg
        self.pipeline = pipeline
        self.fader = OverlayFader.from_config(cfg)
        self.show_window = bool(cfg.overlay.show_window)
        self.stop_requested = False
        self._last_status: Optional[PostureStatus] = None

    def handle_key(self, key: int) -> None:
        if key in RESET_KEYS:
            self.pipeline.reset_baseline()
            print("Posture reset!")
        elif key in QUIT_KEYS:
            self.stop_requested = True

    def __call__(self, outcome: PipelineOutcome, frame: np.ndarray) -> None:
        if outcome.skipped and outcome.error is not None:
            LOGGER.warning("Frame %d skipped: %s", outcome.frame_index, outcome.error)
        if outcome.calibration is CalibrationStatus.TIMED_OUT:
            LOGGER.warning("Calibration is waiting for a clearly visible face; sit in front of the camera")
        if outcome.auto_reset:
            LOGGER.warning("Tracking lost; recalibrating")
        if outcome.status is not self._last_status:
            print(f"Posture: {outcome.status.value}")
            self._last_status = outcome.status

        self.fader.set_target_visible(outcome.status is PostureStatus.BAD)
        self.fader.update()

        if not self.show_window:
            return
        view = render_debug_frame(
            frame,
            outcome,
            reference_size=(self.cfg.camera.frame_width, self.cfg.camera.frame_height),
            threshold_px=self.cfg.posture.threshold_px,
            rotation_deg=self.cfg.camera.rotation_deg,
            veil_opacity=self.fader.opacity,
            min_confidence=self.cfg.posture.min_confidence,
        )
        cv2.imshow(WINDOW_TITLE, view)
        key = cv2.waitKey(1) & 0xFF
        if key != 0xFF:
            self.handle_key(key)
        if cv2.getWindowProperty(WINDOW_TITLE, cv2.WND_PROP_VISIBLE) < 1:
            LOGGER.info("Debug window closed by user")
            self.stop_requested = True


def _open_camera(cfg: config.Config) -> cv2.VideoCapture:
    cap = cv2.VideoCapture(int(cfg.camera.index))
    if not cap.isOpened():
        cap.release()
        raise IOError(f"Could not open camera index {cfg.camera.index}")
    cap.set(cv2.CAP_PROP_FRAME_WIDTH, float(cfg.camera.frame_width))
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, float(cfg.camera.frame_height))
    return cap


def main(argv: Iterable[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    config.configure_environment()

    if args.config and not Path(args.config).expanduser().is_file():
        parser.error(f"Configuration file not found: {args.config}")

    try:
        cfg = build_config(args)
    except ValueError as exc:
        parser.error(str(exc))

    LOGGER.info("Configuration fingerprint: %s", cfg.fingerprint())

    try:
        cap = _open_camera(cfg)
    except IOError as exc:
        LOGGER.error("%s", exc)
        return 1

    slot = LatestFrameSlot()
    grabber = FrameGrabber(cap, slot, max_read_failures=cfg.camera.max_read_failures)
    extractor = MediaPipeLandmarkExtractor.from_config(cfg)
    exit_code = 0
    try:
        with PosturePipeline(cfg, extractor) as pipeline:
            session = MonitorSession(cfg, pipeline)
            grabber.start()
            print("Running... sit upright while calibrating. Press 'r' to recalibrate, 'q' to quit.")
            run_monitor_loop(slot, pipeline, session, should_stop=lambda: session.stop_requested)
        if grabber.failed:
            exit_code = 1
    except (InferenceBackendUnavailable, TensorShapeError):
        LOGGER.exception("Pose model is unusable; stopping")
        exit_code = 1
    except KeyboardInterrupt:  # pragma: no cover - interactive stop
        LOGGER.info("Interrupted by user")
    finally:
        grabber.stop()
        if grabber.is_alive():
            grabber.join(timeout=2.0)
        cap.release()
        if cfg.overlay.show_window:
            cv2.destroyAllWindows()

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
