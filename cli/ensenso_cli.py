# cli/ensenso_cli.py
"""Command line tools for the Ensenso camera: list, capture, calibrate."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Callable, Optional

import numpy as np

from ensenso_cam import EnsensoCamera, Rect, Runtime, list_devices, save_point_cloud
from utils.cli import Command, CommandDispatcher
from utils.config import Config
from utils.io import save_npy, save_pose_json, write_image
from utils.logger import CaptureStderrToLogger, Logger
from utils.settings import CLOUD_EXT, IMAGE_EXT, POINTS_EXT

RuntimeFactory = Callable[[], Runtime]

logger = Logger.get_logger("cli.ensenso")


def _default_runtime() -> Runtime:
    from ensenso_cam.nxlib_backend import NxLibRuntime

    return NxLibRuntime()


def _add_camera_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--overlay",
        action="store_true",
        default=None,
        help="Also open the first monocular overlay camera",
    )
    parser.add_argument("--params", help="JSON parameter file applied after connect")
    parser.add_argument("--timeout", type=int, help="Capture timeout in ms")


def _add_capture_args(parser: argparse.ArgumentParser) -> None:
    _add_camera_args(parser)
    parser.add_argument(
        "--roi",
        type=int,
        nargs=4,
        metavar=("X", "Y", "W", "H"),
        help="Disparity area of interest",
    )
    parser.add_argument("--output-dir", help="Directory for the saved capture")


def _add_calibrate_args(parser: argparse.ArgumentParser) -> None:
    _add_camera_args(parser)
    parser.add_argument("--patterns", type=int, help="Number of pattern views")
    parser.add_argument("--output", help="Output JSON file for the pattern pose")


def _open_camera(args: argparse.Namespace, factory: RuntimeFactory) -> EnsensoCamera:
    cfg = Config.camera_settings()
    require_overlay = args.overlay if args.overlay is not None else cfg["require_overlay"]
    return EnsensoCamera(
        runtime=factory(),
        require_overlay=require_overlay,
        timeout_ms=args.timeout if args.timeout is not None else cfg["timeout_ms"],
        logger=logger,
    )


def _apply_params(cam: EnsensoCamera, args: argparse.Namespace) -> None:
    params = args.params or Config.get("ensenso.parameters_file")
    if params:
        cam.load_parameters(params)


def build_dispatcher(factory: RuntimeFactory = _default_runtime) -> CommandDispatcher:
    """Create the CLI with ``factory`` providing the vendor runtime."""

    def devices(args: argparse.Namespace) -> None:
        runtime = factory()
        runtime.open()
        try:
            found = list_devices(runtime)
        finally:
            runtime.close()
        if not found:
            logger.warning("No cameras found")
        for dev in found:
            logger.info(f"{dev.serial}\t{dev.type}\t{dev.model or '-'}")

    def capture(args: argparse.Namespace) -> None:
        out_dir = Path(args.output_dir or Config.camera_settings()["output_dir"])
        roi = Rect.from_sequence(args.roi) if args.roi else None
        with _open_camera(args, factory) as cam:
            _apply_params(cam, args)
            image, grid = cam.get_frames(roi=roi)
        if image is None or grid is None:
            logger.error("Capture failed, nothing saved")
            raise SystemExit(1)
        has_points = bool(np.isfinite(grid).all(axis=2).any())
        write_image(out_dir / f"intensity{IMAGE_EXT}", image)
        save_npy(out_dir / f"points{POINTS_EXT}", grid)
        if not has_points:
            logger.warning(f"No valid depth in capture, skipped {CLOUD_EXT} in {out_dir}")
            return
        colors = image if image.shape[:2] == grid.shape[:2] else None
        n = save_point_cloud(out_dir / f"cloud{CLOUD_EXT}", grid, colors)
        logger.info(f"Saved capture with {n} points to {out_dir}")

    def calibrate(args: argparse.Namespace) -> None:
        cfg = Config.camera_settings()
        output = Path(args.output or cfg["calib_output"])
        with _open_camera(args, factory) as cam:
            _apply_params(cam, args)
            pose = cam.calibrate(
                args.patterns if args.patterns is not None else cfg["num_patterns"]
            )
        save_pose_json(output, pose)
        logger.info(f"Pattern pose saved to {output}")

    return CommandDispatcher(
        description="Ensenso stereo camera tools",
        commands=[
            Command("devices", devices, help="List connected cameras"),
            Command(
                "capture",
                capture,
                _add_capture_args,
                help="Save intensity image and point cloud",
            ),
            Command(
                "calibrate",
                calibrate,
                _add_calibrate_args,
                help="Estimate the calibration pattern pose",
            ),
        ],
    )


def main(args: Optional[list[str]] = None) -> None:
    Config.load()
    with CaptureStderrToLogger(logger):
        build_dispatcher().run(args, logger=logger)


if __name__ == "__main__":
    main()
