# cli/stereo_driver.py
"""Command line entry point of the stereo camera driver."""

from __future__ import annotations

import argparse
import time
from datetime import datetime
from pathlib import Path
from typing import Dict

from driver import DiskSink, DriverNode, LoggingSink, load_driver_params
from utils.cli import CameraFactory, Command, CommandDispatcher
from utils.logger import Logger
from utils.settings import CLOUD_EXT, paths
from vision.camera import SimulatedStereoCamera
from vision.pointcloud import PointCloudGenerator

# Camera backends selectable with --backend
BACKENDS: Dict[str, CameraFactory] = {
    "sim": lambda args: SimulatedStereoCamera(fps=args.fps),
}


def _make_node(args: argparse.Namespace, sink=None) -> DriverNode:
    return DriverNode(
        args.make_camera(), load_driver_params(), sink=sink or LoggingSink()
    )


def _run_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--cloud", action="store_true", help="Stream point clouds")
    parser.add_argument("--images", action="store_true", help="Stream stereo images")
    parser.add_argument(
        "--record", type=Path, default=None, help="Write products below this dir"
    )
    parser.add_argument(
        "--duration", type=float, default=0.0, help="Seconds to run (0: forever)"
    )


def _run(args: argparse.Namespace) -> None:
    logger = Logger.get_logger("cli.driver")
    sink = DiskSink(args.record) if args.record else LoggingSink()
    with _make_node(args, sink) as node:
        control = node.control
        if args.cloud or args.images:
            if not control.reconfigure(args.cloud, args.images):
                raise SystemExit(1)
        if not node.session.is_streaming and not control.set_streaming(True):
            raise SystemExit(1)
        state, binding = control.status()
        logger.info(f"Running: state={state.value} binding={binding.value}")
        start = time.monotonic()
        while not args.duration or time.monotonic() - start < args.duration:
            time.sleep(0.1)
        logger.info(f"Frames delivered: {node.router.frames_delivered}")


def _capture_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output", type=Path, default=paths.CLOUD_DIR, help="Output directory"
    )
    parser.add_argument("--count", type=int, default=1, help="Number of captures")


def _capture(args: argparse.Namespace) -> None:
    logger = Logger.get_logger("cli.driver")
    args.output.mkdir(parents=True, exist_ok=True)
    saved = 0
    with _make_node(args) as node:
        for i in Logger.progress(range(args.count), desc="Capture", total=args.count):
            ok, cloud = node.control.capture_single_cloud(True)
            if not ok:
                logger.error(f"Capture {i} failed")
                continue
            stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            path = args.output / f"cloud_{stamp}_{i:04d}{CLOUD_EXT}"
            PointCloudGenerator.save_ply(path, cloud.points)
            saved += 1
            logger.info(f"Saved point cloud: {path}")
    logger.info(f"Captured {saved}/{args.count} clouds")
    if saved < args.count:
        raise SystemExit(1)


def _info(args: argparse.Namespace) -> None:
    logger = Logger.get_logger("cli.driver")
    with _make_node(args) as node:
        for side in ("Left", "Right"):
            info = node.converter.to_camera_info(node.session.camera_info(side))
            logger.info(f"{side}: {info.to_dict()}")


def create_cli() -> CommandDispatcher:
    return CommandDispatcher(
        "Stereo 3D camera driver",
        [
            Command("run", _run, _run_args, "Stream products to a sink"),
            Command("capture", _capture, _capture_args, "Save single point clouds"),
            Command("info", _info, None, "Print camera calibration"),
        ],
        backends=BACKENDS,
    )


def main() -> None:
    create_cli().run()


if __name__ == "__main__":
    main()
