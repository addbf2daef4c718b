"""Simulated stereo camera producing synthetic frames.

Used for development without hardware and as the device double in tests.
With ``fps > 0`` frames are pushed from a background thread like a vendor
grabber does; with ``fps == 0`` nothing is pushed until :meth:`trigger`
is called.
"""

from __future__ import annotations

import threading
from collections import Counter
from typing import Dict

import numpy as np

from utils.error_tracker import CameraConnectionError, CameraError
from utils.logger import Logger, LoggerType
from utils.settings import ENCODING_BGR, SimulatorCfg, simulator
from .camera_base import (
    CameraInfo,
    Connection,
    FrameCallback,
    RawFramePair,
    RawImage,
    StereoCamera,
    StereoFrame,
    StreamProducts,
)

# Serial numbers the simulator pretends to be connected
DEFAULT_SERIALS = ("160824",)

# Serials currently claimed by any simulator in this process
_claimed: set[str] = set()
_claimed_lock = threading.Lock()


class SimulatedStereoCamera(StereoCamera):
    """Stereo camera double with call accounting and failure injection."""

    def __init__(
        self,
        cfg: SimulatorCfg | None = None,
        *,
        serials: tuple[str, ...] = DEFAULT_SERIALS,
        encoding: str = "CV_8UC1",
        fps: float | None = None,
        seed: int = 0,
        logger: LoggerType | None = None,
    ) -> None:
        self.cfg = cfg or simulator
        self.serials = serials
        self.encoding = encoding
        self.fps = self.cfg.fps if fps is None else fps
        self.logger = logger or Logger.get_logger("vision.simulated")
        self.calls: Counter[str] = Counter()
        self.fail_capture = False
        self.fail_start = False
        self.fail_stop = False
        self.serial: str | None = None
        self.tcp_port: int | None = None
        self.projector = False
        self.front_light = False
        self.configured = False
        self._rng = np.random.default_rng(seed)
        self._callbacks: Dict[Connection, tuple[StreamProducts, FrameCallback]] = {}
        self._lock = threading.Lock()
        self._running = False
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    # Device ownership

    def open_device(self, serial: str) -> None:
        self.calls["open_device"] += 1
        if serial not in self.serials:
            raise CameraConnectionError(f"No device with serial {serial}")
        with _claimed_lock:
            if serial in _claimed:
                raise CameraConnectionError(f"Device {serial} is already open")
            _claimed.add(serial)
        self.serial = serial
        self.logger.info(f"Simulated device {serial} opened")

    def close_device(self) -> None:
        self.calls["close_device"] += 1
        if self.serial is None:
            return
        with _claimed_lock:
            _claimed.discard(self.serial)
        self.logger.info(f"Simulated device {self.serial} closed")
        self.serial = None

    def open_tcp_port(self, port: int) -> None:
        self.calls["open_tcp_port"] += 1
        self.tcp_port = port

    def close_tcp_port(self) -> None:
        self.calls["close_tcp_port"] += 1
        self.tcp_port = None

    # Hardware toggles

    def configure_capture(self) -> None:
        self.calls["configure_capture"] += 1
        self.configured = True

    def enable_projector(self, enable: bool) -> None:
        self.calls["enable_projector"] += 1
        self.projector = enable

    def enable_front_light(self, enable: bool) -> None:
        self.calls["enable_front_light"] += 1
        self.front_light = enable

    # Streaming

    def start(self) -> None:
        self.calls["start"] += 1
        if self.fail_start:
            raise CameraError("Simulated start failure")
        if self._running:
            return
        self._running = True
        if self.fps > 0:
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._loop, name="sim-grabber", daemon=True
            )
            self._thread.start()

    def stop(self) -> None:
        self.calls["stop"] += 1
        if self.fail_stop:
            raise CameraError("Simulated stop failure")
        if not self._running:
            return
        self._running = False
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._thread = None

    def is_running(self) -> bool:
        return self._running

    def register_callback(
        self, products: StreamProducts, callback: FrameCallback
    ) -> Connection:
        self.calls["register_callback"] += 1
        conn = Connection(self._disconnect)
        with self._lock:
            self._callbacks[conn] = (products, callback)
        return conn

    def _disconnect(self, conn: Connection) -> None:
        self.calls["disconnect"] += 1
        with self._lock:
            self._callbacks.pop(conn, None)

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._callbacks)

    def _loop(self) -> None:
        period = 1.0 / self.fps
        while not self._stop_event.wait(period):
            self.trigger()

    def trigger(self, force: bool = False) -> int:
        """
        Push one frame to every registered callback.

        Frames are only pushed while running unless ``force`` is set, which
        mimics a delivery racing a stop. Returns the number of callbacks
        invoked.
        """
        if not (self._running or force):
            return 0
        with self._lock:
            targets = list(self._callbacks.values())
        for products, callback in targets:
            callback(self._make_frame(products))
        return len(targets)

    # Synchronous capture and calibration

    def grab_single_cloud(self) -> np.ndarray:
        self.calls["grab_single_cloud"] += 1
        if self.serial is None or self.fail_capture:
            raise CameraError("Device not open!")
        return self._make_cloud()

    def get_camera_info(self, side: str) -> CameraInfo:
        self.calls["get_camera_info"] += 1
        if side not in ("Left", "Right"):
            raise ValueError(f"Unknown stereo side: {side}")
        c = self.cfg
        cx, cy = c.width / 2.0, c.height / 2.0
        K = np.array([[c.fx, 0.0, cx], [0.0, c.fy, cy], [0.0, 0.0, 1.0]])
        P = np.zeros((3, 4))
        P[:3, :3] = K
        if side == "Right":
            P[0, 3] = -c.fx * c.baseline
        return CameraInfo(width=c.width, height=c.height, K=K, D=np.zeros(5), P=P)

    # Synthetic data

    def _make_frame(self, products: StreamProducts) -> StereoFrame:
        frame = StereoFrame()
        if products.cloud:
            frame.cloud = self._make_cloud()
        if products.images:
            frame.raw = self._make_pair(rectified=False)
            frame.rectified = self._make_pair(rectified=True)
        return frame

    def _make_cloud(self) -> np.ndarray:
        c = self.cfg
        n = c.cloud_points
        z = self._rng.uniform(*c.depth_range, size=n)
        u = self._rng.uniform(0, c.width, size=n)
        v = self._rng.uniform(0, c.height, size=n)
        x = (u - c.width / 2.0) * z / c.fx
        y = (v - c.height / 2.0) * z / c.fy
        return np.stack((x, y, z), axis=1).astype(np.float32)

    def _make_pair(self, rectified: bool) -> RawFramePair:
        return RawFramePair(
            left=self._make_image(shift=0, rectified=rectified),
            right=self._make_image(shift=8, rectified=rectified),
        )

    def _make_image(self, shift: int, rectified: bool) -> RawImage:
        c = self.cfg
        ramp = (np.arange(c.width, dtype=np.uint16) + shift) % 256
        img = np.tile(ramp.astype(np.uint8), (c.height, 1))
        if rectified:
            img = 255 - img
        if self.encoding == ENCODING_BGR:
            img = np.dstack((img, img, img))
        return RawImage(
            width=c.width,
            height=c.height,
            encoding=self.encoding,
            data=np.ascontiguousarray(img).tobytes(),
        )
