"""Exclusive ownership and run/idle control of one stereo camera."""

from __future__ import annotations

import threading
from typing import Callable

import numpy as np

from utils.error_tracker import (
    CameraError,
    ConfigureFailedError,
    DeviceBusyError,
    ErrorTracker,
    NotOpenError,
    OpenFailedError,
    StartFailedError,
    StopFailedError,
)
from utils.logger import Logger, LoggerType
from vision.camera import (
    CameraInfo,
    Connection,
    FrameCallback,
    StereoCamera,
    StereoFrame,
    StreamProducts,
)
from .models import RunState


class DeviceSession:
    """
    Owns the camera handle and the single frame-delivery connection.

    Hardware toggles are only accepted while idle. Frames reach the attached
    callback through a guard that drops deliveries from a detached connection
    and deliveries arriving while the session is not streaming, so a stale
    callback can never publish. :meth:`stop` returns only after in-flight
    callbacks have finished; called from inside a callback it returns without
    waiting, since that callback is itself in flight.

    Vendor :class:`CameraError` failures are re-raised as :class:`DeviceError`
    subclasses.
    """

    def __init__(
        self, camera: StereoCamera, logger: LoggerType | None = None
    ) -> None:
        self.camera = camera
        self.logger = logger or Logger.get_logger("driver.session")
        self.lock = threading.RLock()
        self.device_id: str | None = None
        self._tcp_open = False
        self._state = RunState.IDLE
        self._connection: Connection | None = None
        self._generation = 0
        self._inflight = 0
        self._delivery = threading.Condition()
        self._delivering = threading.local()

    # Ownership

    @property
    def is_open(self) -> bool:
        return self.device_id is not None

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def is_streaming(self) -> bool:
        return self._state is RunState.STREAMING

    @property
    def is_bound(self) -> bool:
        return self._connection is not None

    def open(self, device_id: str, tcp_port: int = 0) -> None:
        """Claim the device; ``tcp_port`` of 0 leaves the TCP port closed."""
        with self.lock:
            if self.is_open:
                raise OpenFailedError(
                    f"Session already holds device {self.device_id}"
                )
            try:
                self.camera.open_device(device_id)
            except CameraError as e:
                self.logger.error(f"Failed to open device {device_id}: {e}")
                raise OpenFailedError(str(e)) from e
            self.device_id = device_id
            self.logger = Logger.for_device(self.logger, device_id)
            if tcp_port:
                try:
                    self.camera.open_tcp_port(tcp_port)
                    self._tcp_open = True
                except CameraError as e:
                    self.logger.warning(f"TCP port {tcp_port} not opened: {e}")
            ErrorTracker.register_cleanup(self.close)
            self.logger.info(f"Device {device_id} opened")

    def close(self) -> None:
        """Stop streaming and release the device; safe in any state."""
        with self.lock:
            if not self.is_open:
                return
            try:
                self.stop()
            except StopFailedError:
                with self._delivery:
                    self._state = RunState.IDLE
            self.detach()
            if self._tcp_open:
                self.camera.close_tcp_port()
                self._tcp_open = False
            self.camera.close_device()
            self.logger.info(f"Device {self.device_id} closed")
            self.device_id = None
            ErrorTracker.unregister_cleanup(self.close)

    def __enter__(self) -> "DeviceSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "device_id", None) is None:
            return
        try:
            self.close()
        except Exception as e:
            self.logger.error(f"Release on garbage collection failed: {e}")

    # Hardware toggles

    def _require_idle(self, what: str) -> None:
        if not self.is_open:
            raise NotOpenError(f"Cannot {what}: no device open")
        if self.is_streaming:
            raise DeviceBusyError(f"Cannot {what} while streaming")

    def _apply(self, what: str, action: Callable[[], None]) -> None:
        with self.lock:
            self._require_idle(what)
            try:
                action()
            except CameraError as e:
                self.logger.error(f"Device refused to {what}: {e}")
                raise ConfigureFailedError(f"Cannot {what}: {e}") from e

    def configure_capture(self) -> None:
        self._apply("configure capture", self.camera.configure_capture)

    def set_projector(self, enable: bool) -> None:
        self._apply(
            "switch projector", lambda: self.camera.enable_projector(enable)
        )
        self.logger.info(f"Projector {'on' if enable else 'off'}")

    def set_front_light(self, enable: bool) -> None:
        self._apply(
            "switch front light", lambda: self.camera.enable_front_light(enable)
        )
        self.logger.info(f"Front light {'on' if enable else 'off'}")

    # Run state

    def start(self, allow_unbound: bool = False) -> None:
        """
        Enter streaming.

        Streaming without an attached callback is refused unless
        ``allow_unbound`` is set, which is how an interrupted session is
        resumed into its previous state.
        """
        with self.lock:
            if not self.is_open:
                raise NotOpenError("Cannot start: no device open")
            if self.is_streaming:
                return
            if not self.is_bound and not allow_unbound:
                raise StartFailedError("Cannot start: no callback attached")
            with self._delivery:
                self._state = RunState.STREAMING
            try:
                self.camera.start()
            except CameraError as e:
                with self._delivery:
                    self._state = RunState.IDLE
                self.logger.error(f"Device refused to start: {e}")
                raise StartFailedError(str(e)) from e
            self.logger.debug("Streaming started")

    def stop(self) -> None:
        """
        Leave streaming and wait for in-flight callbacks; idempotent.

        When the device refuses to stop the session stays Streaming, because
        frames may still arrive. A callback may stop the session it is
        running under; the wait is skipped on the delivery thread.
        """
        with self.lock:
            if not self.is_streaming:
                return
            with self._delivery:
                self._state = RunState.IDLE
            try:
                self.camera.stop()
            except CameraError as e:
                with self._delivery:
                    self._state = RunState.STREAMING
                self.logger.error(f"Device refused to stop: {e}")
                raise StopFailedError(str(e)) from e
            if not getattr(self._delivering, "active", False):
                with self._delivery:
                    self._delivery.wait_for(lambda: self._inflight == 0)
            self.logger.debug("Streaming stopped")

    # Frame delivery

    def attach(self, products: StreamProducts, callback: FrameCallback) -> None:
        """Register ``callback`` as the only receiver of device frames."""
        with self.lock:
            if not self.is_open:
                raise NotOpenError("Cannot attach: no device open")
            self.detach()
            with self._delivery:
                self._generation += 1
                generation = self._generation
            try:
                self._connection = self.camera.register_callback(
                    products, self._guard(generation, callback)
                )
            except CameraError as e:
                self.logger.error(f"Callback registration rejected: {e}")
                raise ConfigureFailedError(
                    f"Cannot register callback: {e}"
                ) from e

    def detach(self) -> None:
        with self.lock:
            if self._connection is None:
                return
            with self._delivery:
                self._generation += 1
            self._connection.disconnect()
            self._connection = None

    def _guard(
        self, generation: int, callback: FrameCallback
    ) -> Callable[[StereoFrame], None]:
        def deliver(frame: StereoFrame) -> None:
            with self._delivery:
                if generation != self._generation or not self.is_streaming:
                    return
                self._inflight += 1
            self._delivering.active = True
            try:
                callback(frame)
            finally:
                self._delivering.active = False
                with self._delivery:
                    self._inflight -= 1
                    self._delivery.notify_all()

        return deliver

    # Synchronous device access

    def grab_single_cloud(self) -> np.ndarray:
        with self.lock:
            if not self.is_open:
                raise NotOpenError("Cannot capture: no device open")
            return self.camera.grab_single_cloud()

    def camera_info(self, side: str) -> CameraInfo:
        return self.camera.get_camera_info(side)
