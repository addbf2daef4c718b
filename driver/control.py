"""External control operations of the driver."""

from __future__ import annotations

from dataclasses import dataclass, field

from utils.error_tracker import DeviceError, RequestError
from utils.logger import Logger, LoggerType
from .capture import SingleShotCapture
from .models import CallbackBinding, OutputRequest, PointCloudXYZ, RunState
from .router import StreamingModeRouter
from .session import DeviceSession


@dataclass
class ControlSurface:
    """
    Service-style entry points: reconfigure, start/stop, single capture.

    Calls are serialized on the session lock. Failures are logged and
    reported as ``False``; nothing is raised to the caller.
    """

    session: DeviceSession
    router: StreamingModeRouter
    single_shot: SingleShotCapture
    logger: LoggerType = field(
        default_factory=lambda: Logger.get_logger("driver.control")
    )

    def reconfigure(self, want_cloud: bool, want_images: bool) -> bool:
        """Select the outputs produced while streaming."""
        with self.session.lock:
            try:
                self.router.reconfigure(OutputRequest(want_cloud, want_images))
            except RequestError as e:
                self.logger.error(f"Rejected stream configuration: {e}")
                return False
            except DeviceError as e:
                self.logger.error(f"Stream configuration failed: {e}")
                return False
            return True

    def set_streaming(self, enabled: bool) -> bool:
        """Start or stop the device without touching the binding."""
        with self.session.lock:
            try:
                if enabled:
                    self.session.start()
                else:
                    self.session.stop()
            except DeviceError as e:
                self.logger.error(
                    f"Failed to {'start' if enabled else 'stop'} streaming: {e}"
                )
                return False
            return True

    def capture_single_cloud(
        self, trigger: bool
    ) -> tuple[bool, PointCloudXYZ | None]:
        """Grab one cloud synchronously; ``trigger=False`` is a no-op."""
        if not trigger:
            return False, None
        with self.session.lock:
            try:
                return True, self.single_shot.capture()
            except DeviceError as e:
                self.logger.error(f"Single cloud request failed: {e}")
                return False, None

    def status(self) -> tuple[RunState, CallbackBinding]:
        with self.session.lock:
            return self.session.state, self.router.binding

    def close(self) -> None:
        with self.session.lock:
            self.session.close()
            self.router.reconfigure(OutputRequest())

    def __enter__(self) -> "ControlSurface":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
