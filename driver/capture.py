"""Synchronous single-shot cloud capture that preserves streaming state."""

from __future__ import annotations

from dataclasses import dataclass, field

from utils.error_tracker import (
    CameraError,
    CaptureFailedError,
    DeviceError,
)
from utils.logger import Logger, LoggerType
from .converter import FrameConverter
from .models import PointCloudXYZ
from .session import DeviceSession


@dataclass
class SingleShotCapture:
    """
    Pause streaming, grab one cloud, resume.

    The capture primitive bypasses the callback binding entirely, so the
    binding attached before the call is the one attached after it. A running
    session is resumed even when the capture fails.
    """

    session: DeviceSession
    converter: FrameConverter
    logger: LoggerType = field(
        default_factory=lambda: Logger.get_logger("driver.capture")
    )

    def capture(self) -> PointCloudXYZ:
        with self.session.lock:
            was_running = self.session.is_streaming
            if was_running:
                self.session.stop()
            try:
                cloud = self._grab()
            except DeviceError as e:
                self.logger.error(f"Single cloud capture failed: {e}")
                if was_running:
                    self._resume(cause=e)
                raise
            if was_running:
                self._resume()
            self.logger.info(f"Captured single cloud: {len(cloud)} points")
            return cloud

    def _grab(self) -> PointCloudXYZ:
        # Any failure of the grab or the conversion surfaces as a DeviceError
        try:
            return self.converter.to_cloud(self.session.grab_single_cloud())
        except DeviceError:
            raise
        except CameraError as e:
            raise CaptureFailedError(str(e)) from e
        except Exception as e:
            raise CaptureFailedError(f"{type(e).__name__}: {e}") from e

    def _resume(self, cause: DeviceError | None = None) -> None:
        try:
            self.session.start(allow_unbound=True)
        except DeviceError as e:
            self.logger.critical(
                f"Streaming could not be restored after single capture: {e}"
            )
            if cause is not None:
                raise e from cause
            raise
