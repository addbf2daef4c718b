"""Abstract stereo camera (vendor grabber) interface."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable

import numpy as np


@dataclass(frozen=True)
class RawImage:
    """Vendor-native image: geometry, encoding tag and untouched bytes."""

    width: int
    height: int
    encoding: str
    data: bytes


@dataclass(frozen=True)
class RawFramePair:
    """Left/right images of one stereo exposure."""

    left: RawImage
    right: RawImage


@dataclass
class CameraInfo:
    """
    Calibration metadata of one stereo eye.

    K is the 3x3 intrinsic matrix, D the distortion coefficients, R the 3x3
    rectification rotation and P the 3x4 projection matrix.
    """

    width: int
    height: int
    K: np.ndarray
    D: np.ndarray
    R: np.ndarray = field(default_factory=lambda: np.eye(3))
    P: np.ndarray = field(default_factory=lambda: np.zeros((3, 4)))
    distortion_model: str = "plumb_bob"
    frame_id: str = ""
    stamp: float = 0.0

    def to_dict(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "K": np.asarray(self.K).tolist(),
            "D": np.asarray(self.D).tolist(),
            "R": np.asarray(self.R).tolist(),
            "P": np.asarray(self.P).tolist(),
            "distortion_model": self.distortion_model,
            "frame_id": self.frame_id,
            "stamp": self.stamp,
        }


@dataclass(frozen=True)
class StreamProducts:
    """Which products the device computes for a registered callback."""

    cloud: bool = False
    images: bool = False


@dataclass
class StereoFrame:
    """
    One device delivery. Fields the registered products did not ask for
    are ``None``.
    """

    cloud: np.ndarray | None = None
    raw: RawFramePair | None = None
    rectified: RawFramePair | None = None


FrameCallback = Callable[[StereoFrame], None]


class Connection:
    """Handle of a registered frame callback."""

    def __init__(self, on_disconnect: Callable[["Connection"], None]) -> None:
        self._on_disconnect = on_disconnect
        self._lock = threading.Lock()
        self.connected = True

    def disconnect(self) -> None:
        """Detach the callback; safe to call more than once."""
        with self._lock:
            if not self.connected:
                return
            self.connected = False
        self._on_disconnect(self)


class StereoCamera(ABC):
    """Push-based stereo 3D camera as exposed by the vendor SDK."""

    @abstractmethod
    def open_device(self, serial: str) -> None:
        """Claim the device; raises :class:`CameraConnectionError` on failure."""

    @abstractmethod
    def close_device(self) -> None:
        """Release the device."""

    @abstractmethod
    def open_tcp_port(self, port: int) -> None:
        """Expose the device over the vendor TCP port."""

    @abstractmethod
    def close_tcp_port(self) -> None:
        """Close the vendor TCP port."""

    @abstractmethod
    def configure_capture(self) -> None:
        """Apply the default capture parameters."""

    @abstractmethod
    def enable_projector(self, enable: bool) -> None:
        """Switch the pattern projector."""

    @abstractmethod
    def enable_front_light(self, enable: bool) -> None:
        """Switch the front light."""

    @abstractmethod
    def start(self) -> None:
        """Start pushing frames to registered callbacks."""

    @abstractmethod
    def stop(self) -> None:
        """Stop pushing frames."""

    @abstractmethod
    def is_running(self) -> bool:
        """Return ``True`` while frames are pushed."""

    @abstractmethod
    def register_callback(
        self, products: StreamProducts, callback: FrameCallback
    ) -> Connection:
        """Deliver frames carrying ``products`` to ``callback``."""

    @abstractmethod
    def grab_single_cloud(self) -> np.ndarray:
        """Capture one (N, 3) float32 cloud synchronously."""

    @abstractmethod
    def get_camera_info(self, side: str) -> CameraInfo:
        """Return calibration of the ``"Left"`` or ``"Right"`` eye."""
