"""Neutral data products and driver state types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np

from utils.error_tracker import InvalidCombinationError


class RunState(Enum):
    """Whether the device is pushing frames."""

    IDLE = "idle"
    STREAMING = "streaming"


class CallbackBinding(Enum):
    """The single frame-delivery contract attached to the device."""

    NONE = "none"
    CLOUD_ONLY = "cloud_only"
    IMAGES_ONLY = "images_only"
    CLOUD_AND_IMAGES = "cloud_and_images"

    @property
    def wants_cloud(self) -> bool:
        return self in (CallbackBinding.CLOUD_ONLY, CallbackBinding.CLOUD_AND_IMAGES)

    @property
    def wants_images(self) -> bool:
        return self in (
            CallbackBinding.IMAGES_ONLY,
            CallbackBinding.CLOUD_AND_IMAGES,
        )


@dataclass(frozen=True)
class OutputRequest:
    """Requested output combination of a reconfiguration."""

    want_cloud: bool = False
    want_images: bool = False

    def __post_init__(self) -> None:
        for name in ("want_cloud", "want_images"):
            if not isinstance(getattr(self, name), (bool, np.bool_)):
                raise InvalidCombinationError(
                    f"{name} must be a boolean, got {getattr(self, name)!r}"
                )

    def binding(self) -> CallbackBinding:
        """Reduce the two flags to a binding; first match wins."""
        if self.want_cloud and self.want_images:
            return CallbackBinding.CLOUD_AND_IMAGES
        if self.want_images:
            return CallbackBinding.IMAGES_ONLY
        if self.want_cloud:
            return CallbackBinding.CLOUD_ONLY
        return CallbackBinding.NONE


class ChannelLayout(Enum):
    """Pixel layout of a neutral image; all layouts are 8 bits per channel."""

    MONO8 = "mono8"
    BGR8 = "bgr8"

    @property
    def channels(self) -> int:
        return 3 if self is ChannelLayout.BGR8 else 1


@dataclass(frozen=True)
class NeutralImage:
    """Transport-agnostic image produced by the frame converter."""

    width: int
    height: int
    layout: ChannelLayout
    data: bytes
    stamp: float
    frame_id: str

    @property
    def encoding(self) -> str:
        return self.layout.value

    @property
    def step(self) -> int:
        """Row length in bytes."""
        return self.width * self.layout.channels

    def to_array(self) -> np.ndarray:
        """Return a read-only numpy view over ``data`` without copying."""
        arr = np.frombuffer(self.data, dtype=np.uint8)
        expected = self.height * self.step
        if arr.size != expected:
            raise ValueError(
                f"Buffer holds {arr.size} bytes, expected {expected} "
                f"for {self.width}x{self.height} {self.encoding}"
            )
        if self.layout is ChannelLayout.BGR8:
            return arr.reshape(self.height, self.width, 3)
        return arr.reshape(self.height, self.width)


@dataclass(frozen=True)
class PointCloudXYZ:
    """Ordered XYZ cloud with frame of reference and timestamp."""

    points: np.ndarray
    frame_id: str
    stamp: float

    def __len__(self) -> int:
        return int(self.points.shape[0])
