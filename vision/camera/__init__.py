"""Camera driver interfaces.

This subpackage defines the abstract :class:`StereoCamera` grabber contract,
the vendor-native frame types it delivers and a simulated implementation.
Hardware backends can be added by subclassing :class:`StereoCamera`.
"""

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
from .simulated import SimulatedStereoCamera

__all__ = [
    "CameraInfo",
    "Connection",
    "FrameCallback",
    "RawFramePair",
    "RawImage",
    "StereoCamera",
    "StereoFrame",
    "StreamProducts",
    "SimulatedStereoCamera",
]
