"""Conversion of vendor-native frames into neutral products."""

from __future__ import annotations

import time
from dataclasses import dataclass, field, replace
from typing import Callable

import numpy as np

from utils.settings import ENCODING_BGR
from vision.camera import CameraInfo, RawImage
from vision.pointcloud import PointCloudGenerator
from .models import ChannelLayout, NeutralImage, PointCloudXYZ


def layout_for(encoding: str) -> ChannelLayout:
    """Map a native encoding tag to a channel layout."""
    if encoding == ENCODING_BGR:
        return ChannelLayout.BGR8
    return ChannelLayout.MONO8


@dataclass
class FrameConverter:
    """
    Stamp and wrap vendor frames.

    Every product gets ``frame_id`` and the time of conversion, not the time
    of capture. Image bytes are passed through untouched.
    """

    frame_id: str
    clock: Callable[[], float] = field(default=time.time)

    def to_image(self, raw: RawImage) -> NeutralImage:
        return NeutralImage(
            width=raw.width,
            height=raw.height,
            layout=layout_for(raw.encoding),
            data=raw.data,
            stamp=self.clock(),
            frame_id=self.frame_id,
        )

    def to_cloud(self, points: np.ndarray) -> PointCloudXYZ:
        return PointCloudXYZ(
            points=PointCloudGenerator.as_xyz(points),
            frame_id=self.frame_id,
            stamp=self.clock(),
        )

    def to_camera_info(self, info: CameraInfo) -> CameraInfo:
        return replace(info, frame_id=self.frame_id, stamp=self.clock())
