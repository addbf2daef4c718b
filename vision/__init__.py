"""Camera interfaces and 3D vision helpers.

The vision package contains the stereo camera grabber contract, a simulated
grabber and point cloud tools. Open3D is leveraged to convert and store the
XYZ clouds produced by the driver.
"""

from .camera import SimulatedStereoCamera, StereoCamera
from .pointcloud.generator import PointCloudGenerator


__all__ = [
    "SimulatedStereoCamera",
    "StereoCamera",
    "PointCloudGenerator",
]
