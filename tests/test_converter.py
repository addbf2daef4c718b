import numpy as np
import pytest

from driver import ChannelLayout, FrameConverter, layout_for
from vision.camera import CameraInfo, RawImage


def test_bgr_tag_keeps_geometry_and_bytes():
    data = bytes(range(256)) * (640 * 480 * 3 // 256)
    raw = RawImage(width=640, height=480, encoding="CV_8UC3", data=data)
    img = FrameConverter("camera_link", clock=lambda: 5.0).to_image(raw)
    assert img.layout is ChannelLayout.BGR8
    assert img.encoding == "bgr8"
    assert (img.width, img.height) == (640, 480)
    assert img.data is data
    assert img.to_array().shape == (480, 640, 3)


def test_unknown_tag_is_mono():
    raw = RawImage(width=4, height=2, encoding="unknown", data=bytes(8))
    img = FrameConverter("camera_link").to_image(raw)
    assert img.layout is ChannelLayout.MONO8
    assert img.to_array().shape == (2, 4)


def test_layout_for_default_tags():
    assert layout_for("CV_8UC1") is ChannelLayout.MONO8
    assert layout_for("") is ChannelLayout.MONO8
    assert layout_for("CV_8UC3") is ChannelLayout.BGR8


def test_products_are_stamped_at_conversion():
    ticks = iter([1.0, 2.0, 3.0])
    conv = FrameConverter("rig", clock=lambda: next(ticks))
    img = conv.to_image(RawImage(1, 1, "CV_8UC1", b"\x00"))
    cloud = conv.to_cloud(np.zeros((3, 3)))
    info = conv.to_camera_info(CameraInfo(1, 1, K=np.eye(3), D=np.zeros(5)))
    assert (img.stamp, cloud.stamp, info.stamp) == (1.0, 2.0, 3.0)
    assert img.frame_id == cloud.frame_id == info.frame_id == "rig"


def test_cloud_is_float32_xyz_in_order():
    pts = np.array([[0, 0, 1], [np.nan, np.nan, np.nan], [1, 2, 3]], dtype=np.float64)
    cloud = FrameConverter("camera_link").to_cloud(pts)
    assert cloud.points.dtype == np.float32
    assert len(cloud) == 3
    assert np.allclose(cloud.points[2], [1, 2, 3])


def test_to_array_rejects_short_buffer():
    img = FrameConverter("camera_link").to_image(RawImage(4, 4, "CV_8UC3", bytes(10)))
    with pytest.raises(ValueError):
        img.to_array()
