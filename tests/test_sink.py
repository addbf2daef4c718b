import numpy as np

from driver import DiskSink, FrameConverter, LoggingSink, OutputRequest, StreamingModeRouter
from utils.io import load_json, read_image
from utils.settings import topics
from vision.camera import RawImage
from vision.pointcloud import PointCloudGenerator


def test_disk_sink_writes_products(tmp_path, session, camera, converter):
    sink = DiskSink(tmp_path)
    router = StreamingModeRouter(session, converter, sink)
    router.reconfigure(OutputRequest(True, True))
    session.start()
    camera.trigger()

    img = read_image(tmp_path / topics.left_raw / "000000.png")
    assert img.shape == (24, 32)
    info = load_json(tmp_path / topics.left_raw / "000000.json")
    assert info["frame_id"] == "camera_link"
    assert (tmp_path / topics.right_rect / "000000.png").exists()
    assert (tmp_path / topics.left_info / "000000.json").exists()
    points = PointCloudGenerator.load_ply(tmp_path / topics.cloud / "000000.ply")
    assert points.shape == (50, 3)


def test_disk_sink_keeps_bgr_layout(tmp_path):
    data = np.arange(2 * 3 * 3, dtype=np.uint8).tobytes()
    image = FrameConverter("camera_link").to_image(RawImage(3, 2, "CV_8UC3", data))
    DiskSink(tmp_path).publish_image("cam", image)
    assert read_image(tmp_path / "cam" / "000000.png").shape == (2, 3, 3)


def test_logging_sink_counts(session, camera, converter):
    sink = LoggingSink()
    router = StreamingModeRouter(session, converter, sink)
    router.reconfigure(OutputRequest(False, True))
    session.start()
    camera.trigger()
    assert sink.count == 4
