from loguru import logger

from driver import CallbackBinding, DriverNode, MemorySink, RunState, load_driver_params
from utils.config import Config, DictConfigLoader
from utils.settings import DriverCfg, topics
from vision.camera import SimulatedStereoCamera

from conftest import SMALL


def test_missing_params_fall_back_with_warning():
    Config.set_loader(DictConfigLoader({}))
    warnings = []
    handler = logger.add(warnings.append, level="WARNING")
    try:
        params = load_driver_params()
    finally:
        logger.remove(handler)
    assert params == DriverCfg()
    assert params.serial == "160824"
    assert params.camera_frame_id == "camera_link"
    assert params.projector and not params.front_light and not params.point_cloud
    assert any("Parameter [driver.serial] not found" in str(w) for w in warnings)


def test_params_read_from_config():
    Config.set_loader(
        DictConfigLoader({"driver": {"serial": 42, "point_cloud": True, "projector": False}})
    )
    params = load_driver_params()
    assert params.serial == "42"
    assert params.point_cloud
    assert not params.projector


def test_yaml_defaults_match_builtin_defaults():
    assert load_driver_params() == DriverCfg()


def test_node_start_applies_startup_mode():
    camera = SimulatedStereoCamera(SMALL, fps=0)
    sink = MemorySink()
    params = DriverCfg(point_cloud=True, front_light=True, camera_frame_id="rig")
    with DriverNode(camera, params, sink=sink) as node:
        assert node.control.status() == (RunState.STREAMING, CallbackBinding.CLOUD_ONLY)
        assert camera.configured and camera.projector and camera.front_light
        assert camera.tcp_port == 24000
        camera.trigger()
        assert sink.on(topics.cloud)[0].payload.frame_id == "rig"
    assert camera.serial is None


def test_node_starts_idle_by_default():
    camera = SimulatedStereoCamera(SMALL, fps=0)
    node = DriverNode(camera, DriverCfg(), sink=MemorySink())
    node.start()
    try:
        assert node.control.status() == (RunState.IDLE, CallbackBinding.NONE)
    finally:
        node.close()
