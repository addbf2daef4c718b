import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from driver import (
    DeviceSession,
    FrameConverter,
    MemorySink,
    SingleShotCapture,
    StreamingModeRouter,
    ControlSurface,
)
from utils.config import Config
from utils.error_tracker import ErrorTracker
from utils.settings import SimulatorCfg
from vision.camera import SimulatedStereoCamera

SMALL = SimulatorCfg(width=32, height=24, fps=0.0, cloud_points=50)


@pytest.fixture(autouse=True)
def _isolated_state():
    Config.reset()
    yield
    ErrorTracker.run_cleanup()
    Config.reset()


@pytest.fixture
def camera() -> SimulatedStereoCamera:
    return SimulatedStereoCamera(SMALL, fps=0)


@pytest.fixture
def session(camera):
    s = DeviceSession(camera)
    s.open("160824")
    yield s
    s.close()


@pytest.fixture
def converter() -> FrameConverter:
    return FrameConverter("camera_link", clock=lambda: 100.0)


@pytest.fixture
def sink() -> MemorySink:
    return MemorySink()


@pytest.fixture
def router(session, converter, sink) -> StreamingModeRouter:
    return StreamingModeRouter(session, converter, sink)


@pytest.fixture
def control(session, router, converter) -> ControlSurface:
    return ControlSurface(session, router, SingleShotCapture(session, converter))
