"""Driver bootstrap: startup parameters and component wiring."""

from __future__ import annotations

from dataclasses import dataclass, field, fields

from utils.config import Config
from utils.logger import Logger, LoggerType
from utils.settings import DriverCfg, TopicsCfg, driver as driver_defaults
from utils.settings import topics as default_topics
from vision.camera import StereoCamera
from .capture import SingleShotCapture
from .control import ControlSurface
from .converter import FrameConverter
from .models import OutputRequest
from .router import StreamingModeRouter
from .session import DeviceSession
from .sink import LoggingSink, PublicationSink


def load_driver_params(
    section: str = "driver", defaults: DriverCfg = driver_defaults
) -> DriverCfg:
    """Read ``driver.*`` startup parameters, warning for each default used."""
    values = {
        f.name: Config.param(f"{section}.{f.name}", getattr(defaults, f.name))
        for f in fields(DriverCfg)
    }
    values["serial"] = str(values["serial"])
    return DriverCfg(**values)


@dataclass
class DriverNode:
    """
    Explicit driver context built once per process.

    Owns the session and hands the same session to the router, the
    single-shot capture and the control surface.
    """

    camera: StereoCamera
    params: DriverCfg = driver_defaults
    sink: PublicationSink = field(default_factory=LoggingSink)
    topics: TopicsCfg = default_topics
    logger: LoggerType = field(
        default_factory=lambda: Logger.get_logger("driver.node")
    )

    def __post_init__(self) -> None:
        self.session = DeviceSession(self.camera)
        self.converter = FrameConverter(self.params.camera_frame_id)
        self.router = StreamingModeRouter(
            self.session, self.converter, self.sink, self.topics
        )
        self.single_shot = SingleShotCapture(self.session, self.converter)
        self.control = ControlSurface(self.session, self.router, self.single_shot)

    def start(self) -> None:
        """Open and configure the device, then apply the startup mode."""
        p = self.params
        self.session.open(p.serial, tcp_port=p.tcp_port)
        self.session.configure_capture()
        self.session.set_projector(p.projector)
        self.session.set_front_light(p.front_light)
        if p.point_cloud:
            self.router.reconfigure(OutputRequest(want_cloud=True))
            self.session.start()
        self.logger.info(
            f"Driver ready: serial={p.serial} frame={p.camera_frame_id} "
            f"state={self.session.state.value} binding={self.router.binding.value}"
        )

    def close(self) -> None:
        self.control.close()

    def __enter__(self) -> "DriverNode":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
