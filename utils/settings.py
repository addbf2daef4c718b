"""Project wide configuration dataclasses and default values."""

from dataclasses import dataclass
from pathlib import Path

# Root dir
BASE_DIR = Path(__file__).resolve().parent.parent

# Common file name extensions for products written to disk
IMAGE_EXT = ".png"
CLOUD_EXT = ".ply"
INFO_EXT = ".json"

# Native encoding tag of 3-channel 8 bit vendor images
ENCODING_BGR = "CV_8UC3"


@dataclass(frozen=True)
class Paths:
    """
    Dataclass aggregating all important filesystem paths used in the project.
    """

    CONF_DIR: Path = BASE_DIR / "conf"
    CLOUD_DIR: Path = BASE_DIR / ".clouds"
    RECORD_DIR: Path = BASE_DIR / ".records"
    LOG_DIR: Path = BASE_DIR / ".logs"


paths = Paths()


@dataclass(frozen=True)
class LoggingCfg:
    """
    Logging configuration for the project.

    - level: Log level ("INFO", "DEBUG", etc.)
    - json: Enable/disable structured JSON logging.
    - log_dir: Directory where log files are stored.
    - log_format: Console log output format.
    - log_file_format: File log output format.
    - progress_bar_format: TQDM progress bar format.
    """

    level: str = "INFO"
    json: bool = True
    log_dir: Path = Path(".logs")
    log_format: str = (
        "<green>{time:MM-DD HH:mm:ss}</green>"
        "[<level>{level:.3}</level>]"
        "[<cyan>{extra[module]:.16}</cyan>:<cyan>{line:<3}</cyan>]"
        "[<magenta>{extra[device]}</magenta>]"
        "<level>{message}</level>"
    )
    log_file_format: str = (
        "{time:YYYY-MM-DD HH:mm:ss}[{level}][{extra[device]}][{file}:{line}]{message}"
    )
    progress_bar_format: str = (
        "{l_bar}{bar}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]"
    )


logging = LoggingCfg()


@dataclass(frozen=True)
class DriverCfg:
    """
    Startup parameters of the stereo camera driver.

    - serial: Device identifier to open.
    - camera_frame_id: Frame of reference stamped on every product.
    - front_light / projector: Initial illumination toggles.
    - point_cloud: Stream point clouds right after startup.
    - tcp_port: Vendor TCP port opened with the device (0 disables it).
    """

    serial: str = "160824"
    camera_frame_id: str = "camera_link"
    front_light: bool = False
    projector: bool = True
    point_cloud: bool = False
    tcp_port: int = 24000


driver = DriverCfg()


@dataclass(frozen=True)
class TopicsCfg:
    """Topic names used at the publication boundary."""

    left_raw: str = "left/image_raw"
    right_raw: str = "right/image_raw"
    left_rect: str = "left/image_rect"
    right_rect: str = "right/image_rect"
    left_info: str = "left/camera_info"
    right_info: str = "right/camera_info"
    cloud: str = "depth/points"


topics = TopicsCfg()


@dataclass(frozen=True)
class SimulatorCfg:
    """Synthetic frame geometry of the simulated stereo camera."""

    width: int = 640
    height: int = 480
    fps: float = 10.0
    cloud_points: int = 2048
    depth_range: tuple[float, float] = (0.3, 1.2)  # meters
    fx: float = 575.0
    fy: float = 575.0
    baseline: float = 0.1  # meters


simulator = SimulatorCfg()

__all__ = [
    "Paths",
    "LoggingCfg",
    "DriverCfg",
    "TopicsCfg",
    "SimulatorCfg",
    "paths",
    "logging",
    "driver",
    "topics",
    "simulator",
    "IMAGE_EXT",
    "CLOUD_EXT",
    "INFO_EXT",
    "ENCODING_BGR",
]
