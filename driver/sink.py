"""Publication boundary: where neutral products leave the driver."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Protocol

from utils.io import save_json, write_image
from utils.logger import Logger, LoggerType
from utils.settings import CLOUD_EXT, IMAGE_EXT, INFO_EXT
from vision.camera import CameraInfo
from vision.pointcloud import PointCloudGenerator
from .models import NeutralImage, PointCloudXYZ


class PublicationSink(Protocol):
    """Fire-and-forget consumer of driver products."""

    def publish_image(
        self,
        topic: str,
        image: NeutralImage,
        info: CameraInfo | None = None,
        stamp: float | None = None,
    ) -> None: ...

    def publish_cloud(self, topic: str, cloud: PointCloudXYZ) -> None: ...

    def publish_info(self, topic: str, info: CameraInfo) -> None: ...


@dataclass
class Message:
    """One recorded publication."""

    topic: str
    payload: Any
    info: CameraInfo | None = None
    stamp: float | None = None


@dataclass
class MemorySink:
    """Keep every publication in memory."""

    messages: List[Message] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def publish_image(
        self,
        topic: str,
        image: NeutralImage,
        info: CameraInfo | None = None,
        stamp: float | None = None,
    ) -> None:
        with self._lock:
            self.messages.append(Message(topic, image, info, stamp))

    def publish_cloud(self, topic: str, cloud: PointCloudXYZ) -> None:
        with self._lock:
            self.messages.append(Message(topic, cloud, stamp=cloud.stamp))

    def publish_info(self, topic: str, info: CameraInfo) -> None:
        with self._lock:
            self.messages.append(Message(topic, info, stamp=info.stamp))

    def on(self, topic: str) -> List[Message]:
        """Messages published on ``topic`` so far."""
        with self._lock:
            return [m for m in self.messages if m.topic == topic]

    @property
    def topics(self) -> List[str]:
        with self._lock:
            return [m.topic for m in self.messages]

    def clear(self) -> None:
        with self._lock:
            self.messages.clear()


@dataclass
class LoggingSink:
    """Report publications through the project logger."""

    logger: LoggerType = field(
        default_factory=lambda: Logger.get_logger("driver.sink")
    )
    count: int = 0

    def publish_image(
        self,
        topic: str,
        image: NeutralImage,
        info: CameraInfo | None = None,
        stamp: float | None = None,
    ) -> None:
        self.count += 1
        self.logger.debug(
            f"{topic}: {image.width}x{image.height} {image.encoding} "
            f"frame={image.frame_id} info={'yes' if info else 'no'}"
        )

    def publish_cloud(self, topic: str, cloud: PointCloudXYZ) -> None:
        self.count += 1
        self.logger.debug(f"{topic}: {len(cloud)} points frame={cloud.frame_id}")

    def publish_info(self, topic: str, info: CameraInfo) -> None:
        self.count += 1
        self.logger.debug(f"{topic}: {info.width}x{info.height} frame={info.frame_id}")


@dataclass
class DiskSink:
    """
    Write publications below ``root``, one subdirectory per topic.

    Images become PNG files, clouds PLY files and camera info JSON files.
    Files are numbered per topic in publication order.
    """

    root: Path
    logger: LoggerType = field(
        default_factory=lambda: Logger.get_logger("driver.disk_sink")
    )
    _counters: dict[str, int] = field(default_factory=dict, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        self.root = Path(self.root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _next_path(self, topic: str, ext: str) -> Path:
        with self._lock:
            idx = self._counters.get(topic, 0)
            self._counters[topic] = idx + 1
        out_dir = self.root / topic.strip("/")
        out_dir.mkdir(parents=True, exist_ok=True)
        return out_dir / f"{idx:06d}{ext}"

    def publish_image(
        self,
        topic: str,
        image: NeutralImage,
        info: CameraInfo | None = None,
        stamp: float | None = None,
    ) -> None:
        path = self._next_path(topic, IMAGE_EXT)
        write_image(path, image.to_array())
        if info is not None:
            save_json(path.with_suffix(INFO_EXT), info.to_dict())
        self.logger.debug(f"Image saved: {path}")

    def publish_cloud(self, topic: str, cloud: PointCloudXYZ) -> None:
        path = self._next_path(topic, CLOUD_EXT)
        PointCloudGenerator.save_ply(path, cloud.points)
        self.logger.debug(f"Cloud saved: {path} ({len(cloud)} points)")

    def publish_info(self, topic: str, info: CameraInfo) -> None:
        path = self._next_path(topic, INFO_EXT)
        save_json(path, info.to_dict())
