"""Runtime selection of the frame-delivery binding."""

from __future__ import annotations

from functools import partial
from typing import Callable, Dict

from utils.error_tracker import DeviceError
from utils.logger import Logger, LoggerType
from utils.settings import TopicsCfg, topics as default_topics
from vision.camera import CameraInfo, StereoFrame, StreamProducts
from .converter import FrameConverter
from .models import CallbackBinding, OutputRequest
from .session import DeviceSession
from .sink import PublicationSink


class StreamingModeRouter:
    """
    Keep exactly one :class:`CallbackBinding` attached to the session.

    A reconfiguration pauses a running device, detaches the old binding,
    attaches the new one and resumes. The device is never streaming while
    two bindings are live, and a binding never changes under an in-flight
    frame.
    """

    def __init__(
        self,
        session: DeviceSession,
        converter: FrameConverter,
        sink: PublicationSink,
        topics: TopicsCfg = default_topics,
        logger: LoggerType | None = None,
    ) -> None:
        self.session = session
        self.converter = converter
        self.sink = sink
        self.topics = topics
        self.logger = logger or Logger.get_logger("driver.router")
        self.frames_delivered = 0
        self._binding = CallbackBinding.NONE
        self._handlers: Dict[CallbackBinding, Callable[[StereoFrame], None]] = {
            CallbackBinding.CLOUD_ONLY: self._on_cloud,
            CallbackBinding.IMAGES_ONLY: self._on_images,
            CallbackBinding.CLOUD_AND_IMAGES: self._on_cloud_and_images,
        }

    @property
    def binding(self) -> CallbackBinding:
        return self._binding

    def reconfigure(self, request: OutputRequest) -> CallbackBinding:
        """
        Replace the current binding with the one ``request`` selects.

        Raises :class:`StartFailedError` when a previously running device
        cannot be resumed; the new binding stays attached in that case.
        """
        with self.session.lock:
            was_running = self.session.is_streaming
            if was_running:
                self.session.stop()

            self.session.detach()
            self._binding = CallbackBinding.NONE

            selected = request.binding()
            if selected is not CallbackBinding.NONE:
                products = StreamProducts(
                    cloud=selected.wants_cloud, images=selected.wants_images
                )
                self.session.attach(products, partial(self._dispatch, selected))
                self._binding = selected

            if was_running:
                try:
                    self.session.start(allow_unbound=True)
                except DeviceError as e:
                    self.logger.critical(
                        f"Streaming not resumed after switching to "
                        f"{selected.value}: {e}"
                    )
                    raise
            self.logger.info(
                f"Binding set to {selected.value} "
                f"({'streaming' if was_running else 'idle'})"
            )
            return selected

    # Delivery side, runs on the device thread

    def _dispatch(self, binding: CallbackBinding, frame: StereoFrame) -> None:
        try:
            self._handlers[binding](frame)
            self.frames_delivered += 1
        except Exception as e:
            self.logger.exception(f"Dropped {binding.value} frame: {e}")

    def _on_cloud(self, frame: StereoFrame) -> None:
        self._publish_cloud(frame)

    def _on_images(self, frame: StereoFrame) -> None:
        self._publish_images(frame)

    def _on_cloud_and_images(self, frame: StereoFrame) -> None:
        infos = self._publish_images(frame)
        if infos is not None:
            left, right = infos
            self.sink.publish_info(self.topics.left_info, left)
            self.sink.publish_info(self.topics.right_info, right)
        self._publish_cloud(frame)

    def _publish_cloud(self, frame: StereoFrame) -> None:
        if frame.cloud is None:
            self.logger.warning("Frame without point cloud")
            return
        cloud = self.converter.to_cloud(frame.cloud)
        self.sink.publish_cloud(self.topics.cloud, cloud)

    def _publish_images(
        self, frame: StereoFrame
    ) -> tuple[CameraInfo, CameraInfo] | None:
        if frame.raw is None or frame.rectified is None:
            self.logger.warning("Frame without stereo images")
            return None
        conv, t = self.converter, self.topics
        left = conv.to_camera_info(self.session.camera_info("Left"))
        right = conv.to_camera_info(self.session.camera_info("Right"))
        self.sink.publish_image(
            t.left_raw, conv.to_image(frame.raw.left), left, conv.clock()
        )
        self.sink.publish_image(
            t.right_raw, conv.to_image(frame.raw.right), right, conv.clock()
        )
        self.sink.publish_image(t.left_rect, conv.to_image(frame.rectified.left))
        self.sink.publish_image(t.right_rect, conv.to_image(frame.rectified.right))
        return left, right
