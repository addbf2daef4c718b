"""Streaming-mode dispatcher and frame conversion for stereo 3D cameras.

A :class:`DeviceSession` owns the camera, the :class:`StreamingModeRouter`
keeps exactly one callback binding attached, :class:`SingleShotCapture`
grabs clouds without disturbing streaming and :class:`FrameConverter` turns
vendor frames into neutral products handed to a :class:`PublicationSink`.
:class:`ControlSurface` exposes the service-style operations and
:class:`DriverNode` wires everything from startup parameters.
"""

from .capture import SingleShotCapture
from .control import ControlSurface
from .converter import FrameConverter, layout_for
from .models import (
    CallbackBinding,
    ChannelLayout,
    NeutralImage,
    OutputRequest,
    PointCloudXYZ,
    RunState,
)
from .node import DriverNode, load_driver_params
from .router import StreamingModeRouter
from .session import DeviceSession
from .sink import DiskSink, LoggingSink, MemorySink, Message, PublicationSink

__all__ = [
    "CallbackBinding",
    "ChannelLayout",
    "ControlSurface",
    "DeviceSession",
    "DiskSink",
    "DriverNode",
    "FrameConverter",
    "LoggingSink",
    "MemorySink",
    "Message",
    "NeutralImage",
    "OutputRequest",
    "PointCloudXYZ",
    "PublicationSink",
    "RunState",
    "SingleShotCapture",
    "StreamingModeRouter",
    "layout_for",
    "load_driver_params",
]
