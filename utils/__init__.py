"""Shared helper modules used across the project.

The :mod:`utils` package contains lightweight helpers for logging, CLI
dispatching, configuration, error tracking and simple file I/O. These
utilities are used by the camera and driver packages alike.
"""

from .logger import Logger, LoggerType
from .settings import (
    IMAGE_EXT,
    CLOUD_EXT,
    INFO_EXT,
    ENCODING_BGR,
    DriverCfg,
    TopicsCfg,
    SimulatorCfg,
    paths,
    logging,
    driver,
    topics,
    simulator,
)
from .io import read_image, write_image, load_json, save_json

__all__ = [
    "Logger",
    "LoggerType",
    "IMAGE_EXT",
    "CLOUD_EXT",
    "INFO_EXT",
    "ENCODING_BGR",
    "DriverCfg",
    "TopicsCfg",
    "SimulatorCfg",
    "paths",
    "logging",
    "driver",
    "topics",
    "simulator",
    "read_image",
    "write_image",
    "load_json",
    "save_json",
]
