"""Device error taxonomy and centralized unhandled exception tracking."""

from __future__ import annotations

import atexit
import inspect
import signal
import sys
import traceback
import weakref
from typing import Callable, List, Optional

from utils.logger import Logger


class CameraError(Exception):
    """Base class for camera related errors."""


class CameraConnectionError(CameraError):
    """Raised by a camera backend when the device cannot be reached."""


class DeviceError(CameraError):
    """Failure reported by the device session to its caller."""


class OpenFailedError(DeviceError):
    """The device id is unknown or the device is already held."""


class NotOpenError(DeviceError):
    """An operation needs an open device and there is none."""


class DeviceBusyError(DeviceError):
    """A hardware toggle was requested while frames are being pushed."""


class CaptureFailedError(DeviceError):
    """The single-frame capture primitive reported a failure."""


class StartFailedError(DeviceError):
    """Streaming could not be started or resumed."""


class StopFailedError(DeviceError):
    """The device refused to stop pushing frames."""


class ConfigureFailedError(DeviceError):
    """A capture setting, hardware toggle or callback registration was rejected."""


class RequestError(ValueError):
    """Malformed control request."""


class InvalidCombinationError(RequestError):
    """Requested output combination cannot be served."""


class ErrorTracker:
    """Installable global exception hook that logs uncaught errors."""

    logger = Logger.get_logger("utils.error_tracker")
    _installed = False
    _atexit_installed = False
    _orig_hook: Optional[Callable[..., None]] = None
    _cleanup_funcs: List[Callable[[], Optional[Callable[[], None]]]] = []

    @staticmethod
    def _ref(func: Callable[[], None]) -> Callable[[], Optional[Callable[[], None]]]:
        # Bound methods are held weakly; their owner stays collectable.
        if inspect.ismethod(func):
            return weakref.WeakMethod(func)
        return lambda: func

    @classmethod
    def _live(cls) -> List[Callable[[], None]]:
        funcs = [ref() for ref in cls._cleanup_funcs]
        return [f for f in funcs if f is not None]

    @classmethod
    def register_cleanup(cls, func: Callable[[], None]) -> None:
        """Register a cleanup run on fatal errors, signals and interpreter exit."""
        if not cls._atexit_installed:
            atexit.register(cls.run_cleanup)
            cls._atexit_installed = True
        if func not in cls._live():
            cls._cleanup_funcs.append(cls._ref(func))

    @classmethod
    def unregister_cleanup(cls, func: Callable[[], None]) -> None:
        """Forget a cleanup function once its resource is released."""
        cls._cleanup_funcs = [
            ref for ref in cls._cleanup_funcs if ref() not in (None, func)
        ]

    @classmethod
    def run_cleanup(cls) -> None:
        """Run registered cleanups in reverse registration order."""
        funcs = cls._live()
        cls._cleanup_funcs = []
        for func in reversed(funcs):
            try:
                func()
            except Exception as e:
                cls.logger.error(f"Cleanup failed: {e}")

    @classmethod
    def install_excepthook(cls) -> None:
        """Log unhandled exceptions through the project logger."""
        if cls._installed:
            return

        cls._orig_hook = sys.excepthook

        def _hook(exc_type, exc, tb) -> None:
            message = "".join(traceback.format_exception(exc_type, exc, tb))
            cls.logger.error(f"Unhandled exception:\n{message}")
            cls.run_cleanup()
            if cls._orig_hook:
                cls._orig_hook(exc_type, exc, tb)

        sys.excepthook = _hook
        cls._installed = True
        cls.logger.debug("Global exception hook installed")

    @classmethod
    def install_signal_handlers(cls) -> None:
        """Shutdown gracefully on SIGINT or SIGTERM."""

        def _handler(signum, frame) -> None:
            cls.logger.info(f"Received signal {signum}")
            cls.run_cleanup()
            raise SystemExit(1)

        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
