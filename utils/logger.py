"""Driver logging on top of loguru.

Records carry the emitting module and, once a device is open, its serial
number. Console output is human readable; the per-run file under
``log_dir`` is JSON when ``json`` is set.
"""

from __future__ import annotations

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, TypeVar, cast

from loguru import logger as _logger
from loguru._logger import Logger as LoguruLogger
from tqdm.auto import tqdm

from utils.settings import logging as LOGCFG

LoggerType = LoguruLogger
T = TypeVar("T")

# Placeholder for records emitted before a device is open
NO_DEVICE = "-"

_is_configured = False
_log_dir = LOGCFG.log_dir
_log_file: Path | None = None


class Logger:
    """Project-wide logger wrapper using loguru and global config."""

    @staticmethod
    def _configure(level: str, json_format: bool) -> None:
        global _is_configured, _log_file
        _logger.remove()
        _logger.configure(extra={"module": "", "device": NO_DEVICE})
        os.makedirs(_log_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        _log_file = _log_dir / f"driver_{timestamp}.log"
        _logger.add(sys.stdout, level=level, format=LOGCFG.log_format)
        _logger.add(
            _log_file,
            level=level,
            serialize=json_format,
            format=LOGCFG.log_file_format,
        )
        _is_configured = True

    @staticmethod
    def get_logger(name: str) -> LoguruLogger:
        """Return a logger bound to the component ``name``."""
        if not _is_configured:
            Logger._configure(LOGCFG.level, LOGCFG.json)
        return _logger.bind(module=name)

    @staticmethod
    def for_device(logger: LoguruLogger, device_id: str) -> LoguruLogger:
        """Tag every record of ``logger`` with the serial of an open device."""
        return logger.bind(device=device_id)

    @staticmethod
    def log_file() -> Path | None:
        """Path of the current run's log file, once logging is configured."""
        return _log_file

    @staticmethod
    def progress(
        iterable: Iterable[T],
        desc: str | None = None,
        total: int | None = None,
    ) -> Iterable[T]:
        """Return a tqdm iterator with unified style."""
        return cast(
            Iterable[T],
            tqdm(
                iterable,
                desc=desc,
                total=total,
                leave=False,
                bar_format=LOGCFG.progress_bar_format,
            ),
        )

    @staticmethod
    def configure(
        level: str | None = None,
        log_dir: str | Path | None = None,
        json_format: bool | None = None,
    ) -> None:
        """Reconfigure sinks, e.g. from the ``logging`` section of the config."""
        global _log_dir
        _log_dir = Path(log_dir) if log_dir is not None else LOGCFG.log_dir
        Logger._configure(
            level or LOGCFG.level,
            json_format if json_format is not None else LOGCFG.json,
        )
