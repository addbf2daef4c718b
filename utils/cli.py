"""Subcommand dispatcher shared by the driver command line tools."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, Mapping, Optional

from utils.config import Config
from utils.error_tracker import CameraError, ErrorTracker
from utils.logger import Logger, LoggerType

if TYPE_CHECKING:
    from vision.camera import StereoCamera

CameraFactory = Callable[[argparse.Namespace], "StereoCamera"]

# Exit status of a command aborted by a device failure
EXIT_DEVICE_ERROR = 2


@dataclass
class Command:
    """Represents a single CLI command."""

    name: str
    handler: Callable[[argparse.Namespace], None]
    add_arguments: Optional[Callable[[argparse.ArgumentParser], None]] = None
    help: str | None = None


@dataclass
class CommandDispatcher:
    """
    Register driver subcommands and run the selected one.

    Every subcommand accepts ``--config`` (a YAML file loaded into
    :class:`Config` before the handler runs), ``--backend`` (a key of
    ``backends``) and ``--fps``. Handlers receive the parsed namespace with
    ``make_camera`` set to a factory for the selected backend.
    """

    description: str
    commands: Iterable[Command] = field(default_factory=list)
    backends: Mapping[str, CameraFactory] = field(default_factory=dict)

    def _add_common_arguments(self, parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "--config", type=Path, default=None, help="YAML config file"
        )
        if self.backends:
            parser.add_argument(
                "--backend",
                choices=sorted(self.backends),
                default=next(iter(self.backends)),
                help="Camera backend",
            )
        parser.add_argument(
            "--fps", type=float, default=None, help="Simulated frame rate"
        )

    def _build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(description=self.description)
        subparsers = parser.add_subparsers(dest="command")
        for cmd in self.commands:
            sp = subparsers.add_parser(cmd.name, help=cmd.help)
            self._add_common_arguments(sp)
            if cmd.add_arguments:
                cmd.add_arguments(sp)
            sp.set_defaults(func=cmd.handler)
        return parser

    def run(
        self,
        args: Optional[list[str]] = None,
        *,
        logger: Optional[LoggerType] = None,
        track_exceptions: bool = True,
    ) -> None:
        """
        Parse arguments and dispatch the selected command.

        ``SystemExit`` from ``argparse`` is logged and re-raised. A device
        failure escaping the handler is logged and turned into exit status
        ``EXIT_DEVICE_ERROR``. ``track_exceptions`` installs the global
        :class:`ErrorTracker` hooks, which also release open devices on
        SIGINT/SIGTERM.
        """
        if logger is None:
            logger = Logger.get_logger("utils.cli")

        if track_exceptions:
            ErrorTracker.install_excepthook()
            ErrorTracker.install_signal_handlers()

        parser = self._build_parser()

        try:
            ns = parser.parse_args(args)
        except SystemExit as exc:  # argparse calls sys.exit() on error
            logger.error(f"Argument parsing failed: {exc}")
            raise

        if not hasattr(ns, "func"):
            parser.print_help()
            return

        if ns.config is not None:
            Config.load(ns.config, force_reload=True)
        if self.backends:
            ns.make_camera = partial(self.backends[ns.backend], ns)

        try:
            ns.func(ns)
        except CameraError as e:
            logger.error(f"Command '{ns.command}' aborted: {e}")
            raise SystemExit(EXIT_DEVICE_ERROR) from e
