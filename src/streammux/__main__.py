import logging
import os
import shlex
import sys
from argparse import (
    REMAINDER,
    ArgumentParser,
    BooleanOptionalAction,
    Namespace,
    RawDescriptionHelpFormatter,
)
from importlib.metadata import version
from typing import BinaryIO, List, Optional

from ._config import Config
from ._exceptions import BaseStreamMuxException
from ._logging import setup_logging
from ._multiplexer import StreamMultiplexer
from ._subproc import ProcessManager

LOGGER = logging.getLogger(__name__)


def _parse_args(args: Optional[List[str]] = None) -> Namespace:
    parser = ArgumentParser(
        prog="streammux",
        formatter_class=RawDescriptionHelpFormatter,
        description=(
            "Run a command, and write its stdout and stderr to stdout,"
            " tagged so that they can be split back. The exit status of the"
            " command is sent on the control channel."
        ),
        epilog="""\
Environment variables:
  STREAMMUX_ADDOPTS\tExtra command line arguments, prepended to other arguments
""",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {version('streammux')}",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Be more verbose"
    )
    parser.add_argument(
        "-q", "--quiet", action="count", default=0, help="Be more quiet"
    )
    parser.add_argument(
        "--colors",
        action=BooleanOptionalAction,
        help=(
            "Force or prevent a colored output for the logs"
            " (default: true if stdin is a tty, false otherwise)"
        ),
    )
    parser.add_argument(
        "command",
        nargs=REMAINDER,
        help="The command to run, optionally preceded by '--'",
    )

    parsed = parser.parse_args(args)
    if parsed.command and parsed.command[0] == "--":
        parsed.command = parsed.command[1:]
    if not parsed.command:
        parser.error("a command to run is required")
    return parsed


def _run(
    config: Config, command: List[str], output: Optional[BinaryIO]
) -> int:
    if output is None:
        output = sys.stdout.buffer

    manager = ProcessManager(StreamMultiplexer(output))

    try:
        result = manager.run(command, env=config.environ)
    except KeyboardInterrupt:
        LOGGER.error("Interrupted, stopping '%s'", command[0])
        manager.kill()
        raise

    return result.returncode


def main(
    sys_args: Optional[List[str]] = None, output: Optional[BinaryIO] = None
) -> None:
    if sys_args is None:
        sys_args = sys.argv[1:]
    if env_args := os.environ.get("STREAMMUX_ADDOPTS"):
        sys_args = shlex.split(env_args) + sys_args

    args = _parse_args(sys_args)
    verbosity = args.verbose - args.quiet

    try:
        config = Config(verbosity, args.colors)
    except BaseStreamMuxException as exc:
        # Logging is not set up yet, we don't know whether to use colors
        print(f"streammux > [ERROR] {exc}", file=sys.stderr)
        raise SystemExit(exc.exit_code) from exc

    setup_logging(config.log_level, colors=config.colors)

    try:
        returncode = _run(config, args.command, output)
    except BaseStreamMuxException as exc:
        if config.verbosity >= 1:
            LOGGER.debug(exc, exc_info=exc)
        LOGGER.error("%s", exc)
        raise SystemExit(exc.exit_code) from exc

    if returncode < 0:
        # Killed by a signal, follow the shell convention
        returncode = 128 - returncode
    raise SystemExit(returncode)


if __name__ == "__main__":
    main()
