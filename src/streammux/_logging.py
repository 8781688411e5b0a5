from __future__ import annotations

import logging
import sys
from types import MappingProxyType, TracebackType
from typing import Any, TextIO, cast

from colorama import Back, Fore, Style, init

from ._io import ANSI_ESCAPE_CODE_RE


class ColorFormatter(logging.Formatter):
    # We need to follow camel case style
    # ruff: noqa: N802

    COLOR_MAPPING = MappingProxyType(
        {
            logging.DEBUG: Fore.CYAN,
            logging.INFO: "",
            logging.WARN: Fore.YELLOW,
            logging.ERROR: Fore.RED + Style.BRIGHT,
            logging.FATAL: Back.RED + Fore.WHITE + Style.BRIGHT,
        }
    )

    def formatMessage(self, record: logging.LogRecord) -> str:
        cast(Any, record).level_color = self.COLOR_MAPPING.get(
            record.levelno, ""
        )
        return super().formatMessage(record)

    def formatException(
        self,
        ei: tuple[type[BaseException], BaseException, TracebackType | None]
        | tuple[None, None, None],
    ) -> str:
        output = super().formatException(ei)
        return f"{Fore.CYAN}\nstreammux > " + "\nstreammux > ".join(
            output.splitlines()
        )


class NoColorFormatter(logging.Formatter):
    def formatMessage(self, record: logging.LogRecord) -> str:
        msg = super().formatMessage(record)
        return ANSI_ESCAPE_CODE_RE.sub("", msg)


def setup_logging(
    level: int, *, colors: bool, stream: TextIO | None = None
) -> logging.Handler:
    """
    Send the logs to ``stream``, ``sys.stderr`` by default.

    The multiplexed output goes to stdout, logs must never end up there.
    """
    if colors:
        init(strip=False)
        formatter: logging.Formatter = ColorFormatter(
            fmt=(
                f"{Fore.CYAN}{Style.DIM}streammux >{Style.RESET_ALL}"
                f" %(level_color)s%(message)s{Style.RESET_ALL}"
            )
        )
    else:
        formatter = NoColorFormatter(
            fmt="streammux > [%(levelname)s] %(message)s"
        )

    logger = logging.getLogger()
    logger.setLevel(logging.NOTSET)

    handler = logging.StreamHandler(sys.stderr if stream is None else stream)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return handler
