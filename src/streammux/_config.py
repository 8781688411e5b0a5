import logging
import os
import sys
from typing import Dict, Optional

from ._exceptions import BaseStreamMuxException

LOGGER = logging.getLogger(__name__)


class Config:
    """
    Holds the configuration for the ``streammux`` command line.
    """

    colors: bool
    """
    Whether to use colored output or not for the logs.

    Here is how `streammux` decides:

    - The cli supports --colors|--no-colors to force the value
    - Then, it will look for ``PY_COLORS`` and enable colors if this is ``"1"``,
      and disable if it is ``"0"``. Any other option will abort the program.
    - Then, it will look if ``NO_COLOR`` is set. If so, it will disable colors.
    - Then, it will look if ``FORCE_COLOR`` is set. If so, it will enable colors.
    - Then, it will detect if this is running in various CIs (currently
      `github actions`_ is supported.) and enable colors if they support it.
    - Finally, it will look if this is attached to a tty and enable colors if so.
    """

    environ: Dict[str, str]
    """
    The environment to use when running the multiplexed command.

    This is the current environment, with ``PY_COLORS`` and ``FORCE_COLOR``
    or ``NO_COLOR`` forcefully set based on :py:attr:`Config.colors`.
    """

    verbosity: int
    """
    The verbosity level to use.

    0 means an equal number of verbose and quiet flags have been passed
    positive means more verbose, and thus, negative less.
    """

    def __init__(self, verbosity: int, colors: Optional[bool]) -> None:
        self.verbosity = verbosity
        self.environ = dict(os.environ)

        self.colors = self._get_color_setting(colors)
        if self.colors:
            self.environ["PY_COLORS"] = "1"
            self.environ["FORCE_COLOR"] = "1"
            self.environ.pop("NO_COLOR", None)
        else:
            self.environ["PY_COLORS"] = "0"
            self.environ["NO_COLOR"] = "1"
            self.environ.pop("FORCE_COLOR", None)

    @property
    def log_level(self) -> int:
        return logging.INFO - 10 * self.verbosity

    def _get_color_setting(self, colors: Optional[bool]) -> bool:
        # pylint: disable=too-many-return-statements
        if colors is not None:
            return colors

        env_colors = os.environ.get("PY_COLORS", None)
        if env_colors == "1":
            return True
        if env_colors == "0":
            return False
        if env_colors is not None:
            raise BaseStreamMuxException(
                f"PY_COLORS set to {env_colors}. This is invalid,"
                " only '1' or '0' is supported.",
            )

        env_colors = os.environ.get("NO_COLOR", None)
        if env_colors is not None:
            return False

        env_colors = os.environ.get("FORCE_COLOR", None)
        if env_colors is not None:
            return True

        # Check for CIs that were asked for, and enable colors by default
        # when it's possible. Do this towards the end to ensure other config
        # can override
        if "GITHUB_ACTION" in os.environ:
            return True

        return sys.stdin.isatty()
