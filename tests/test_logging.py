import io
import logging

from colorama import Fore

from streammux._logging import setup_logging

from ._utils import isolated_logging

LOGGER = logging.getLogger("streammux.tests")


def test_strips_colors_when_disabled():
    stream = io.StringIO()

    with isolated_logging():
        setup_logging(logging.INFO, colors=False, stream=stream)
        LOGGER.warning("%s colored %s", Fore.RED, Fore.RESET)

    assert stream.getvalue() == "streammux > [WARNING]  colored \n"


def test_colors_messages_when_enabled():
    stream = io.StringIO()

    with isolated_logging():
        setup_logging(logging.INFO, colors=True, stream=stream)
        LOGGER.error("broken")

    assert "streammux >" in stream.getvalue()
    assert Fore.RED in stream.getvalue()
    assert "broken" in stream.getvalue()


def test_respects_level():
    stream = io.StringIO()

    with isolated_logging():
        setup_logging(logging.WARNING, colors=False, stream=stream)
        LOGGER.info("hidden")
        LOGGER.debug("hidden too")

    assert stream.getvalue() == ""
