# pylint and pytest fixtures dependency injection are not friends
# pylint: disable=redefined-outer-name
import pytest

from streammux import StreamMultiplexer

# Register assert rewrites before importing dependencies
# pylint: disable=wrong-import-position
pytest.register_assert_rewrite("tests._utils")

from ._utils import RecordingSink  # noqa: E402


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def multiplexer(sink):
    return StreamMultiplexer(sink)
