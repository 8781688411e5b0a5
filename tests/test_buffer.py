import pytest

from streammux import LineBuffer


class Recorder:
    def __init__(self):
        self.calls = []

    def __call__(self, buffer, length):
        self.calls.append(bytes(buffer[:length]))


def test_flushes_on_every_newline():
    recorder = Recorder()
    buffer = LineBuffer(recorder)

    assert buffer.write(b"ab\ncd\nef") == 8

    assert recorder.calls == [b"ab\n", b"cd\n"]
    assert len(buffer) == 2


def test_keeps_accumulating_until_newline():
    recorder = Recorder()
    buffer = LineBuffer(recorder)

    buffer.write(b"hel")
    buffer.write(b"lo")
    assert not recorder.calls

    buffer.write(b" world\n")
    assert recorder.calls == [b"hello world\n"]
    assert len(buffer) == 0


def test_explicit_flush_hands_over_partial_content():
    recorder = Recorder()
    buffer = LineBuffer(recorder)

    buffer.write(b"partial")
    buffer.flush()

    assert recorder.calls == [b"partial"]
    assert len(buffer) == 0


def test_flush_on_empty_buffer_still_calls_hook():
    recorder = Recorder()
    buffer = LineBuffer(recorder)

    buffer.flush()
    buffer.flush()

    assert recorder.calls == [b"", b""]


def test_flushes_when_capacity_is_reached():
    recorder = Recorder()
    buffer = LineBuffer(recorder, capacity=4)

    buffer.write(b"abcdefghij")

    assert recorder.calls == [b"abcd", b"efgh"]
    assert len(buffer) == 2


def test_flushes_when_buffer_is_exactly_full():
    recorder = Recorder()
    buffer = LineBuffer(recorder, capacity=4)

    buffer.write(b"ab")
    buffer.write(b"cd")

    assert recorder.calls == [b"abcd"]
    assert len(buffer) == 0


def test_newline_before_capacity_takes_precedence():
    recorder = Recorder()
    buffer = LineBuffer(recorder, capacity=4)

    buffer.write(b"a\nbcdef\n")

    assert recorder.calls == [b"a\n", b"bcde", b"f\n"]


@pytest.mark.parametrize("data", (bytearray(b"x\n"), memoryview(b"x\n")))
def test_accepts_bytes_like_objects(data):
    recorder = Recorder()
    LineBuffer(recorder).write(data)

    assert recorder.calls == [b"x\n"]


def test_keeps_content_if_hook_fails():
    def hook(buffer, length):
        raise OSError("boom")

    buffer = LineBuffer(hook)

    with pytest.raises(OSError, match="boom"):
        buffer.write(b"ab\n")

    assert len(buffer) == 3


def test_rejects_invalid_capacity():
    with pytest.raises(ValueError):
        LineBuffer(Recorder(), capacity=0)
