import sys

import pytest

from streammux import CONTROL, STDERR, STDOUT

from ._utils import demultiplex, execute


def _python(code):
    return [sys.executable, "-c", code]


def test_cli_help():
    result = execute(["--help"])
    assert "STREAMMUX_ADDOPTS" in result.stdout


def test_multiplexes_the_command_output():
    result = execute(["--no-colors", "--", *_python("print('hi')")])

    assert result.output == b"@1\nhi\n@3\nexit-status 0\n"


def test_does_not_require_double_dash():
    result = execute(
        ["--no-colors", *_python("import sys; sys.stderr.write('oops')")]
    )

    assert demultiplex(result.output) == {
        STDERR: b"oops",
        CONTROL: b"exit-status 0\n",
    }


def test_exits_with_the_command_status():
    result = execute(
        ["--no-colors", "--", *_python("import sys; sys.exit(4)")],
        expected_status=4,
    )

    assert demultiplex(result.output) == {CONTROL: b"exit-status 4\n"}


def test_reports_missing_commands():
    result = execute(
        ["--no-colors", "--", "streammux-this-does-not-exist"],
        expected_status=1,
    )

    assert result.output == b""
    assert (
        "The following command was not found in PATH:"
        " streammux-this-does-not-exist" in result.stderr
    )


def test_requires_a_command():
    result = execute(["--no-colors"], expected_status=2)
    assert "a command to run is required" in result.stderr


def test_rejects_invalid_color_configuration(monkeypatch):
    monkeypatch.setenv("PY_COLORS", "maybe")

    result = execute(["--", *_python("pass")], expected_status=2)

    assert "PY_COLORS set to maybe" in result.stderr
    assert result.output == b""


def test_reads_options_from_environment(monkeypatch):
    monkeypatch.setenv("STREAMMUX_ADDOPTS", "--no-colors -v")

    result = execute(["--", *_python("print('x')")])

    assert demultiplex(result.output)[STDOUT] == b"x\n"
    assert "Running command:" in result.stderr


@pytest.mark.parametrize("flag", ("--colors", "--no-colors"))
def test_passes_color_decision_to_the_command(flag):
    result = execute(
        [flag, "--", *_python("import os; print(os.environ['PY_COLORS'])")]
    )

    expected = b"1\n" if flag == "--colors" else b"0\n"
    assert demultiplex(result.output)[STDOUT] == expected
