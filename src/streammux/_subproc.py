from __future__ import annotations

import logging
import os
import shutil
import signal
import subprocess
import time
from contextlib import suppress
from threading import Lock, Thread
from typing import Any, Callable, List, Mapping, Sequence

from ._exceptions import CommandNotFoundException
from ._multiplexer import StreamMultiplexer, TaggedChannel

LOGGER = logging.getLogger(__name__)


def _read(source: int) -> bytes:
    # A closed pipe is the same as the end of the output
    with suppress(IOError):
        return os.read(source, 4096)
    return b""


def _stream(
    source: int,
    dest: TaggedChannel,
    errors: List[Exception],
    on_error: Callable[[], None],
) -> None:
    while data := _read(source):
        if errors:
            # The sink is broken, keep draining so the child can't block
            continue

        try:
            dest.write(data)
        except Exception as exc:  # pylint: disable=broad-except
            errors.append(exc)
            on_error()


def format_exit_status(returncode: int) -> bytes:
    return f"exit-status {returncode}\n".encode("ascii")


class ProcessManager:
    """
    Run commands with their output multiplexed into a single stream.

    The stdout and stderr of each command are tagged with the stdout and
    stderr markers, and its exit status is then sent on the control
    channel, as ``exit-status <returncode>``.

    If writing to the sink fails, the command is terminated and the error
    is raised from :py:meth:`run` once the command has exited.
    """

    def __init__(self, multiplexer: StreamMultiplexer) -> None:
        self.multiplexer = multiplexer
        self.processes: set[subprocess.Popen[Any]] = set()
        self._lock = Lock()

        self._was_killed = False

    def kill(self) -> None:
        self._was_killed = True

        with self._lock:
            LOGGER.debug("Stopping %s processes", len(self.processes))
            for proc in list(self.processes):
                try:
                    pgrp = os.getpgid(proc.pid)
                except ProcessLookupError:
                    # Process is dead, we are good
                    self.processes.remove(proc)
                    continue

                os.killpg(pgrp, signal.SIGTERM)

            # wait a maximum of 5 seconds for processes to quit
            total_wait_time = 5.0

            for proc in self.processes:
                start = time.monotonic()

                try:
                    proc.wait(total_wait_time)
                except subprocess.TimeoutExpired:
                    break
                total_wait_time -= time.monotonic() - start
            else:
                return  # All subprocesses exited

            LOGGER.warning(
                "Some processes took too long to finish, killing them."
            )
            for proc in self.processes:
                try:
                    pgrp = os.getpgid(proc.pid)
                except ProcessLookupError:
                    # Process is dead, we are good
                    continue

                os.killpg(pgrp, signal.SIGKILL)

    def run(
        self,
        command: Sequence[str],
        env: Mapping[str, str] | None = None,
        cwd: str | bytes | os.PathLike[str] | os.PathLike[bytes] | None = None,
    ) -> subprocess.CompletedProcess[None]:
        if env is None:
            env = dict(os.environ)
        self._validate_command(command[0], env)

        LOGGER.debug("Running command: '%s'", " ".join(command))
        if self._was_killed:
            # Prevent starting new jobs if the program has been interrupted
            raise KeyboardInterrupt()

        stdout = self.multiplexer.create_stdout()
        stderr = self.multiplexer.create_stderr()
        errors: List[Exception] = []

        with subprocess.Popen(
            list(command),
            cwd=cwd,
            env=dict(env),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            close_fds=True,
            start_new_session=True,
        ) as proc:
            self._add(proc)

            assert proc.stdout is not None
            assert proc.stderr is not None

            def _terminate() -> None:
                LOGGER.debug("Writing to the sink failed, stopping command")
                with suppress(ProcessLookupError):
                    os.killpg(os.getpgid(proc.pid), signal.SIGTERM)

            readers = [
                Thread(
                    target=_stream,
                    args=[proc.stdout.fileno(), stdout, errors, _terminate],
                ),
                Thread(
                    target=_stream,
                    args=[proc.stderr.fileno(), stderr, errors, _terminate],
                ),
            ]
            for reader in readers:
                reader.start()
            for reader in readers:
                reader.join()

        self._remove(proc)
        LOGGER.debug(
            "Command '%s' exited with %s", " ".join(command), proc.returncode
        )

        if errors:
            raise errors[0]

        stdout.flush()
        stderr.flush()
        with self.multiplexer.create_control() as control:
            control.write(format_exit_status(proc.returncode))

        return subprocess.CompletedProcess(list(command), proc.returncode)

    def _validate_command(self, command: str, env: Mapping[str, str]) -> None:
        path = env.get("PATH", os.defpath)
        if shutil.which(command, path=path) is None:
            raise CommandNotFoundException(command, path=path)

    def _add(self, proc: subprocess.Popen[Any]) -> None:
        with self._lock:
            self.processes.add(proc)

    def _remove(self, proc: subprocess.Popen[Any]) -> None:
        with self._lock:
            self.processes.remove(proc)


def run_multiplexed(
    command: Sequence[str],
    multiplexer: StreamMultiplexer,
    env: Mapping[str, str] | None = None,
    cwd: str | os.PathLike[str] | None = None,
) -> subprocess.CompletedProcess[None]:
    """
    Run ``command``, tagging its output into ``multiplexer``.

    :return: the completed process. Its return code is not checked.
    :raise CommandNotFoundException: if the command can't be found.
    :raise OSError: if writing to the sink fails. The command is stopped.
    """
    return ProcessManager(multiplexer).run(command, env=env, cwd=cwd)
