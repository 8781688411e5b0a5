class BaseStreamMuxException(Exception):
    """
    Base exception used for exceptions thrown by streammux.

    Faults on the physical sink are never wrapped in one of these, they
    reach the caller as the original :py:class:`OSError`.

    :param message: A user-facing message explaining what happened.
    :param exit_code:

        the exit code to use for the streammux process if the exception is
        not caught.

        - 1 means the multiplexed command could not be run
        - 2 means a user or configuration error
    """

    def __init__(self, message: str, exit_code: int = 2) -> None:
        super().__init__(message)
        self._message = message
        self.exit_code = exit_code

    def __str__(self) -> str:
        return self._message


class InvalidMarkerException(BaseStreamMuxException, ValueError):
    def __init__(self, marker: object) -> None:
        super().__init__(
            f"Invalid marker {marker!r}: a marker must be a single printable"
            " byte, other than '@' and newline"
        )
        self.marker = marker


class CommandNotFoundException(BaseStreamMuxException):
    def __init__(self, command: str, path: str) -> None:
        super().__init__(
            f"The following command was not found in PATH: {command}.\n"
            f"PATH was set as: '{path}'",
            exit_code=1,
        )
