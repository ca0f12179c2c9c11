"""TailFleet exception classes."""

from __future__ import annotations


class TailFleetError(RuntimeError):
    """Base exception for TailFleet errors."""


class UserError(TailFleetError):
    """Errors that should be shown to user without traceback."""

    def __init__(self, message: str, rc: int = 2):
        super().__init__(message)
        self.rc = rc


class CommandFailureError(TailFleetError):
    """Command failed - error message already printed, just need to exit.

    This exception is for cases where a command has already printed
    its error message and just needs to signal failure without
    additional output from main().
    """

    def __init__(self, rc: int = 1):
        super().__init__("")
        self.rc = rc


class ValidationError(TailFleetError):
    """Missing filename or host; blocks a stream start locally."""


class ConnectivityError(TailFleetError):
    """A liveness check failed; the user has to retry manually."""


class FetchError(TailFleetError):
    """The file list could not be retrieved from the active host."""


class StreamError(TailFleetError):
    """The event stream failed or reported an in-band error."""


class ErrorSlot:
    """Single current-error slot shared by the session and the controller.

    Latest error wins; no history is kept.
    """

    def __init__(self) -> None:
        self.message = ""
        self.kind: type[TailFleetError] | None = None

    def __bool__(self) -> bool:
        return bool(self.message)

    def set(self, error: TailFleetError) -> None:
        self.message = str(error)
        self.kind = type(error)

    def clear(self) -> None:
        self.message = ""
        self.kind = None
