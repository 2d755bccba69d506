"""Exception hierarchy for the vismatch client."""

from __future__ import annotations


class VismatchError(Exception):
    """Base class for all vismatch client errors."""


class ValidationError(VismatchError):
    """Input rejected before any network activity.

    Raised for an empty project name, a missing file, a non-image file
    or an empty upload queue.
    """


class ReadError(VismatchError):
    """A file handle could not be read."""

    def __init__(self, file: str, reason: str) -> None:
        self.file = file
        self.reason = reason
        super().__init__(f"Cannot read file {file}: {reason}")


class RequestFailure(VismatchError):
    """Transport or server error from the similarity service.

    *message* is the best human-readable explanation available: the
    server's structured error message when one was returned, otherwise
    a transport-level description.  *unreachable* is set when the server
    could not be contacted at all.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        unreachable: bool = False,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.unreachable = unreachable
        super().__init__(message)


class RunInProgressError(VismatchError):
    """An upload run was started while another is still running."""


class InvalidTransitionError(VismatchError, ValueError):
    """An upload entry was moved to a status its state does not allow."""
