"""Exception hierarchy shared by the transport and the endpoint services."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .api.client import Response


class TDAmeritradeError(Exception):
    """Base class for every error raised by this package."""


class RequestConstructionError(TDAmeritradeError, ValueError):
    """The request could not be built (bad base URL or path).

    Raised before any network I/O is attempted.
    """


class TransportError(TDAmeritradeError):
    """Network, timeout or HTTP-status failure.

    `response` carries whatever the server sent back (status code, headers,
    URL) or `None` when no response was received at all. The underlying
    `requests` exception is chained as `__cause__`.
    """

    def __init__(self, message: str, response: Response | None = None) -> None:
        super().__init__(message)
        self.response = response

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response is not None else None


class DecodeError(TDAmeritradeError, ValueError):
    """Response body does not match the expected schema."""

    def __init__(self, message: str, path: str | None = None) -> None:
        if path:
            message = f"{path}: {message}"
        super().__init__(message)
        self.path = path


class ContextCancelled(TDAmeritradeError):
    """The caller cancelled the context before the call completed."""


class DeadlineExceeded(ContextCancelled):
    """The context deadline passed before the call completed."""
