"""Exceptions raised by the SugarCRM session client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from .envelope import Envelope


class SugarError(Exception):
    """Base class for every error raised by this package."""


class AuthenticationError(SugarError):
    pass


class InvalidSession(SugarError):
    """The service no longer recognises our session token.

    Recoverable: the executor logs back in and retries. Callers only ever see
    it inside ``RetryLimitExceeded.errors``.
    """

    def __init__(self, method: str) -> None:
        super().__init__(f"{method}: session is no longer valid")
        self.method = method


class InvalidEndpoint(SugarError):
    def __init__(self, url: str) -> None:
        super().__init__(f"{url} is invalid")
        self.url = url


class InvalidRequest(SugarError):
    def __init__(self, envelope: "Envelope") -> None:
        super().__init__(f"{envelope!r} is invalid")
        self.envelope = envelope


class UnhandledResponse(SugarError):
    def __init__(self, message: str, *, status: Optional[int] = None, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class EmptyResponse(SugarError):
    def __init__(self, method: str) -> None:
        super().__init__(f"{method}: response body was empty")
        self.method = method


class RetryLimitExceeded(SugarError):
    """Raised once the retry budget is spent; ``errors`` is most recent first."""

    def __init__(self, errors: Sequence[BaseException]) -> None:
        self.errors = list(errors)
        lines = [f"{type(error).__name__}: {error}" for error in self.errors]
        super().__init__("\n  ".join(["SugarCRM connection errors:"] + lines))


__all__ = [
    "SugarError",
    "AuthenticationError",
    "InvalidSession",
    "InvalidEndpoint",
    "InvalidRequest",
    "UnhandledResponse",
    "EmptyResponse",
    "RetryLimitExceeded",
]
