"""HTTP transport used by the session client."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from .config import ClientConfig
from .envelope import Envelope

# A timed out request can simply be sent again.
TIMEOUT_ERRORS = (httpx.TimeoutException, TimeoutError)

# Lower level faults that leave the connection unusable; recovering needs a new one.
CONNECTION_ERRORS = (
    httpx.ReadError,
    httpx.WriteError,
    httpx.CloseError,
    httpx.RemoteProtocolError,
    ConnectionResetError,
    ConnectionAbortedError,
    BrokenPipeError,
    EOFError,
)


@dataclass
class TransportResponse:
    status: int
    body: Optional[str]


class Transport(Protocol):
    def post(self, url: str, envelope: Envelope) -> TransportResponse:  # pragma: no cover - interface
        ...

    def close(self) -> None:  # pragma: no cover - interface
        ...

    @property
    def is_closed(self) -> bool:  # pragma: no cover - interface
        ...


class HttpxTransport:
    def __init__(self, config: ClientConfig, *, transport: Optional[httpx.BaseTransport] = None) -> None:
        headers = {"User-Agent": config.user_agent}
        headers.update(config.headers)
        self._client = httpx.Client(timeout=config.timeout, headers=headers, transport=transport)

    def post(self, url: str, envelope: Envelope) -> TransportResponse:
        response = self._client.post(url, data=envelope.to_form())
        return TransportResponse(status=response.status_code, body=response.text)

    def close(self) -> None:
        self._client.close()

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed


__all__ = ["CONNECTION_ERRORS", "TIMEOUT_ERRORS", "HttpxTransport", "Transport", "TransportResponse"]
