"""Resilient session client for the SugarCRM REST service."""

from .client import SugarConnection, connect
from .config import ClientConfig, resolve_url
from .errors import (
    AuthenticationError,
    EmptyResponse,
    InvalidEndpoint,
    InvalidRequest,
    InvalidSession,
    RetryLimitExceeded,
    SugarError,
    UnhandledResponse,
)

__all__ = [
    "SugarConnection",
    "connect",
    "ClientConfig",
    "resolve_url",
    "SugarError",
    "AuthenticationError",
    "EmptyResponse",
    "InvalidEndpoint",
    "InvalidRequest",
    "InvalidSession",
    "RetryLimitExceeded",
    "UnhandledResponse",
]
