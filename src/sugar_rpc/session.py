"""Session state: the transport connection and the login token."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import httpx
from pydantic import ValidationError

from .config import ClientConfig
from .envelope import hash_password
from .errors import AuthenticationError, EmptyResponse, SugarError, UnhandledResponse
from .models import LoginResult, ServiceError
from .transport import Transport

logger = logging.getLogger("sugar_rpc.session")

Sender = Callable[..., Any]
TransportFactory = Callable[[ClientConfig], Transport]


class SessionManager:
    def __init__(self, config: ClientConfig, transport_factory: TransportFactory) -> None:
        self._config = config
        self._factory = transport_factory
        self._connection: Optional[Transport] = None
        self._session_id: Optional[str] = None
        self._send: Optional[Sender] = None

    def bind(self, send: Sender) -> None:
        """Attach the request executor's ``send`` used for login and logout."""
        self._send = send

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def connection(self) -> Transport:
        self.ensure_connected()
        return self._connection  # type: ignore[return-value]

    def is_authenticated(self) -> bool:
        return bool(self._session_id)

    def connected(self) -> bool:
        return self._connection is not None

    def ensure_connected(self) -> None:
        if self._connection is None:
            self._connection = self._factory(self._config)

    def reconnect(self) -> None:
        logger.info("Reconnecting to %s", self._config.url)
        self.close()
        self.ensure_connected()

    def login(self) -> str:
        if self._send is None:
            raise RuntimeError("SessionManager is not bound to an executor")
        self.ensure_connected()
        params = {
            "user_auth": {
                "user_name": self._config.username,
                "password": hash_password(self._config.password),
            },
            "application_name": self._config.application_name,
            "name_value_list": [],
        }
        try:
            result = self._send("login", params)
        except (EmptyResponse, UnhandledResponse) as exc:
            raise AuthenticationError(f"Invalid Login: unusable login response ({exc})") from exc
        error = ServiceError.parse(result)
        if error is not None:
            raise AuthenticationError(f"Invalid Login: {error.description or error.name}")
        if not isinstance(result, dict):
            raise AuthenticationError("Invalid Login: unexpected login response")
        try:
            login = LoginResult.model_validate(result)
        except ValidationError as exc:
            raise AuthenticationError("Invalid Login: no session id returned") from exc
        self._session_id = login.id
        logger.info("Logged in to %s as %s", self._config.url, self._config.username)
        return login.id

    def logout(self) -> None:
        try:
            if self._session_id and self._send is not None:
                self._send("logout")
        except (SugarError, httpx.HTTPError, OSError, EOFError) as exc:
            logger.warning("Logout from %s failed: %s", self._config.url, exc)
        finally:
            self._session_id = None

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None


__all__ = ["SessionManager", "TransportFactory"]
