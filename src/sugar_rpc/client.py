"""Session client for the SugarCRM REST service."""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Mapping, Optional, Tuple

import httpx

from .config import ClientConfig
from .executor import RequestExecutor
from .models import ServerInfo
from .session import SessionManager, TransportFactory
from .transport import HttpxTransport

logger = logging.getLogger("sugar_rpc.client")


class SugarConnection:
    """One authenticated session against one SugarCRM instance.

    Logging in and loading metadata happen during construction; a failure
    there logs out, closes the connection and re-raises.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        transport_factory: Optional[TransportFactory] = None,
    ) -> None:
        if transport_factory is None:
            transport_factory = partial(HttpxTransport, transport=transport)

        self._session = SessionManager(config, transport_factory)
        self._executor = RequestExecutor(config, self._session)
        self.modules: Tuple[str, ...] = ()
        self.server_info: Optional[ServerInfo] = None

        try:
            self._session.login()
            if config.register_modules:
                self.modules = self._fetch_modules()
            if config.load_environment:
                self.server_info = self.get_server_info()
        except Exception:
            # logout is a no-op when login never produced a session
            self._session.logout()
            self._session.close()
            raise

    def __enter__(self) -> "SugarConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.logout()
        self.close()

    @property
    def config(self) -> ClientConfig:
        return self._executor.config

    @property
    def url(self) -> str:
        return self.config.url

    @property
    def session_id(self) -> Optional[str]:
        return self._session.session_id

    @property
    def debug(self) -> bool:
        return self.config.debug

    @debug.setter
    def debug(self, debug: bool) -> None:
        self._executor.config = self.config.with_debug(debug)

    def logged_in(self) -> bool:
        return self._session.is_authenticated()

    def connected(self) -> bool:
        return self._session.connected()

    def connect(self) -> None:
        self._session.ensure_connected()

    def reconnect(self) -> None:
        self._session.reconnect()

    def login(self) -> str:
        return self._session.login()

    def logout(self) -> None:
        self._session.logout()

    def send(self, method: str, params: Optional[Mapping[str, Any]] = None, max_retries: Optional[int] = None) -> Any:
        return self._executor.send(method, params, max_retries=max_retries)

    def get_user_id(self) -> str:
        return self.send("get_user_id")

    def get_server_info(self) -> ServerInfo:
        return ServerInfo.model_validate(self.send("get_server_info") or {})

    def close(self) -> None:
        self._session.close()

    def _fetch_modules(self) -> Tuple[str, ...]:
        result = self.send("get_available_modules")
        if not isinstance(result, dict):
            return ()
        names = []
        for module in result.get("modules") or []:
            # v4 and later wrap each module in an object
            if isinstance(module, dict):
                module = module.get("module_key")
            if module:
                names.append(str(module))
        logger.info("Registered %d modules from %s", len(names), self.url)
        return tuple(names)


def connect(
    url: str,
    username: str,
    password: str,
    *,
    transport: Optional[httpx.BaseTransport] = None,
    **options: Any,
) -> SugarConnection:
    """Log in to ``url`` and return the connected client.

    ``options`` are ``ClientConfig`` fields such as ``debug``,
    ``register_modules`` and ``load_environment``.
    """
    config = ClientConfig(url=url, username=username, password=password, **options)
    return SugarConnection(config, transport=transport)


__all__ = ["SugarConnection", "connect"]
