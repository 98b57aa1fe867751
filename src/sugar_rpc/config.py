"""Configuration objects for the SugarCRM session client."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Optional

import httpx

SERVICE_PATH = "/service/v2/rest.php"


def resolve_url(url: str) -> str:
    """Append the REST service path onto the URL unless it is already there."""
    parsed = httpx.URL(url)
    path = parsed.path
    if path.endswith("/rest.php"):
        return str(parsed)
    return str(parsed.copy_with(path=path.rstrip("/") + SERVICE_PATH))


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ClientConfig:
    url: str
    username: str
    password: str = field(repr=False)
    debug: bool = False
    register_modules: bool = True
    load_environment: bool = True
    max_retries: int = 3
    timeout: float = 10.0
    application_name: str = "sugar-rpc"
    user_agent: str = "sugar-rpc-python/0.1.0"
    headers: Dict[str, str] = field(default_factory=dict)
    non_json_methods: FrozenSet[str] = frozenset({"get_user_id", "get_user_team_id"})
    quiet_methods: FrozenSet[str] = frozenset()
    sessionless_methods: FrozenSet[str] = frozenset({"login", "get_server_info"})
    # None applies the empty result policy to every method
    zero_result_methods: Optional[FrozenSet[str]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "url", resolve_url(self.url))
        for name in ("non_json_methods", "quiet_methods", "sessionless_methods"):
            object.__setattr__(self, name, frozenset(getattr(self, name)))
        if self.zero_result_methods is not None:
            object.__setattr__(self, "zero_result_methods", frozenset(self.zero_result_methods))

    @classmethod
    def from_env(cls) -> "ClientConfig":
        url = os.environ.get("SUGAR_URL")
        username = os.environ.get("SUGAR_USERNAME")
        password = os.environ.get("SUGAR_PASSWORD")
        missing = [
            name
            for name, value in (("SUGAR_URL", url), ("SUGAR_USERNAME", username), ("SUGAR_PASSWORD", password))
            if not value
        ]
        if missing:
            raise ValueError(f"{', '.join(missing)} must be configured")

        return cls(
            url=url,
            username=username,
            password=password,
            debug=_env_flag("SUGAR_DEBUG", False),
            register_modules=_env_flag("SUGAR_REGISTER_MODULES", True),
            load_environment=_env_flag("SUGAR_LOAD_ENVIRONMENT", True),
            max_retries=int(os.environ.get("SUGAR_MAX_RETRIES", "3")),
            timeout=float(os.environ.get("SUGAR_TIMEOUT", "10.0")),
        )

    def with_debug(self, debug: bool) -> "ClientConfig":
        return replace(self, debug=debug)

    def returns_json(self, method: str) -> bool:
        return method not in self.non_json_methods

    def needs_session(self, method: str) -> bool:
        return method not in self.sessionless_methods

    def empty_on_zero_results(self, method: str) -> bool:
        return self.zero_result_methods is None or method in self.zero_result_methods


__all__ = ["ClientConfig", "SERVICE_PATH", "resolve_url"]
