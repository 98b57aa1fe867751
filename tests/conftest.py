from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import parse_qs

import httpx
import pytest

from sugar_rpc.client import SugarConnection
from sugar_rpc.config import ClientConfig
from sugar_rpc.transport import HttpxTransport

INVALID_SESSION_BODY = {
    "name": "Invalid Session ID",
    "number": 11,
    "description": "The session ID is invalid",
}


class FakeSugar:
    """In-memory REST service: queued replies per method, defaults otherwise."""

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.replies: Dict[str, List[Any]] = {}
        self.session_ids = ["sess-1", "sess-2", "sess-3", "sess-4"]
        self.logins = 0

    def queue(self, method: str, *replies: Any) -> None:
        self.replies.setdefault(method, []).extend(replies)

    def calls_for(self, method: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if call["method"] == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        form = parse_qs(request.content.decode())
        method = form["method"][0]
        raw = form["rest_data"][0]
        assert form["input_type"] == ["JSON"]
        assert form["response_type"] == ["JSON"]
        self.calls.append({"method": method, "raw": raw, "rest_data": json.loads(raw), "url": str(request.url)})

        queued = self.replies.get(method)
        if queued:
            reply = queued.pop(0)
            if isinstance(reply, BaseException):
                raise reply
            if isinstance(reply, httpx.Response):
                return reply
            return httpx.Response(200, json=reply)
        return self._default(method)

    def _default(self, method: str) -> httpx.Response:
        if method == "login":
            session_id = self.session_ids[self.logins]
            self.logins += 1
            return httpx.Response(200, json={"id": session_id, "module_name": "Users"})
        if method == "get_available_modules":
            return httpx.Response(200, json={"modules": ["Accounts", "Contacts", "Leads"]})
        if method == "get_server_info":
            return httpx.Response(200, json={"flavor": "CE", "version": "6.5.16", "gmt_time": "2026-10-17 09:00:00"})
        if method == "logout":
            return httpx.Response(200, text="null")
        return httpx.Response(200, json={"result_count": 1, "entry_list": [{"id": "1"}]})


@pytest.fixture()
def service() -> FakeSugar:
    return FakeSugar()


@pytest.fixture()
def make_client(service: FakeSugar) -> Callable[..., SugarConnection]:
    def factory(connections: Optional[List[HttpxTransport]] = None, **overrides: Any) -> SugarConnection:
        options: Dict[str, Any] = dict(
            url="https://crm.example.com",
            username="admin",
            password="secret",
            register_modules=False,
            load_environment=False,
        )
        options.update(overrides)
        config = ClientConfig(**options)
        mock = httpx.MockTransport(service.handler)

        def transport_factory(cfg: ClientConfig) -> HttpxTransport:
            connection = HttpxTransport(cfg, transport=mock)
            if connections is not None:
                connections.append(connection)
            return connection

        return SugarConnection(config, transport_factory=transport_factory)

    return factory
