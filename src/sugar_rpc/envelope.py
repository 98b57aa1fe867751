"""Outbound request envelopes for the REST service."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger("sugar_rpc.envelope")


def hash_password(secret: str) -> str:
    """The service expects the MD5 hex digest of the password in ``user_auth``."""
    return hashlib.md5(secret.encode("utf-8")).hexdigest()


@dataclass
class Envelope:
    """One request: method name, its arguments and the session it runs under.

    The session token is kept apart from ``params`` so it can be swapped after a
    re-login without touching the serialized arguments.
    """

    method: str
    params: Dict[str, Any] = field(default_factory=dict)
    session: Optional[str] = None
    # Sessionless methods (login, get_server_info) carry no session argument.
    needs_session: bool = True

    def renew(self, session: Optional[str]) -> None:
        if self.needs_session:
            self.session = session

    def rest_data(self) -> str:
        # Arguments are read positionally by the service, so order matters.
        data: Dict[str, Any] = {}
        if self.needs_session:
            data["session"] = self.session
        data.update(self.params)
        return json.dumps(data, separators=(",", ":"))

    def to_form(self) -> Dict[str, str]:
        return {
            "method": self.method,
            "input_type": "JSON",
            "response_type": "JSON",
            "rest_data": self.rest_data(),
        }

    def __repr__(self) -> str:
        return f"Envelope(method={self.method!r}, params={list(self.params)!r})"


def build_envelope(
    method: str,
    params: Optional[Mapping[str, Any]] = None,
    session: Optional[str] = None,
    debug: bool = False,
    needs_session: Optional[bool] = None,
) -> Envelope:
    if needs_session is None:
        needs_session = session is not None
    envelope = Envelope(method=method, params=dict(params or {}), session=session, needs_session=needs_session)
    # login carries the password digest
    if debug and method != "login":
        logger.info("%s: request rest_data=%s", method, envelope.rest_data())
    return envelope


__all__ = ["Envelope", "build_envelope", "hash_password"]
