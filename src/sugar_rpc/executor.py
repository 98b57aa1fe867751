"""Request execution with bounded retry, reconnect and re-login."""

from __future__ import annotations

import json
import logging
from pprint import pformat
from typing import Any, List, Mapping, Optional

from .config import ClientConfig
from .envelope import Envelope, build_envelope
from .errors import (
    EmptyResponse,
    InvalidEndpoint,
    InvalidRequest,
    InvalidSession,
    RetryLimitExceeded,
    UnhandledResponse,
)
from .models import ServiceError
from .session import SessionManager
from .transport import CONNECTION_ERRORS, TIMEOUT_ERRORS, TransportResponse

logger = logging.getLogger("sugar_rpc.executor")

# Methods whose invalid-session replies must not trigger a re-login.
NO_RELOGIN_METHODS = frozenset({"login", "logout"})


class RequestExecutor:
    def __init__(self, config: ClientConfig, session: SessionManager) -> None:
        self._config = config
        self._session = session
        session.bind(self.send)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @config.setter
    def config(self, config: ClientConfig) -> None:
        self._config = config

    def send(
        self,
        method: str,
        params: Optional[Mapping[str, Any]] = None,
        max_retries: Optional[int] = None,
    ) -> Any:
        """Run ``method`` to completion, absorbing up to ``max_retries`` transient failures.

        Timeouts are retried as is, connection faults after a reconnect and an
        invalid session after logging in again. All three share one budget.
        """
        remaining = self._config.max_retries if max_retries is None else max_retries
        needs_session = self._config.needs_session(method)
        envelope = build_envelope(
            method,
            params,
            session=self._session.session_id if needs_session else None,
            debug=self._config.debug,
            needs_session=needs_session,
        )
        errors: List[BaseException] = []

        while True:
            if remaining <= 0:
                raise RetryLimitExceeded(list(reversed(errors)))
            remaining -= 1
            try:
                response = self._session.connection.post(self._config.url, envelope)
                return self._handle_response(envelope, response)
            except TIMEOUT_ERRORS as exc:
                errors.append(exc)
                logger.warning("%s timed out (%s retries left): %s", method, remaining, exc)
            except CONNECTION_ERRORS as exc:
                errors.append(exc)
                logger.warning("%s connection failed (%s retries left): %r", method, remaining, exc)
                self._session.reconnect()
            except InvalidSession as exc:
                errors.append(exc)
                logger.warning("%s session expired (%s retries left)", method, remaining)
                envelope.renew(self._session.login())

    def _handle_response(self, envelope: Envelope, response: TransportResponse) -> Any:
        status = response.status
        if status == 200:
            return self._process_response(envelope, response)
        if status == 404:
            raise InvalidEndpoint(self._config.url)
        if status == 500:
            raise InvalidRequest(envelope)
        if self._config.debug:
            logger.warning("%s: raw response status=%s body=%s", envelope.method, status, response.body)
        raise UnhandledResponse(f"Can't handle response status={status}", status=status, body=response.body)

    def _process_response(self, envelope: Envelope, response: TransportResponse) -> Any:
        method = envelope.method
        body = response.body
        if not body:
            raise EmptyResponse(method)
        if not self._config.returns_json(method):
            return body

        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise UnhandledResponse(body, status=response.status, body=body) from exc

        if self._config.debug and method not in self._config.quiet_methods:
            logger.info("%s: JSON response:\n%s", method, pformat(payload))

        error = ServiceError.parse(payload)
        if error is not None and error.is_invalid_session and method not in NO_RELOGIN_METHODS:
            raise InvalidSession(method)

        if self._zero_results(method, payload):
            return None
        return payload

    def _zero_results(self, method: str, payload: Any) -> bool:
        if not isinstance(payload, dict) or not self._config.empty_on_zero_results(method):
            return False
        count = payload.get("result_count")
        return count == 0 and not isinstance(count, bool)


__all__ = ["NO_RELOGIN_METHODS", "RequestExecutor"]
