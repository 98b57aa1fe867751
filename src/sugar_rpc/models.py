"""Pydantic models for the fixed response shapes of the REST service."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

INVALID_SESSION = "Invalid Session ID"


class LoginResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1)


class ServiceError(BaseModel):
    """Error object, e.g. ``{"name": "Invalid Session ID", "number": 11, ...}``."""

    model_config = ConfigDict(extra="allow")

    name: str
    number: Optional[int] = None
    description: Optional[str] = None

    @property
    def is_invalid_session(self) -> bool:
        return self.name == INVALID_SESSION

    @classmethod
    def parse(cls, payload: Any) -> Optional["ServiceError"]:
        if not isinstance(payload, dict) or not isinstance(payload.get("name"), str):
            return None
        # Entry records carry a "name" too; only the error triple counts.
        if "number" not in payload and "description" not in payload:
            return None
        try:
            return cls.model_validate(payload)
        except ValidationError:
            return None


class ServerInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    flavor: Optional[str] = None
    version: Optional[str] = None
    gmt_time: Optional[str] = None


__all__ = ["INVALID_SESSION", "LoginResult", "ServiceError", "ServerInfo"]
