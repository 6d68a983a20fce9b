"""Typed payloads exchanged with the login service."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class OptReqModel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class LoginRequest(OptReqModel):
    email: str
    password: str = Field(repr=False)


class AuthResponse(OptReqModel):
    token: str
    name: str | None = None
    expires_at: datetime | None = None
