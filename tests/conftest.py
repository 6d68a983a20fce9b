from __future__ import annotations

import httpx
import pytest

from optreq.context import RequestContext
from optreq.models import AuthResponse


class StubLogin:
    def __init__(self, token: str = "valid-token", error: Exception | None = None) -> None:
        self.token = token
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def login(self, ctx: RequestContext, email: str, password: str) -> AuthResponse:
        self.calls.append((email, password))
        if self.error is not None:
            raise self.error
        return AuthResponse(token=self.token)


class AsyncStubLogin(StubLogin):
    async def login(self, ctx: RequestContext, email: str, password: str) -> AuthResponse:  # type: ignore[override]
        return StubLogin.login(self, ctx, email, password)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it handled."""

    def __init__(self, status_code: int = 200, json: object | None = None) -> None:
        self.requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            request.read()
            self.requests.append(request)
            return httpx.Response(status_code, json=json if json is not None else {"ok": True})

        super().__init__(handler)


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def ctx() -> RequestContext:
    return RequestContext.background()
