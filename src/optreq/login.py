"""Login collaborators that exchange credentials for a bearer token."""

from __future__ import annotations

from typing import Any, Mapping, Protocol

import httpx
from pydantic import ValidationError

from .context import RequestContext
from .exceptions import OptReqAuthError, OptReqHTTPError, OptReqValidationError
from .models import AuthResponse, LoginRequest
from .security import validate_login_url

LOGIN_PATH = "/api/v1/auth"


class LoginAPI(Protocol):
    def login(self, ctx: RequestContext, email: str, password: str) -> AuthResponse: ...


class AsyncLoginAPI(Protocol):
    async def login(self, ctx: RequestContext, email: str, password: str) -> AuthResponse: ...


def _raise_for_status(response: httpx.Response) -> None:
    if response.status_code < 400:
        return
    parsed_body = None
    raw_body = response.text
    if "application/json" in response.headers.get("content-type", "").lower():
        try:
            parsed_body = response.json()
        except ValueError:
            parsed_body = None

    message = raw_body or "login failed"
    if isinstance(parsed_body, Mapping):
        if isinstance(parsed_body.get("error"), str):
            message = parsed_body["error"]
        elif isinstance(parsed_body.get("message"), str):
            message = parsed_body["message"]

    kwargs: dict[str, Any] = {
        "status_code": response.status_code,
        "body": parsed_body if parsed_body is not None else raw_body,
    }
    if response.status_code in {401, 403}:
        raise OptReqAuthError(message, **kwargs)
    raise OptReqHTTPError(message, **kwargs)


def _parse_auth_response(response: httpx.Response) -> AuthResponse:
    _raise_for_status(response)
    try:
        return AuthResponse.model_validate_json(response.content)
    except ValidationError as exc:
        raise OptReqValidationError(
            "login response did not contain a token",
            status_code=response.status_code,
            body=response.text,
            cause=exc,
        ) from exc


class _BaseHttpLoginAPI:
    default_timeout = 30.0

    def __init__(self, base_url: str, *, timeout: float = default_timeout, allow_http: bool = False) -> None:
        self.base_url = base_url.rstrip("/")
        validate_login_url(self.base_url, allow_http=allow_http)
        self.timeout = timeout

    def _payload(self, email: str, password: str) -> dict[str, str]:
        return LoginRequest(email=email, password=password).model_dump()


class HttpLoginAPI(_BaseHttpLoginAPI):
    """Posts credentials to `<base_url>/api/v1/auth` and returns the token."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = _BaseHttpLoginAPI.default_timeout,
        allow_http: bool = False,
        httpx_client: httpx.Client | None = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, allow_http=allow_http)
        self._owns_client = httpx_client is None
        self._httpx = httpx_client or httpx.Client(base_url=self.base_url, trust_env=False)

    def __enter__(self) -> "HttpLoginAPI":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._httpx.close()

    def login(self, ctx: RequestContext, email: str, password: str) -> AuthResponse:
        ctx.raise_if_cancelled()
        response = self._httpx.post(
            LOGIN_PATH,
            json=self._payload(email, password),
            headers={"Accept": "application/json"},
            timeout=ctx.timeout_for(self.timeout),
        )
        return _parse_auth_response(response)


class AsyncHttpLoginAPI(_BaseHttpLoginAPI):
    """Asynchronous variant of `HttpLoginAPI`."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = _BaseHttpLoginAPI.default_timeout,
        allow_http: bool = False,
        httpx_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(base_url, timeout=timeout, allow_http=allow_http)
        self._owns_client = httpx_client is None
        self._httpx = httpx_client or httpx.AsyncClient(base_url=self.base_url, trust_env=False)

    async def __aenter__(self) -> "AsyncHttpLoginAPI":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._httpx.aclose()

    async def login(self, ctx: RequestContext, email: str, password: str) -> AuthResponse:
        ctx.raise_if_cancelled()
        response = await self._httpx.post(
            LOGIN_PATH,
            json=self._payload(email, password),
            headers={"Accept": "application/json"},
            timeout=ctx.timeout_for(self.timeout),
        )
        return _parse_auth_response(response)
