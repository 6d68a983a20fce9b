"""Synchronous and asynchronous executors for a single authenticated request."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Mapping

import httpx

from .context import RequestContext
from .exceptions import LoginError, RequestCancelledError
from .login import AsyncLoginAPI, LoginAPI
from .request_options import RequestOptions, resolve_request_options
from .security import sanitize_headers

logger = logging.getLogger(__name__)

INVALID_TOKEN = "Invalid Token"
CONTENT_TYPE = "application/json"
LOGIN_ERROR_MESSAGE = "error in login with user provided credentials"


def _login_error(exc: Exception) -> LoginError:
    logger.warning("Login failed; request will not be sent", exc_info=exc)
    return LoginError(f"{LOGIN_ERROR_MESSAGE}: {exc}", cause=exc)


def _build_url(target_url: str, query: Mapping[str, str] | None) -> httpx.URL:
    url = httpx.URL(target_url)
    if query:
        # Pairs already in the URL stay; configured pairs are added after them.
        params = list(url.params.multi_items()) + list(query.items())
        url = url.copy_with(params=params)
    return url


class _BaseRequestExecutor:
    default_timeout = 30.0

    def __init__(self, *, timeout: float = default_timeout) -> None:
        if timeout <= 0:
            raise ValueError("timeout must be greater than 0")
        self.timeout = timeout

    @staticmethod
    def _headers(request_options: RequestOptions, authorization: str) -> dict[str, str]:
        return {
            "Accept": request_options.accept,
            "Authorization": authorization,
            "Content-Type": CONTENT_TYPE,
        }

    def _build_request(
        self,
        client: httpx.Client | httpx.AsyncClient,
        ctx: RequestContext,
        target_url: str,
        request_options: RequestOptions,
        token: str,
    ) -> httpx.Request:
        headers = self._headers(request_options, f"Bearer {token}")
        request = client.build_request(
            str(request_options.method).upper(),
            _build_url(target_url, request_options.query),
            headers=headers,
            content=request_options.body,
            timeout=ctx.timeout_for(self.timeout),
        )
        logger.debug(
            "Sending request",
            extra={
                "method": request.method,
                "url": str(request.url),
                "headers": sanitize_headers(headers),
            },
        )
        return request

    @staticmethod
    def _log_response(response: httpx.Response) -> None:
        logger.debug(
            "Received response",
            extra={
                "method": response.request.method,
                "url": str(response.request.url),
                "status_code": response.status_code,
            },
        )


class RequestExecutor(_BaseRequestExecutor):
    """Issues one request per `execute` call against an injected login collaborator.

    Each call builds its own request; the only shared resource is the httpx
    connection pool, so one executor may be used from several threads.
    """

    def __init__(
        self,
        login_api: LoginAPI,
        *,
        timeout: float = _BaseRequestExecutor.default_timeout,
        httpx_client: httpx.Client | None = None,
    ) -> None:
        super().__init__(timeout=timeout)
        self._login_api = login_api
        self._owns_client = httpx_client is None
        self._httpx = httpx_client or httpx.Client(trust_env=False)

    def __enter__(self) -> "RequestExecutor":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._httpx.close()

    def _resolve_token(self, ctx: RequestContext, email: str, password: str, request_options: RequestOptions) -> str:
        if request_options.use_invalid_token:
            return INVALID_TOKEN
        try:
            auth = self._login_api.login(ctx, email, password)
        except RequestCancelledError:
            raise
        except Exception as exc:
            raise _login_error(exc) from exc
        return auth.token

    def _send(self, ctx: RequestContext, request: httpx.Request) -> httpx.Response:
        """Send on a worker thread so that cancelling `ctx` releases the caller at once."""
        finished = threading.Event()
        outcome: dict[str, Any] = {}

        def run() -> None:
            try:
                outcome["response"] = self._httpx.send(request)
            except Exception as exc:
                outcome["error"] = exc
            finally:
                finished.set()
                if ctx.cancelled and "response" in outcome:
                    outcome["response"].close()

        unregister = ctx.on_cancel(finished.set)
        threading.Thread(target=run, name="optreq-send", daemon=True).start()
        try:
            finished.wait()
        finally:
            unregister()

        if ctx.cancelled:
            if "response" in outcome:
                outcome["response"].close()
            logger.info("Request cancelled while in flight", extra={"url": str(request.url)})
            raise RequestCancelledError("request context was cancelled")
        if "error" in outcome:
            raise outcome["error"]
        return outcome["response"]

    def execute(
        self,
        ctx: RequestContext,
        target_url: str,
        email: str,
        password: str,
        options: RequestOptions | None = None,
    ) -> httpx.Response:
        """Authenticate, build and send the request, returning the raw response.

        Login failures raise `LoginError`. Errors from building or sending the
        request (`httpx.InvalidURL`, `httpx.TransportError`, ...) propagate
        unchanged, and the response status is never checked. Cancelling `ctx`
        while the request is in flight raises `RequestCancelledError`.
        """
        request_options = resolve_request_options(options)
        ctx.raise_if_cancelled()
        token = self._resolve_token(ctx, email, password, request_options)
        ctx.raise_if_cancelled()

        request = self._build_request(self._httpx, ctx, target_url, request_options, token)
        response = self._send(ctx, request)
        self._log_response(response)
        return response


class AsyncRequestExecutor(_BaseRequestExecutor):
    """Asynchronous executor.

    Cancelling `ctx` raises `RequestCancelledError`; cancelling the task raises
    `asyncio.CancelledError`.
    """

    def __init__(
        self,
        login_api: AsyncLoginAPI,
        *,
        timeout: float = _BaseRequestExecutor.default_timeout,
        httpx_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(timeout=timeout)
        self._login_api = login_api
        self._owns_client = httpx_client is None
        self._httpx = httpx_client or httpx.AsyncClient(trust_env=False)

    async def __aenter__(self) -> "AsyncRequestExecutor":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._httpx.aclose()

    async def _resolve_token(
        self, ctx: RequestContext, email: str, password: str, request_options: RequestOptions
    ) -> str:
        if request_options.use_invalid_token:
            return INVALID_TOKEN
        try:
            auth = await self._login_api.login(ctx, email, password)
        except RequestCancelledError:
            raise
        except Exception as exc:
            raise _login_error(exc) from exc
        return auth.token

    async def _send(self, ctx: RequestContext, request: httpx.Request) -> httpx.Response:
        loop = asyncio.get_running_loop()
        cancelled: asyncio.Future[None] = loop.create_future()

        def notify() -> None:
            if not cancelled.done():
                cancelled.set_result(None)

        unregister = ctx.on_cancel(lambda: loop.call_soon_threadsafe(notify))
        sending = asyncio.ensure_future(self._httpx.send(request))
        try:
            await asyncio.wait({sending, cancelled}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            unregister()
            cancelled.cancel()
            if not sending.done():
                sending.cancel()

        if not ctx.cancelled:
            return sending.result()
        if sending.done() and not sending.cancelled() and sending.exception() is None:
            await sending.result().aclose()
        logger.info("Request cancelled while in flight", extra={"url": str(request.url)})
        raise RequestCancelledError("request context was cancelled")

    async def execute(
        self,
        ctx: RequestContext,
        target_url: str,
        email: str,
        password: str,
        options: RequestOptions | None = None,
    ) -> httpx.Response:
        request_options = resolve_request_options(options)
        ctx.raise_if_cancelled()
        token = await self._resolve_token(ctx, email, password, request_options)
        ctx.raise_if_cancelled()

        request = self._build_request(self._httpx, ctx, target_url, request_options, token)
        response = await self._send(ctx, request)
        self._log_response(response)
        return response
