from __future__ import annotations

import asyncio
import threading

import httpx
import pytest

from conftest import AsyncStubLogin, RecordingTransport
from optreq.client import INVALID_TOKEN, AsyncRequestExecutor
from optreq.context import RequestContext
from optreq.exceptions import LoginError, RequestCancelledError
from optreq.request_options import (
    build_request_options,
    with_body,
    with_method,
    with_query_params,
    with_use_invalid_token,
)

URL = "https://api.example.com/items"


def _run(login: AsyncStubLogin, transport: httpx.MockTransport, options=None) -> httpx.Response:
    async def call() -> httpx.Response:
        async with AsyncRequestExecutor(login, httpx_client=httpx.AsyncClient(transport=transport)) as executor:
            return await executor.execute(RequestContext.background(), URL, "user", "pw", options)

    return asyncio.run(call())


def test_async_post_with_query(transport: RecordingTransport) -> None:
    options = build_request_options(
        with_method("POST"),
        with_body(None),
        with_query_params({"name": "xyz", "age": "10"}),
    )
    response = _run(AsyncStubLogin(token="tok"), transport, options)

    assert response.status_code == 200
    [request] = transport.requests
    assert request.method == "POST"
    assert request.headers["Authorization"] == "Bearer tok"
    assert request.url.params["name"] == "xyz"
    assert request.url.params["age"] == "10"


def test_async_invalid_token_skips_login(transport: RecordingTransport) -> None:
    login = AsyncStubLogin(error=AssertionError("login must not be called"))
    _run(login, transport, build_request_options(with_use_invalid_token(True)))

    assert login.calls == []
    assert transport.requests[0].headers["Authorization"] == f"Bearer {INVALID_TOKEN}"


def test_async_login_failure_is_wrapped(transport: RecordingTransport) -> None:
    login = AsyncStubLogin(error=RuntimeError("auth service down"))
    with pytest.raises(LoginError, match="auth service down"):
        _run(login, transport)
    assert transport.requests == []


def test_async_task_cancellation_propagates() -> None:
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(10)
        return httpx.Response(200)

    async def call() -> None:
        transport = httpx.MockTransport(handler)
        async with AsyncRequestExecutor(AsyncStubLogin(), httpx_client=httpx.AsyncClient(transport=transport)) as executor:
            task = asyncio.create_task(executor.execute(RequestContext.background(), URL, "user", "pw"))
            await started.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

    asyncio.run(call())


def test_async_context_cancel_while_in_flight() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200)

    async def call() -> None:
        ctx = RequestContext.background()
        transport = httpx.MockTransport(handler)
        async with AsyncRequestExecutor(AsyncStubLogin(), httpx_client=httpx.AsyncClient(transport=transport)) as executor:
            asyncio.get_running_loop().call_later(0.05, ctx.cancel)
            with pytest.raises(RequestCancelledError, match="cancelled"):
                await asyncio.wait_for(executor.execute(ctx, URL, "user", "pw"), timeout=2)

    asyncio.run(call())


def test_async_context_cancel_from_another_thread() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200)

    async def call() -> None:
        ctx = RequestContext.background()
        transport = httpx.MockTransport(handler)
        timer = threading.Timer(0.05, ctx.cancel)
        async with AsyncRequestExecutor(AsyncStubLogin(), httpx_client=httpx.AsyncClient(transport=transport)) as executor:
            timer.start()
            try:
                with pytest.raises(RequestCancelledError):
                    await asyncio.wait_for(executor.execute(ctx, URL, "user", "pw"), timeout=2)
            finally:
                timer.cancel()

    asyncio.run(call())
