"""Build and send a single authenticated HTTP request from optional settings."""

from .client import INVALID_TOKEN, AsyncRequestExecutor, RequestExecutor
from .context import RequestContext
from .exceptions import (
    LoginError,
    OptReqAuthError,
    OptReqError,
    OptReqHTTPError,
    OptReqValidationError,
    RequestCancelledError,
)
from .login import AsyncHttpLoginAPI, AsyncLoginAPI, HttpLoginAPI, LoginAPI
from .models import AuthResponse
from .request_options import (
    RequestOption,
    RequestOptions,
    build_request_options,
    resolve_request_options,
    with_accept_and_method,
    with_accept_header,
    with_body,
    with_method,
    with_query_params,
    with_use_invalid_token,
)
from .settings import Settings

__all__ = [
    "INVALID_TOKEN",
    "AsyncHttpLoginAPI",
    "AsyncLoginAPI",
    "AsyncRequestExecutor",
    "AuthResponse",
    "HttpLoginAPI",
    "LoginAPI",
    "LoginError",
    "OptReqAuthError",
    "OptReqError",
    "OptReqHTTPError",
    "OptReqValidationError",
    "RequestCancelledError",
    "RequestContext",
    "RequestExecutor",
    "RequestOption",
    "RequestOptions",
    "Settings",
    "build_request_options",
    "resolve_request_options",
    "with_accept_and_method",
    "with_accept_header",
    "with_body",
    "with_method",
    "with_query_params",
    "with_use_invalid_token",
]
