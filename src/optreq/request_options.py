"""Optional per-request settings for the request executor.

Settings are assembled with functional options: `build_request_options`
starts from the defaults and applies each option in order, so a later option
overwrites whatever an earlier one set on the same field.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from http import HTTPMethod
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

RequestBody = bytes | str | Iterable[bytes]


@dataclass(frozen=True)
class RequestOptions:
    method: str = HTTPMethod.GET
    body: RequestBody | None = None
    use_invalid_token: bool = False
    query: Mapping[str, str] | None = None
    accept: str = "application/json"


RequestOption = Callable[[RequestOptions], RequestOptions]


def build_request_options(*options: RequestOption) -> RequestOptions:
    """Return the defaults with every option applied left to right.

    No cross-field validation happens here; combinations such as an invalid
    token together with a body are legal and only matter once executed.
    """
    params = RequestOptions()
    for option in options:
        params = option(params)
    return params


def resolve_request_options(options: RequestOptions | None) -> RequestOptions:
    return options or RequestOptions()


def with_method(method: str) -> RequestOption:
    def apply(params: RequestOptions) -> RequestOptions:
        return replace(params, method=method)

    return apply


def with_body(body: RequestBody | None) -> RequestOption:
    def apply(params: RequestOptions) -> RequestOptions:
        return replace(params, body=body)

    return apply


def with_use_invalid_token(use_invalid_token: bool) -> RequestOption:
    def apply(params: RequestOptions) -> RequestOptions:
        return replace(params, use_invalid_token=use_invalid_token)

    return apply


def with_query_params(query: Mapping[str, str] | None) -> RequestOption:
    # Snapshot now so later edits to the caller's dict cannot reach a built value.
    frozen = MappingProxyType(dict(query)) if query is not None else None

    def apply(params: RequestOptions) -> RequestOptions:
        return replace(params, query=frozen)

    return apply


def with_accept_header(accept: str) -> RequestOption:
    def apply(params: RequestOptions) -> RequestOptions:
        return replace(params, accept=accept)

    return apply


def with_accept_and_method(accept: str, method: str) -> RequestOption:
    """Set two fields at once. Prefer one option per field when composing."""

    def apply(params: RequestOptions) -> RequestOptions:
        return replace(params, accept=accept, method=method)

    return apply
