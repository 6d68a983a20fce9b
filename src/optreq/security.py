"""Header redaction for logs and login URL checks."""

from __future__ import annotations

from typing import Mapping
from urllib.parse import urlsplit


SENSITIVE_HEADERS = frozenset({"authorization", "cookie", "proxy-authorization", "x-api-key"})
LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})
REDACTED = "[REDACTED]"


def sanitize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy of `headers` with credential-bearing values replaced by a marker."""
    return {key: REDACTED if key.lower() in SENSITIVE_HEADERS else value for key, value in headers.items()}


def validate_login_url(url: str, *, allow_http: bool = False) -> None:
    """Reject login service URLs that are malformed or would expose credentials.

    The login path is appended to this URL, so query strings and fragments are
    refused, as are URLs that embed user info.
    """
    if "\x00" in url:
        raise ValueError("login_url contains a NUL byte")
    parts = urlsplit(url)
    if parts.scheme not in {"http", "https"}:
        raise ValueError(f"login_url must use http or https, got {parts.scheme or 'no scheme'!r}")
    if not parts.hostname:
        raise ValueError("login_url must include a host")
    if parts.username is not None or parts.password is not None:
        raise ValueError("login_url must not embed credentials; pass them to login() instead")
    if parts.query or parts.fragment:
        raise ValueError("login_url must not carry a query string or fragment")
    if parts.scheme == "http" and not allow_http and parts.hostname.lower() not in LOOPBACK_HOSTS:
        raise ValueError("Plain-http login_url is only allowed for loopback hosts unless allow_http=True")
