"""Exceptions raised by optreq."""

from __future__ import annotations


class OptReqError(Exception):
    """Base exception for all optreq failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: object = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.cause = cause

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        if self.status_code is None:
            return str(self.args[0])
        return f"{self.status_code}: {self.args[0]}"


class OptReqValidationError(OptReqError):
    """Raised when a collaborator returns a payload that cannot be used."""


class OptReqHTTPError(OptReqError):
    """Raised for non-success replies from the login service."""


class OptReqAuthError(OptReqHTTPError):
    """Raised when the login service rejects the credentials."""


class LoginError(OptReqError):
    """Raised by the executor when a token could not be obtained.

    The request is never built or sent once this is raised.
    """


class RequestCancelledError(OptReqError):
    """Raised when the request context was cancelled or its deadline passed."""
