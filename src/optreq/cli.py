"""Demo entry point issuing the two illustrative requests."""

from __future__ import annotations

import argparse
import logging
from http import HTTPMethod

from .client import RequestExecutor
from .context import RequestContext
from .login import HttpLoginAPI
from .request_options import (
    RequestOptions,
    build_request_options,
    with_body,
    with_method,
    with_query_params,
)
from .settings import Settings

logger = logging.getLogger("optreq")


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _configure_logging(level: str) -> None:
    resolved = logging.getLevelName(level.upper())
    logging.basicConfig(level=resolved if isinstance(resolved, int) else logging.INFO, format=LOG_FORMAT)
    if not isinstance(resolved, int):
        logger.warning("Unknown log level %r, using INFO", level)


def _parse_args(argv: list[str] | None, settings: Settings) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="optreq-demo")
    parser.add_argument("--url", default=settings.target_url)
    parser.add_argument("--login-url", default=settings.login_url)
    parser.add_argument("--email", default=settings.email)
    parser.add_argument("--password", default=settings.password)
    parser.add_argument("--timeout", type=float, default=settings.timeout)
    parser.add_argument("--log-level", default=settings.log_level)
    return parser.parse_args(argv)


def demo_calls() -> list[tuple[str, RequestOptions | None]]:
    return [
        ("defaults", None),
        (
            "post-with-query",
            build_request_options(
                with_method(HTTPMethod.POST),
                with_body(None),
                with_query_params({"name": "xyz", "age": "10"}),
            ),
        ),
    ]


def _load_settings() -> tuple[Settings, ValueError | None]:
    try:
        return Settings.load(), None
    except ValueError as exc:
        return Settings(), exc


def _run_demo(args: argparse.Namespace) -> None:
    login_api = HttpLoginAPI(args.login_url, timeout=args.timeout, allow_http=True)
    with login_api, RequestExecutor(login_api, timeout=args.timeout) as executor:
        for name, options in demo_calls():
            ctx = RequestContext.with_timeout(args.timeout)
            try:
                response = executor.execute(ctx, args.url, args.email, args.password, options)
            except Exception as exc:  # noqa: BLE001
                logger.info("%s call failed: %s", name, exc)
                continue
            logger.info("%s call returned %s", name, response.status_code)
            response.close()


def _main(argv: list[str] | None = None) -> int:
    settings, settings_error = _load_settings()
    args = _parse_args(argv, settings)
    _configure_logging(args.log_level)
    if settings_error is not None:
        logger.warning("Ignoring invalid environment configuration: %s", settings_error)

    try:
        _run_demo(args)
    except Exception:  # noqa: BLE001
        logger.exception("Demo could not be set up")
    # Outcomes are illustrative only; the exit status never reflects them.
    return 0


def main() -> None:
    raise SystemExit(_main())
