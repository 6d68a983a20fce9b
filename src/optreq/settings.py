"""Environment-driven configuration for the demo entry point."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    target_url: str = "some_url"
    login_url: str = "http://localhost:8080"
    email: str = "email_addr"
    password: str = "email_passwd"
    timeout: float = 30.0
    log_level: str = "INFO"

    @classmethod
    def load(cls, env_prefix: str = "OPTREQ_") -> "Settings":
        """Read settings from `OPTREQ_*` environment variables, falling back to defaults."""

        def read(name: str, default: str) -> str:
            return os.getenv(f"{env_prefix}{name}", "").strip() or default

        timeout_raw = read("TIMEOUT", str(cls.timeout))
        try:
            timeout = float(timeout_raw)
        except ValueError as exc:
            raise ValueError(f"{env_prefix}TIMEOUT must be a numeric value.") from exc
        if timeout <= 0:
            raise ValueError(f"{env_prefix}TIMEOUT must be greater than zero.")

        return cls(
            target_url=read("TARGET_URL", cls.target_url),
            login_url=read("LOGIN_URL", cls.login_url),
            email=read("EMAIL", cls.email),
            password=read("PASSWORD", cls.password),
            timeout=timeout,
            log_level=read("LOG_LEVEL", cls.log_level).upper(),
        )
