"""Environment configuration for the Fathom MCP server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from dotenv import load_dotenv

from .fathom_client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

DEFAULT_PORT = 8080
DEFAULT_HOST = "0.0.0.0"


class ConfigError(Exception):
    """Missing or invalid configuration; fatal at startup."""


@dataclass(frozen=True)
class Settings:
    api_key: str
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build settings from the environment.

    When *environ* is omitted, a ``.env`` file in the working directory is
    loaded first (existing variables win).

    Raises:
        ConfigError: FATHOM_API_KEY is missing, or a numeric value is malformed
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    api_key = environ.get("FATHOM_API_KEY", "").strip()
    if not api_key:
        raise ConfigError(
            "FATHOM_API_KEY environment variable is required. "
            "Set it in your environment, a .env file, or your MCP client config."
        )

    try:
        port = int(environ.get("PORT") or DEFAULT_PORT)
    except ValueError:
        raise ConfigError(f"PORT must be an integer, got {environ.get('PORT')!r}") from None

    try:
        timeout = float(environ.get("FATHOM_TIMEOUT") or DEFAULT_TIMEOUT)
    except ValueError:
        raise ConfigError(
            f"FATHOM_TIMEOUT must be a number of seconds, got {environ.get('FATHOM_TIMEOUT')!r}"
        ) from None

    return Settings(
        api_key=api_key,
        host=environ.get("HOST") or DEFAULT_HOST,
        port=port,
        base_url=environ.get("FATHOM_API_BASE_URL") or DEFAULT_BASE_URL,
        timeout=timeout,
        log_level=(environ.get("LOG_LEVEL") or "INFO").upper(),
    )
