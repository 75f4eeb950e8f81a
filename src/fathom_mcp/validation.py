"""
Shared Validation Utilities

Field validators reused by the tool parameter models. Each raises
``ValueError`` so pydantic reports it as a normal validation error.
"""

from __future__ import annotations

from datetime import datetime
from urllib.parse import urlparse


def assert_iso8601(value: str, param_name: str) -> str:
    """Assert a timestamp is ISO-8601 (a trailing ``Z`` is accepted)."""
    candidate = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        datetime.fromisoformat(candidate)
    except ValueError:
        raise ValueError(
            f'Parameter "{param_name}" must be an ISO 8601 timestamp. Got: "{value}"'
        ) from None
    return value


def assert_http_url(value: str, param_name: str) -> str:
    """Assert a value is an absolute http(s) URL."""
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f'Parameter "{param_name}" must be an http(s) URL. Got: "{value}"')
    return value


def assert_not_blank(value: str, param_name: str) -> str:
    """Assert a string has non-whitespace content."""
    if not value.strip():
        raise ValueError(f'Parameter "{param_name}" must not be empty')
    return value
