"""Header validation, merging and redaction helpers."""

from __future__ import annotations

import re
from typing import Mapping
from urllib.parse import urlparse

from .exceptions import ConfigurationError

# RFC 7230 token
_HEADER_NAME = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
# visible ASCII, space and horizontal tab
_HEADER_VALUE = re.compile(r"[\t\x20-\x7e]*")

SENSITIVE_HEADERS = {
    "authorization",
    "proxy-authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
}


def sanitize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return headers with sensitive values redacted for logging."""
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted


def validate_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    """Check header syntax and collapse case-insensitive duplicates.

    Later entries win over earlier ones with the same name, keeping the
    spelling of the winning entry.
    """
    if not headers:
        return {}
    clean: dict[str, str] = {}
    for key, value in headers.items():
        name = str(key)
        text = str(value)
        if not _HEADER_NAME.fullmatch(name):
            raise ConfigurationError(f"Unable to parse header: {name!r} => {text!r}")
        if not _HEADER_VALUE.fullmatch(text):
            raise ConfigurationError(f"Unable to parse header: {name!r} => {text!r}")
        clean = merge_headers(clean, {name: text})
    return clean


def merge_headers(*layers: Mapping[str, str] | None) -> dict[str, str]:
    """Merge header mappings left to right; names compare case-insensitively."""
    merged: dict[str, tuple[str, str]] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            merged[key.lower()] = (key, value)
    return {name: value for name, value in merged.values()}


def validate_base_url(url: str) -> str:
    """Validate a base URL and return it unchanged."""
    if "\x00" in url:
        raise ConfigurationError(f"{url!r} is not a valid Url")
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise ConfigurationError(f"{url!r} is not a valid Url: base_url must include scheme and host")
    if parsed.scheme not in {"http", "https"}:
        raise ConfigurationError(f"Unsupported base_url scheme: {parsed.scheme}")
    return url


def join_url(base_url: str, path: str) -> str:
    """Join base URL and path with exactly one slash between them."""
    if not path:
        return base_url
    return base_url.rstrip("/") + "/" + path.lstrip("/")
