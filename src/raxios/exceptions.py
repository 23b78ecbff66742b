"""Exceptions raised by raxios clients and codecs."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:
    from .response import ResponseWrapper


class RaxiosError(Exception):
    """Base exception for all raxios failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.headers = dict(headers) if headers is not None else {}
        self.body = body
        self.cause = cause

    def __str__(self) -> str:  # pragma: no cover - simple formatting
        if self.status_code is None:
            return str(self.args[0])
        return f"{self.status_code}: {self.args[0]}"


class ConfigurationError(RaxiosError):
    """Raised for invalid client setup: base URL, headers or options."""


class TransportError(RaxiosError):
    """Raised for transport-level failures like DNS, TCP and TLS errors."""


class TransportTimeoutError(TransportError):
    """Raised when a request exceeds its configured timeout."""


class CodecError(RaxiosError):
    """Raised when a payload cannot be serialized or deserialized."""


class UnsupportedShapeError(CodecError):
    """Raised when a value's shape cannot be expressed in the chosen format."""


class EmptyBodyError(RaxiosError):
    """Raised when a body is required but the response carried none."""


class HttpStatusError(RaxiosError):
    """Raised for non-2xx responses when strict status checking is enabled."""

    def __init__(self, message: str, *, response: "ResponseWrapper[object]") -> None:
        super().__init__(
            message,
            status_code=response.status,
            headers=response.headers,
            body=response.raw_body,
        )
        self.response = response

    @property
    def code(self) -> int:
        return self.response.status
