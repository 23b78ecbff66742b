"""Response envelope returned by every verb method."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Generic, Mapping, TypeVar

from .content_type import ContentType

T = TypeVar("T")


@dataclass(frozen=True)
class ResponseWrapper(Generic[T]):
    status: int
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    body: T | None = None
    raw_body: bytes = b""
    url: str = ""
    method: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def content_type(self) -> ContentType | None:
        return ContentType.parse(self.headers.get("content-type"))
