"""Per-request overrides for raxios clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .content_type import ContentType


@dataclass(frozen=True)
class RequestOptions:
    headers: Mapping[str, str] | None = None
    content_type: ContentType | str | None = None
    accept: ContentType | str | None = None
    params: Mapping[str, str] | None = None
    timeout: float | None = None
    deserialize_body: bool = True
    strict_status: bool | None = None
    strict_fields: bool | None = None
