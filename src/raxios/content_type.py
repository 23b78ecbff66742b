"""Body formats understood by the codec layer."""

from __future__ import annotations

from enum import Enum

from .exceptions import ConfigurationError


class ContentType(str, Enum):
    """Serialization format of a request or response body.

    The value is the MIME type sent in ``Content-Type`` / ``Accept`` headers.
    """

    JSON = "application/json"
    TEXT_XML = "text/xml"
    APPLICATION_XML = "application/xml"
    URL_ENCODED = "application/x-www-form-urlencoded"

    def __str__(self) -> str:
        return self.value

    @property
    def is_xml(self) -> bool:
        return self in (ContentType.TEXT_XML, ContentType.APPLICATION_XML)

    @classmethod
    def parse(cls, raw: str | None) -> "ContentType | None":
        """Map a raw header value to a member, or ``None`` if unsupported."""
        if not raw:
            return None
        mime = raw.split(";", 1)[0].strip().lower()
        for member in cls:
            if member.value == mime:
                return member
        if mime.endswith("+json"):
            return cls.JSON
        if mime.endswith("+xml"):
            return cls.APPLICATION_XML
        return None

    @classmethod
    def coerce(cls, value: "ContentType | str") -> "ContentType":
        if isinstance(value, ContentType):
            return value
        parsed = cls.parse(value) if isinstance(value, str) else None
        if parsed is None:
            raise ConfigurationError(f"Unsupported content type: {value!r}")
        return parsed
