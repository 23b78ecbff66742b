"""raxios: axios-style HTTP calls with typed (de)serialization over httpx."""

import logging

from raxios.client import AsyncRaxios, Raxios
from raxios.codecs import deserialize, serialize
from raxios.config import ClientConfig, ENV_VAR_MAPPING, __version__
from raxios.content_type import ContentType
from raxios.exceptions import (
    CodecError,
    ConfigurationError,
    EmptyBodyError,
    HttpStatusError,
    RaxiosError,
    TransportError,
    TransportTimeoutError,
    UnsupportedShapeError,
)
from raxios.headers import sanitize_headers
from raxios.request_options import RequestOptions
from raxios.response import ResponseWrapper

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Clients
    "Raxios",
    "AsyncRaxios",
    # Configuration
    "ClientConfig",
    "RequestOptions",
    "ContentType",
    "ENV_VAR_MAPPING",
    # Responses
    "ResponseWrapper",
    # Codecs
    "serialize",
    "deserialize",
    "sanitize_headers",
    # Exceptions
    "RaxiosError",
    "ConfigurationError",
    "TransportError",
    "TransportTimeoutError",
    "CodecError",
    "UnsupportedShapeError",
    "EmptyBodyError",
    "HttpStatusError",
    "__version__",
]
