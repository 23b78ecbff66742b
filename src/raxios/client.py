"""Blocking and asynchronous raxios clients."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

import httpx

from . import codecs
from .config import ClientConfig
from .content_type import ContentType
from .exceptions import (
    ConfigurationError,
    HttpStatusError,
    TransportError,
    TransportTimeoutError,
)
from .headers import join_url, merge_headers, sanitize_headers, validate_base_url, validate_headers
from .request_options import RequestOptions
from .response import ResponseWrapper

logger = logging.getLogger(__name__)

_NO_CONTENT_STATUSES = frozenset({204, 205, 304})


def _resolve_request_options(options: RequestOptions | None) -> RequestOptions:
    return options or RequestOptions()


def _coerce_query_params(params: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if params is None:
        return None
    normalized: dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            normalized[str(key)] = [codecs.format_scalar(v) for v in value if v is not None]
            continue
        normalized[str(key)] = codecs.format_scalar(value)
    return normalized or None


def _content_type_header(request_options: RequestOptions, content_type: ContentType) -> str:
    """Keep a per-call Content-Type header when it names the body format."""
    for key, value in (request_options.headers or {}).items():
        if key.lower() == "content-type" and ContentType.parse(value) is content_type:
            return value
    return content_type.value


@dataclass(frozen=True)
class _CallPlan:
    """Everything one exchange needs, resolved from defaults and overrides."""

    method: str
    url: str
    headers: Mapping[str, str]
    params: Mapping[str, Any] | None
    content: bytes | None
    content_type: ContentType
    timeout: float | None
    follow_redirects: bool
    deserialize_body: bool
    strict_status: bool
    strict_fields: bool


class _BaseRaxios:
    def __init__(self, base_url: str, config: ClientConfig | None = None) -> None:
        self.base_url = validate_base_url(base_url)
        self.config = config or ClientConfig()
        self._content_type = (
            ContentType.coerce(self.config.content_type) if self.config.content_type is not None else None
        )
        if self.config.timeout is not None and self.config.timeout <= 0:
            raise ConfigurationError("timeout must be greater than 0")

        defaults = {"User-Agent": self.config.user_agent}
        if self.config.accept is not None:
            defaults["Accept"] = ContentType.coerce(self.config.accept).value
        self._default_headers = MappingProxyType(
            merge_headers(validate_headers(defaults), validate_headers(self.config.headers))
        )
        self._client_kwargs = {
            "timeout": self.config.timeout,
            "follow_redirects": self.config.follow_redirects,
        }

    @property
    def default_headers(self) -> Mapping[str, str]:
        return self._default_headers

    def _resolve_content_type(self, request_options: RequestOptions) -> ContentType:
        if request_options.content_type is not None:
            return ContentType.coerce(request_options.content_type)
        if self._content_type is not None:
            return self._content_type
        return ContentType.JSON

    def _build_request_timeout(self, request_options: RequestOptions) -> float | None:
        timeout = request_options.timeout if request_options.timeout is not None else self.config.timeout
        if timeout is not None and timeout <= 0:
            raise ConfigurationError("timeout must be greater than 0")
        return timeout

    def _plan(self, method: str, path: str, body: Any, options: RequestOptions | None) -> _CallPlan:
        request_options = _resolve_request_options(options)
        method = method.upper()
        content_type = self._resolve_content_type(request_options)

        headers = merge_headers(self._default_headers, validate_headers(request_options.headers))
        if request_options.accept is not None:
            headers = merge_headers(headers, {"Accept": ContentType.coerce(request_options.accept).value})

        content = None
        if body is not None:
            content = codecs.serialize(body, content_type)
            headers = merge_headers(headers, {"Content-Type": _content_type_header(request_options, content_type)})

        strict_status = request_options.strict_status
        strict_fields = request_options.strict_fields
        return _CallPlan(
            method=method,
            url=join_url(self.base_url, path),
            headers=headers,
            params=_coerce_query_params(request_options.params),
            content=content,
            content_type=content_type,
            timeout=self._build_request_timeout(request_options),
            follow_redirects=self.config.follow_redirects,
            deserialize_body=request_options.deserialize_body,
            strict_status=self.config.strict_status if strict_status is None else strict_status,
            strict_fields=self.config.strict_fields if strict_fields is None else strict_fields,
        )

    @staticmethod
    def _request_kwargs(plan: _CallPlan) -> dict[str, Any]:
        logger.debug("%s %s headers=%s", plan.method, plan.url, sanitize_headers(plan.headers))
        return {
            "method": plan.method,
            "url": plan.url,
            "headers": dict(plan.headers),
            "params": plan.params,
            "content": plan.content,
            "timeout": plan.timeout,
            "follow_redirects": plan.follow_redirects,
        }

    @staticmethod
    def _translate_error(plan: _CallPlan, exc: Exception) -> Exception:
        if isinstance(exc, httpx.InvalidURL):
            return ConfigurationError(f"{plan.url} is not a valid Url", cause=exc)
        if isinstance(exc, httpx.TimeoutException):
            return TransportTimeoutError(f"{plan.method} {plan.url} timed out", cause=exc)
        return TransportError(f"Unable to send request {plan.method} {plan.url}: {exc}", cause=exc)

    def _build_response(self, plan: _CallPlan, response: httpx.Response, response_type: Any) -> ResponseWrapper[Any]:
        logger.debug("%s %s -> %s", plan.method, plan.url, response.status_code)
        envelope = {
            "status": response.status_code,
            "headers": MappingProxyType(dict(response.headers)),
            "raw_body": response.content,
            "url": str(response.url),
            "method": plan.method,
        }

        if not response.is_success:
            wrapper: ResponseWrapper[Any] = ResponseWrapper(**envelope)
            if plan.strict_status:
                raise HttpStatusError(f"Request failed. StatusCode: {response.status_code}", response=wrapper)
            return wrapper

        body = None
        if plan.deserialize_body and plan.method != "HEAD" and response.status_code not in _NO_CONTENT_STATUSES:
            content_type = ContentType.parse(response.headers.get("content-type")) or plan.content_type
            body = codecs.deserialize(response.content, content_type, response_type, strict=plan.strict_fields)
        return ResponseWrapper(body=body, **envelope)


class Raxios(_BaseRaxios):
    """Blocking client.

    Example:
        >>> client = Raxios("https://api.example.com")
        >>> response = client.post("/items", Payload(name="x"), response_type=Ack)
        >>> response.status, response.body
    """

    def __init__(
        self,
        base_url: str,
        config: ClientConfig | None = None,
        *,
        httpx_client: httpx.Client | None = None,
    ) -> None:
        super().__init__(base_url, config)
        self._httpx = httpx_client or httpx.Client(**self._client_kwargs)

    def __enter__(self) -> "Raxios":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._httpx.close()

    def with_default_headers(self, headers: Mapping[str, str] | None) -> "Raxios":
        """Return a client with replaced default headers sharing this transport."""
        return Raxios(self.base_url, self.config.with_headers(headers), httpx_client=self._httpx)

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        response_type: Any = Any,
        options: RequestOptions | None = None,
    ) -> ResponseWrapper[Any]:
        plan = self._plan(method, path, body, options)
        try:
            response = self._httpx.request(**self._request_kwargs(plan))
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise self._translate_error(plan, exc) from exc
        return self._build_response(plan, response, response_type)

    def get(self, path: str, *, response_type: Any = Any, options: RequestOptions | None = None) -> ResponseWrapper[Any]:
        return self.request("GET", path, response_type=response_type, options=options)

    def post(
        self,
        path: str,
        body: Any = None,
        *,
        response_type: Any = Any,
        options: RequestOptions | None = None,
    ) -> ResponseWrapper[Any]:
        return self.request("POST", path, body, response_type=response_type, options=options)

    def put(
        self,
        path: str,
        body: Any = None,
        *,
        response_type: Any = Any,
        options: RequestOptions | None = None,
    ) -> ResponseWrapper[Any]:
        return self.request("PUT", path, body, response_type=response_type, options=options)

    def patch(
        self,
        path: str,
        body: Any = None,
        *,
        response_type: Any = Any,
        options: RequestOptions | None = None,
    ) -> ResponseWrapper[Any]:
        return self.request("PATCH", path, body, response_type=response_type, options=options)

    def delete(
        self,
        path: str,
        body: Any = None,
        *,
        response_type: Any = Any,
        options: RequestOptions | None = None,
    ) -> ResponseWrapper[Any]:
        return self.request("DELETE", path, body, response_type=response_type, options=options)

    def head(self, path: str, *, options: RequestOptions | None = None) -> ResponseWrapper[None]:
        return self.request("HEAD", path, response_type=None, options=options)

    def options(
        self, path: str, *, response_type: Any = Any, options: RequestOptions | None = None
    ) -> ResponseWrapper[Any]:
        return self.request("OPTIONS", path, response_type=response_type, options=options)


class AsyncRaxios(_BaseRaxios):
    """Asynchronous client."""

    def __init__(
        self,
        base_url: str,
        config: ClientConfig | None = None,
        *,
        httpx_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(base_url, config)
        self._httpx = httpx_client or httpx.AsyncClient(**self._client_kwargs)

    async def __aenter__(self) -> "AsyncRaxios":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._httpx.aclose()

    def with_default_headers(self, headers: Mapping[str, str] | None) -> "AsyncRaxios":
        return AsyncRaxios(self.base_url, self.config.with_headers(headers), httpx_client=self._httpx)

    async def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        response_type: Any = Any,
        options: RequestOptions | None = None,
    ) -> ResponseWrapper[Any]:
        plan = self._plan(method, path, body, options)
        try:
            response = await self._httpx.request(**self._request_kwargs(plan))
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise self._translate_error(plan, exc) from exc
        return self._build_response(plan, response, response_type)

    async def get(
        self, path: str, *, response_type: Any = Any, options: RequestOptions | None = None
    ) -> ResponseWrapper[Any]:
        return await self.request("GET", path, response_type=response_type, options=options)

    async def post(
        self,
        path: str,
        body: Any = None,
        *,
        response_type: Any = Any,
        options: RequestOptions | None = None,
    ) -> ResponseWrapper[Any]:
        return await self.request("POST", path, body, response_type=response_type, options=options)

    async def put(
        self,
        path: str,
        body: Any = None,
        *,
        response_type: Any = Any,
        options: RequestOptions | None = None,
    ) -> ResponseWrapper[Any]:
        return await self.request("PUT", path, body, response_type=response_type, options=options)

    async def patch(
        self,
        path: str,
        body: Any = None,
        *,
        response_type: Any = Any,
        options: RequestOptions | None = None,
    ) -> ResponseWrapper[Any]:
        return await self.request("PATCH", path, body, response_type=response_type, options=options)

    async def delete(
        self,
        path: str,
        body: Any = None,
        *,
        response_type: Any = Any,
        options: RequestOptions | None = None,
    ) -> ResponseWrapper[Any]:
        return await self.request("DELETE", path, body, response_type=response_type, options=options)

    async def head(self, path: str, *, options: RequestOptions | None = None) -> ResponseWrapper[None]:
        return await self.request("HEAD", path, response_type=None, options=options)

    async def options(
        self, path: str, *, response_type: Any = Any, options: RequestOptions | None = None
    ) -> ResponseWrapper[Any]:
        return await self.request("OPTIONS", path, response_type=response_type, options=options)
