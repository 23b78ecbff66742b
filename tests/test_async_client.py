from __future__ import annotations

import asyncio

import httpx
import pytest
from pydantic import BaseModel

from raxios import AsyncRaxios, ClientConfig, ContentType, HttpStatusError, RequestOptions, TransportError

BASE_URL = "https://api.example.com"


class Ack(BaseModel):
    ok: bool


class Payload(BaseModel):
    name: str


def _async_client(seen: list[httpx.Request], config: ClientConfig | None = None, status: int = 200) -> AsyncRaxios:
    def send_request(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(status, json={"ok": True})

    transport = httpx.MockTransport(send_request)
    return AsyncRaxios(BASE_URL, config, httpx_client=httpx.AsyncClient(transport=transport))


def test_async_post_roundtrip() -> None:
    seen: list[httpx.Request] = []

    async def run() -> Ack | None:
        async with _async_client(seen) as client:
            response = await client.post("/items", Payload(name="x"), response_type=Ack)
        return response.body

    assert asyncio.run(run()) == Ack(ok=True)
    assert seen[0].content == b'{"name":"x"}'
    assert seen[0].headers["content-type"] == "application/json"


def test_async_verbs_use_matching_methods() -> None:
    seen: list[httpx.Request] = []

    async def run() -> None:
        async with _async_client(seen) as client:
            await client.get("/a")
            await client.put("/a", {"name": "x"})
            await client.patch("/a", {"name": "x"})
            await client.delete("/a")
            await client.head("/a")
            await client.options("/a")

    asyncio.run(run())
    assert [request.method for request in seen] == ["GET", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


def test_concurrent_calls_keep_their_own_options() -> None:
    seen: list[httpx.Request] = []

    async def run() -> None:
        async with _async_client(seen, ClientConfig(headers={"X-Caller": "default"})) as client:
            await asyncio.gather(
                client.post(
                    "/one",
                    {"name": "x"},
                    options=RequestOptions(headers={"X-Caller": "one"}, content_type=ContentType.URL_ENCODED),
                ),
                client.post("/two", {"name": "y"}, options=RequestOptions(headers={"X-Caller": "two"})),
                client.get("/three"),
            )

    asyncio.run(run())
    by_path = {request.url.path: request for request in seen}
    assert by_path["/one"].headers["x-caller"] == "one"
    assert by_path["/one"].content == b"name=x"
    assert by_path["/two"].headers["x-caller"] == "two"
    assert by_path["/two"].content == b'{"name":"y"}'
    assert by_path["/three"].headers["x-caller"] == "default"


def test_async_strict_status() -> None:
    seen: list[httpx.Request] = []

    async def run() -> None:
        async with _async_client(seen, ClientConfig(strict_status=True), status=500) as client:
            await client.get("/boom")

    with pytest.raises(HttpStatusError) as exc_info:
        asyncio.run(run())
    assert exc_info.value.code == 500


def test_async_transport_error() -> None:
    def send_request(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("dns failure", request=request)

    async def run() -> None:
        client = AsyncRaxios(BASE_URL, httpx_client=httpx.AsyncClient(transport=httpx.MockTransport(send_request)))
        async with client:
            await client.get("/items")

    with pytest.raises(TransportError, match="Unable to send request"):
        asyncio.run(run())
