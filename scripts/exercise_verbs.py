#!/usr/bin/env python3
"""Integration check: exercise every verb against an httpbin-compatible server.

Run ``docker run -p 8080:80 kennethreitz/httpbin`` (or set RAXIOS_SMOKE_URL)
before starting the script.
"""

from __future__ import annotations

import os
import sys

from pydantic import BaseModel

from raxios import ClientConfig, ContentType, HttpStatusError, Raxios, RaxiosError, RequestOptions

BASE_URL = os.getenv("RAXIOS_SMOKE_URL", "http://localhost:8080")

passed: list[str] = []
failed: list[tuple[str, str]] = []


class Payload(BaseModel):
    name: str


def ok(name: str, result: object = None) -> None:
    tag = type(result).__name__ if result is not None else "None"
    print(f"  PASS  {name}  -> {tag}")
    passed.append(name)


def fail(name: str, err: object) -> None:
    msg = str(err)[:200]
    print(f"  FAIL  {name}  -> {msg}")
    failed.append((name, msg))


def run(name: str, fn, check=lambda response: response.ok):
    """Run fn(), record pass/fail."""
    try:
        response = fn()
    except RaxiosError as e:
        fail(name, f"{type(e).__name__}: {e}")
        return None
    if check(response):
        ok(name, response.body)
    else:
        fail(name, f"unexpected response: status={response.status} body={response.body!r}")
    return response


def main() -> None:
    client = Raxios(BASE_URL, ClientConfig(headers={"X-Smoke": "raxios"}, timeout=15.0))

    print("\n=== Verbs ===")
    run("get", lambda: client.get("/get", options=RequestOptions(params={"q": "1"})))
    run("post json", lambda: client.post("/post", Payload(name="x")), lambda r: r.body["json"] == {"name": "x"})
    run(
        "post form",
        lambda: client.post("/post", Payload(name="x"), options=RequestOptions(content_type=ContentType.URL_ENCODED)),
        lambda r: r.body["form"] == {"name": "x"},
    )
    run("put", lambda: client.put("/put", {"name": "y"}))
    run("patch", lambda: client.patch("/patch", {"name": "z"}))
    run("delete", lambda: client.delete("/delete"))
    run("head", lambda: client.head("/get"), lambda r: r.ok and r.body is None)
    run("options", lambda: client.options("/get", options=RequestOptions(deserialize_body=False)))

    print("\n=== Negotiation ===")
    run("xml response", lambda: client.get("/xml", options=RequestOptions(accept=ContentType.APPLICATION_XML)))
    run(
        "per-call header wins",
        lambda: client.get("/headers", options=RequestOptions(headers={"x-smoke": "override"})),
        lambda r: r.body["headers"].get("X-Smoke") == "override",
    )

    print("\n=== Status handling ===")
    run("404 returned", lambda: client.get("/status/404"), lambda r: r.status == 404 and r.body is None)
    try:
        client.get("/status/500", options=RequestOptions(strict_status=True))
        fail("strict 500", "no error raised")
    except HttpStatusError as e:
        ok("strict 500", e)

    client.close()

    print("\n" + "=" * 60)
    print(f"PASSED: {len(passed)}   FAILED: {len(failed)}")
    if failed:
        print("\nFailed checks:")
        for name, err in failed:
            print(f"  - {name}: {err}")
    print("=" * 60)

    sys.exit(1 if failed else 0)


if __name__ == "__main__":
    main()
