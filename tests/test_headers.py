from __future__ import annotations

import pytest

from raxios.content_type import ContentType
from raxios.exceptions import ConfigurationError
from raxios.headers import join_url, merge_headers, sanitize_headers, validate_base_url, validate_headers


@pytest.mark.parametrize(
    "headers",
    [
        {"X-Name": "café"},
        {"X-Name": "line\r\nbreak"},
        {"X Name": "value"},
        {"": "value"},
    ],
)
def test_validate_headers_rejects_bad_syntax(headers: dict[str, str]) -> None:
    with pytest.raises(ConfigurationError, match="Unable to parse header"):
        validate_headers(headers)


def test_validate_headers_collapses_case_duplicates() -> None:
    assert validate_headers({"x-token": "a", "X-Token": "b"}) == {"X-Token": "b"}


def test_validate_headers_allows_tabs_and_spaces() -> None:
    assert validate_headers({"X-Note": "a b\tc"}) == {"X-Note": "a b\tc"}


def test_merge_headers_later_layer_wins_case_insensitively() -> None:
    merged = merge_headers({"Accept": "application/json", "X-A": "1"}, None, {"accept": "text/xml"})
    assert merged == {"accept": "text/xml", "X-A": "1"}


def test_sanitize_headers_redacts_credentials() -> None:
    assert sanitize_headers({"Authorization": "Bearer t", "X-Trace": "1"}) == {
        "Authorization": "[REDACTED]",
        "X-Trace": "1",
    }


@pytest.mark.parametrize(
    ("base", "path", "expected"),
    [
        ("http://localhost", "/v1/signup", "http://localhost/v1/signup"),
        ("http://localhost", "v1/signup", "http://localhost/v1/signup"),
        ("http://localhost/", "/v1/signup", "http://localhost/v1/signup"),
        ("http://localhost/api/", "v1", "http://localhost/api/v1"),
        ("http://localhost", "", "http://localhost"),
    ],
)
def test_join_url_uses_single_slash(base: str, path: str, expected: str) -> None:
    assert join_url(base, path) == expected


@pytest.mark.parametrize("url", ["localhost", "ftp://example.com", "https://", "https://exa\x00mple.com"])
def test_validate_base_url_rejects_invalid(url: str) -> None:
    with pytest.raises(ConfigurationError):
        validate_base_url(url)


def test_content_type_parse_ignores_parameters_and_case() -> None:
    assert ContentType.parse("Application/JSON; charset=utf-8") is ContentType.JSON
    assert ContentType.parse("application/problem+json") is ContentType.JSON
    assert ContentType.parse("application/atom+xml") is ContentType.APPLICATION_XML
    assert ContentType.parse("text/xml") is ContentType.TEXT_XML
    assert ContentType.parse("text/plain") is None
    assert ContentType.parse(None) is None


def test_content_type_renders_mime_type() -> None:
    assert str(ContentType.URL_ENCODED) == "application/x-www-form-urlencoded"
    assert ContentType.TEXT_XML.is_xml
    assert not ContentType.JSON.is_xml


def test_content_type_coerce_rejects_unknown() -> None:
    assert ContentType.coerce("application/xml") is ContentType.APPLICATION_XML
    with pytest.raises(ConfigurationError, match="Unsupported content type"):
        ContentType.coerce("text/csv")
