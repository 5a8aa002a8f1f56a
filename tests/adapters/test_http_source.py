from __future__ import annotations

import httpx
import pytest

from gamelink.adapters.http_source import SourceFetchError, fetch_csv_text


def _client(transport: httpx.MockTransport) -> httpx.Client:
    return httpx.Client(transport=transport)


def test_fetch_csv_text_decodes_utf8_with_bom() -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, content="\ufeffName,Platform\nPokémon,GB\n".encode())

    with _client(httpx.MockTransport(handler)) as client:
        text = fetch_csv_text("https://example.test/export.csv", client=client)

    assert text == "Name,Platform\nPokémon,GB\n"
    assert requested == ["https://example.test/export.csv"]


def test_fetch_csv_text_reports_http_errors() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    with (
        _client(httpx.MockTransport(handler)) as client,
        pytest.raises(SourceFetchError) as excinfo,
    ):
        fetch_csv_text("https://example.test/missing.csv", client=client)

    assert "HTTP 404" in str(excinfo.value)
    assert excinfo.value.url == "https://example.test/missing.csv"


def test_fetch_csv_text_reports_transport_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with (
        _client(httpx.MockTransport(handler)) as client,
        pytest.raises(SourceFetchError, match="connection refused"),
    ):
        fetch_csv_text("https://example.test/export.csv", client=client)


def test_fetch_csv_text_leaves_caller_client_open() -> None:
    client = _client(httpx.MockTransport(lambda _: httpx.Response(200, text="a,b\n")))

    fetch_csv_text("https://example.test/export.csv", client=client)

    assert not client.is_closed
    client.close()
