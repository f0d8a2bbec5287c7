import asyncio

import httpx
import pytest

from md_render.composer import HtmlComposer
from md_render.errors import SourceUnavailable
from md_render.models import FileSource, InlineSource, UrlSource
from md_render.source import SourceLoader


def test_load_file_relative_to_cwd(tmp_path, monkeypatch, log) -> None:
    (tmp_path / "doc.md").write_text("# Title\n\nBody text", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    text = asyncio.run(SourceLoader(log).load(FileSource("doc.md")))

    assert text == "# Title\n\nBody text"
    html = HtmlComposer().compose(text).html
    assert "Title" in html


def test_missing_file_reports_absolute_path(tmp_path, monkeypatch, log) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SourceUnavailable) as excinfo:
        asyncio.run(SourceLoader(log).load(FileSource("missing.md")))

    assert str(tmp_path.resolve() / "missing.md") in str(excinfo.value)


def test_unreadable_file_is_source_unavailable(tmp_path, monkeypatch, log) -> None:
    (tmp_path / "latin1.md").write_bytes(b"caf\xe9")
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SourceUnavailable, match="Cannot read"):
        asyncio.run(SourceLoader(log).load(FileSource("latin1.md")))


def test_fetch_url_returns_body(log) -> None:
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, text="# Remote\n")

    loader = SourceLoader(log, transport=httpx.MockTransport(handler))
    text = asyncio.run(loader.load(UrlSource("https://example.com/README.md")))

    assert text == "# Remote\n"
    assert len(requests) == 1
    assert requests[0].method == "GET"


def test_fetch_url_error_status_is_not_retried(log) -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(404)

    loader = SourceLoader(log, transport=httpx.MockTransport(handler))
    with pytest.raises(SourceUnavailable, match="404 Not Found"):
        asyncio.run(loader.load(UrlSource("https://example.com/missing.md")))
    assert len(calls) == 1


def test_fetch_url_transport_error(log) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    loader = SourceLoader(log, transport=httpx.MockTransport(handler))
    with pytest.raises(SourceUnavailable, match="connection refused"):
        asyncio.run(loader.load(UrlSource("https://unreachable.test/a.md")))


def test_inline_source_is_returned_as_is(log) -> None:
    assert asyncio.run(SourceLoader(log).load(InlineSource("plain *text*"))) == "plain *text*"
