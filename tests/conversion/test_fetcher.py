"""Tests for the remote fetcher.

HTTP traffic is served by httpx.MockTransport.
"""

import httpx
import pytest

from videonote.modules.conversion.errors import FetchFailedError
from videonote.modules.conversion.fetcher import FileResolver, RemoteFetcher


FILE_URL = "https://files.example.test/videos/clip.mp4"


class StaticResolver(FileResolver):
    def __init__(self, url: str = FILE_URL, error: Exception = None):
        self.url = url
        self.error = error
        self.calls: list[str] = []

    async def resolve_url(self, file_id: str) -> str:
        self.calls.append(file_id)
        if self.error:
            raise self.error
        return self.url


class BrokenStream(httpx.AsyncByteStream):
    """Body that dies halfway through."""

    async def __aiter__(self):
        yield b"partial"
        raise httpx.ReadError("connection reset by peer")


def make_fetcher(handler, resolver: FileResolver = None) -> RemoteFetcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return RemoteFetcher(resolver or StaticResolver(), client=client, timeout=5.0)


class TestRemoteFetcher:

    @pytest.mark.asyncio
    async def test_fetch_returns_full_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == FILE_URL
            return httpx.Response(200, content=b"\x00\x00\x00\x18ftypmp42")

        resolver = StaticResolver()
        fetcher = make_fetcher(handler, resolver)

        data = await fetcher.fetch("file-123")

        assert data == b"\x00\x00\x00\x18ftypmp42"
        assert resolver.calls == ["file-123"]

    @pytest.mark.asyncio
    async def test_server_error_raises_fetch_failed(self) -> None:
        fetcher = make_fetcher(lambda request: httpx.Response(500, text="boom"))

        with pytest.raises(FetchFailedError) as exc_info:
            await fetcher.fetch("file-123")

        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)
        assert "500" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_not_found_raises_fetch_failed(self) -> None:
        fetcher = make_fetcher(lambda request: httpx.Response(404))

        with pytest.raises(FetchFailedError):
            await fetcher.fetch("file-123")

    @pytest.mark.asyncio
    async def test_transport_error_raises_fetch_failed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("name resolution failed", request=request)

        fetcher = make_fetcher(handler)

        with pytest.raises(FetchFailedError) as exc_info:
            await fetcher.fetch("file-123")

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_interrupted_body_raises_fetch_failed(self) -> None:
        fetcher = make_fetcher(lambda request: httpx.Response(200, stream=BrokenStream()))

        with pytest.raises(FetchFailedError) as exc_info:
            await fetcher.fetch("file-123")

        assert isinstance(exc_info.value.__cause__, httpx.ReadError)

    @pytest.mark.asyncio
    async def test_resolution_failure_raises_fetch_failed(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, content=b"never")

        resolver = StaticResolver(error=RuntimeError("getFile failed"))
        fetcher = make_fetcher(handler, resolver)

        with pytest.raises(FetchFailedError) as exc_info:
            await fetcher.fetch("file-123")

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert calls == []

    @pytest.mark.asyncio
    async def test_single_attempt_only(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        fetcher = make_fetcher(handler)

        with pytest.raises(FetchFailedError):
            await fetcher.fetch("file-123")

        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_malformed_url_raises_fetch_failed(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, content=b"never")

        resolver = StaticResolver(url="https://files.example.test/\x01clip.mp4")
        fetcher = make_fetcher(handler, resolver)

        with pytest.raises(FetchFailedError) as exc_info:
            await fetcher.fetch("file-123")

        assert isinstance(exc_info.value.__cause__, httpx.InvalidURL)
        assert calls == []
