"""Unit tests for caption lookup and the best-effort transcript fetcher."""

from types import SimpleNamespace

import httpx
import pytest
from youtube_transcript_api import TranscriptsDisabled

from conftest import FakeCaptions
from ledger.engine.transcripts import (
    TranscriptFetcher,
    YouTubeCaptionSource,
    is_youtube_url,
    join_caption_segments,
    normalise_youtube_url,
    youtube_video_id,
)
from ledger.errors import TranscriptError


class FakeYouTubeApi:
    def __init__(self, segments=None, error=None):
        self.segments = segments or []
        self.error = error
        self.requested: list[str] = []

    def fetch(self, video_id):
        self.requested.append(video_id)
        if self.error:
            raise self.error
        return [SimpleNamespace(text=s) for s in self.segments]


def test_normalise_youtube_urls():
    """Watch and short links map to one canonical URL."""
    assert normalise_youtube_url("https://youtu.be/abc_123") == "https://www.youtube.com/watch?v=abc_123"
    assert (
        normalise_youtube_url("https://www.youtube.com/watch?v=XyZ-9&t=30")
        == "https://www.youtube.com/watch?v=XyZ-9"
    )
    assert normalise_youtube_url("https://vimeo.com/123") is None
    assert not is_youtube_url("https://example.com/watch?v=abc")
    assert youtube_video_id("https://youtu.be/abc_123") == "abc_123"


def test_join_caption_segments():
    """Segments are joined and whitespace collapsed."""
    assert join_caption_segments(["  hello\n", "there ", "\tworld"]) == "hello there world"
    assert join_caption_segments([]) == ""


async def test_caption_source_joins_segments():
    """Caption snippets come back as one line for the video id."""
    api = FakeYouTubeApi(["we sold", "  forty units\n", "a week"])
    source = YouTubeCaptionSource(api)
    text = await source.fetch_text("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=5")
    assert text == "we sold forty units a week"
    assert api.requested == ["dQw4w9WgXcQ"]


async def test_caption_source_failures_raise_transcript_error():
    """Library and network failures surface as TranscriptError."""
    for error in (TranscriptsDisabled("dQw4w9WgXcQ"), ConnectionError("offline")):
        source = YouTubeCaptionSource(FakeYouTubeApi(error=error))
        with pytest.raises(TranscriptError):
            await source.fetch_text("https://youtu.be/dQw4w9WgXcQ")

    with pytest.raises(TranscriptError):
        await YouTubeCaptionSource(FakeYouTubeApi()).fetch_text("https://vimeo.com/1")


async def test_fetch_truncates_long_transcripts():
    """Remote transcripts over the limit are cut and marked."""
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer key"
        return httpx.Response(200, json={"transcript": "x" * 50})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        fetcher = TranscriptFetcher(http, api_url="https://tx.test", api_key="key", max_length=10)
        text = await fetcher.fetch("https://youtu.be/abc")
    assert text == "x" * 10 + "…"


async def test_fetch_degrades_to_none():
    """HTTP errors and network failures give None."""
    def failing(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    def broken(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down")

    for handler in (failing, broken):
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            fetcher = TranscriptFetcher(http, api_url="https://tx.test")
            assert await fetcher.fetch("https://youtu.be/abc") is None


async def test_fetch_not_configured():
    """No API URL and no caption source means no transcript."""
    async with httpx.AsyncClient() as http:
        fetcher = TranscriptFetcher(http, api_url=None)
        assert await fetcher.fetch("https://youtu.be/abc") is None


async def test_fetch_falls_back_to_captions():
    """Without an API URL the caption source is used and truncated the same way."""
    captions = FakeCaptions("y" * 20)
    async with httpx.AsyncClient() as http:
        fetcher = TranscriptFetcher(http, api_url=None, max_length=5, captions=captions)
        assert await fetcher.fetch("https://youtu.be/abc") == "yyyyy…"
        assert await fetcher.fetch("https://example.com/abc") is None
    assert captions.calls == ["https://www.youtube.com/watch?v=abc"]


async def test_fetch_caption_failure_is_none():
    """Caption errors never reach the evidence route."""
    async with httpx.AsyncClient() as http:
        fetcher = TranscriptFetcher(http, api_url=None, captions=FakeCaptions(None))
        assert await fetcher.fetch("https://youtu.be/abc") is None
