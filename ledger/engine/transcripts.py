"""Best-effort video transcript lookup for link evidence."""

import logging
import re
from collections.abc import Iterable
from typing import Protocol

import httpx
from fastapi.concurrency import run_in_threadpool
from youtube_transcript_api import CouldNotRetrieveTranscript, YouTubeTranscriptApi

from ledger.errors import TranscriptError

logger = logging.getLogger(__name__)

_WATCH_RE = re.compile(r"youtube\.com/watch\?v=([a-zA-Z0-9_-]+)")
_SHORT_RE = re.compile(r"youtu\.be/([a-zA-Z0-9_-]+)")
_WHITESPACE_RE = re.compile(r"\s+")


def youtube_video_id(url: str) -> str | None:
    match = _WATCH_RE.search(url.strip()) or _SHORT_RE.search(url.strip())
    return match.group(1) if match else None


def normalise_youtube_url(url: str) -> str | None:
    """Canonical watch URL for youtube.com/youtu.be links, None otherwise."""
    video_id = youtube_video_id(url)
    if not video_id:
        return None
    return f"https://www.youtube.com/watch?v={video_id}"


def is_youtube_url(url: str) -> bool:
    return youtube_video_id(url) is not None


def join_caption_segments(segments: Iterable[str]) -> str:
    """One line of text: segments joined by spaces, runs of whitespace collapsed."""
    return _WHITESPACE_RE.sub(" ", " ".join(segments)).strip()


class CaptionSource(Protocol):
    async def fetch_text(self, url: str) -> str: ...


class YouTubeCaptionSource:
    """
    Reads a video's captions with youtube-transcript-api. The library is
    blocking, so lookups run in the threadpool.
    """

    def __init__(self, api: YouTubeTranscriptApi | None = None) -> None:
        self._api = api or YouTubeTranscriptApi()

    def _fetch(self, video_id: str) -> str:
        return join_caption_segments(snippet.text for snippet in self._api.fetch(video_id))

    async def fetch_text(self, url: str) -> str:
        video_id = youtube_video_id(url)
        if video_id is None:
            raise TranscriptError("Not a YouTube video URL")
        try:
            return await run_in_threadpool(self._fetch, video_id)
        except (CouldNotRetrieveTranscript, OSError) as err:
            logger.warning("Caption lookup failed for %s: %s", video_id, err)
            raise TranscriptError() from err


class TranscriptFetcher:
    """
    Transcript for link evidence, from TRANSCRIPT_API_URL when configured and
    otherwise from the in-process caption source. Every failure degrades to
    None; nothing here raises to the caller.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        api_url: str | None,
        api_key: str | None = None,
        max_length: int = 15000,
        captions: CaptionSource | None = None,
    ) -> None:
        self._http = http
        self.api_url = api_url
        self.api_key = api_key
        self.max_length = max_length
        self.captions = captions

    async def fetch(self, url: str) -> str | None:
        normalised = normalise_youtube_url(url)
        if not normalised:
            return None
        if self.api_url:
            text = await self._fetch_remote(normalised)
        elif self.captions is not None:
            text = await self._fetch_captions(normalised)
        else:
            return None
        if not text or not text.strip():
            return None
        if len(text) > self.max_length:
            return text[: self.max_length] + "…"
        return text

    async def _fetch_remote(self, normalised: str) -> str | None:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        try:
            r = await self._http.post(self.api_url, headers=headers, json={"url": normalised})
            if r.status_code >= 400:
                logger.warning("Transcript API returned %s: %s", r.status_code, r.text[:200])
                return None
            data = r.json()
        except (httpx.HTTPError, ValueError) as err:
            logger.warning("Error fetching transcript: %s", err)
            return None
        if not isinstance(data, dict):
            return None
        text = data.get("text") or data.get("transcript")
        return text if isinstance(text, str) else None

    async def _fetch_captions(self, normalised: str) -> str | None:
        try:
            return await self.captions.fetch_text(normalised)
        except TranscriptError:
            return None
