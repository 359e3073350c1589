import asyncio
import logging
import re
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import parse_qs, urlparse

from youtube_transcript_api import (
    NoTranscriptFound,
    TranscriptsDisabled,
    VideoUnavailable,
    YouTubeTranscriptApi,
)

_logger = logging.getLogger(__name__)

DEMO_TRANSCRIPT = """Welcome to Tech Talk Podcast. Today we're discussing the future of AI in software development.
Our guest is Sarah Chen, a leading AI researcher who has been working on developer tools for the past decade.

Sarah: Thanks for having me. AI is really changing how we approach software development...

Host: That's fascinating. Can you tell us more about specific tools that are making a difference?

Sarah: Absolutely. We're seeing AI-powered code completion, automated testing, and even AI that can write entire functions..."""


class Transcriber(ABC):
    """Produces a plain-text transcript for a media URL."""

    @abstractmethod
    async def transcribe(self, url: str) -> Optional[str]:
        """Return the transcript, or ``None`` when none can be produced."""


class StubTranscriber(Transcriber):
    """Returns the demo transcript after an artificial delay."""

    def __init__(self, delay: float = 0.0, transcript: Optional[str] = DEMO_TRANSCRIPT):
        self.delay = delay
        self.transcript = transcript

    async def transcribe(self, url: str) -> Optional[str]:
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.transcript


def extract_video_id(url: str) -> str:
    """Extract video ID from YouTube URL."""
    parsed = urlparse(url)

    if parsed.hostname in ("youtu.be", "www.youtu.be"):
        return parsed.path[1:]

    if parsed.hostname in ("youtube.com", "www.youtube.com", "m.youtube.com"):
        if parsed.path == "/watch":
            video_ids = parse_qs(parsed.query).get("v")
            if video_ids:
                return video_ids[0]
        if parsed.path.startswith(("/embed/", "/v/", "/shorts/")):
            return parsed.path.split("/")[2]

    raise ValueError(f"Invalid YouTube URL: {url}")


class YouTubeTranscriber(Transcriber):
    """Fetches published captions through ``youtube_transcript_api``.

    Non-YouTube URLs and videos without captions yield ``None`` so the
    pipeline completes without segments instead of failing.
    """

    def __init__(self, languages: Optional[list[str]] = None):
        self.languages = languages or ["en", "en-US"]

    def _fetch(self, video_id: str) -> str:
        ytt_api = YouTubeTranscriptApi()
        transcript = ytt_api.fetch(video_id, languages=self.languages)
        text = " ".join(snippet.text for snippet in transcript)
        return re.sub(r"\s+", " ", text).strip()

    async def transcribe(self, url: str) -> Optional[str]:
        try:
            video_id = extract_video_id(url)
        except ValueError:
            _logger.info("No transcript source for non-YouTube URL %s", url)
            return None

        try:
            text = await asyncio.to_thread(self._fetch, video_id)
        except (NoTranscriptFound, TranscriptsDisabled, VideoUnavailable) as exc:
            _logger.warning(f"No transcript available for {video_id}: {exc}")
            return None

        _logger.debug(f"Fetched transcript for {video_id} ({len(text)} characters)")
        return text or None
