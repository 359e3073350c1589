import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone

import requests

from podboard.components.metadata.schemas import MediaMetadata

_logger = logging.getLogger(__name__)

_OEMBED_ENDPOINT = "https://www.youtube.com/oembed"


class MetadataExtractor(ABC):
    """Looks up descriptive metadata for a media URL."""

    @abstractmethod
    async def extract(self, url: str) -> MediaMetadata:
        """Return the metadata of the media behind ``url``."""


class StubMetadataExtractor(MetadataExtractor):
    """Returns the fixed demo episode after an artificial delay."""

    def __init__(self, delay: float = 0.0):
        self.delay = delay

    async def extract(self, url: str) -> MediaMetadata:
        if self.delay:
            await asyncio.sleep(self.delay)
        _logger.debug("Returning demo metadata for %s", url)
        return MediaMetadata(
            title="The Future of AI in Software Development",
            description=(
                "A deep dive into how AI is transforming the way we build software, "
                "featuring insights from industry leaders."
            ),
            duration=3600,
            thumbnail="/podcast-thumbnail.png",
            author="Tech Talk Podcast",
            published_at=datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc),
        )


class OEmbedMetadataExtractor(MetadataExtractor):
    """Fetches title, author and thumbnail through the YouTube oEmbed API.

    oEmbed does not expose the media length, so ``duration`` is reported as 0
    (unknown) and only lower bounds are enforced on the timeline.
    """

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout

    def _fetch(self, url: str) -> dict:
        response = requests.get(
            _OEMBED_ENDPOINT,
            params={"url": url, "format": "json"},
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def extract(self, url: str) -> MediaMetadata:
        data = await asyncio.to_thread(self._fetch, url)
        _logger.info(f"Fetched oEmbed metadata for {url}")
        return MediaMetadata(
            title=data.get("title", "Unknown"),
            author=data.get("author_name", ""),
            thumbnail=data.get("thumbnail_url", ""),
            duration=0,
        )
