import asyncio
import logging
from typing import Callable, Optional

from dotenv import load_dotenv

from podboard.components.metadata.extractor import (
    MetadataExtractor,
    OEmbedMetadataExtractor,
    StubMetadataExtractor,
)
from podboard.components.segmenter.segmenter import (
    LLMSegmenter,
    Segmenter,
    StubSegmenter,
)
from podboard.components.transcriptor.transcriptor import (
    StubTranscriber,
    Transcriber,
    YouTubeTranscriber,
)
from podboard.models.llm import model_choice_from_name
from podboard.pipeline.pipeline import ProcessingPipeline
from podboard.pipeline.schemas import ProcessingResult

_logger = logging.getLogger(__name__)


def build_metadata_extractor(provider: str, delay: float = 0.0) -> MetadataExtractor:
    if provider == "stub":
        return StubMetadataExtractor(delay=delay)
    if provider == "oembed":
        return OEmbedMetadataExtractor()
    raise ValueError(f"Unsupported metadata provider: {provider}")


def build_transcriber(provider: str, delay: float = 0.0) -> Transcriber:
    if provider == "stub":
        return StubTranscriber(delay=delay)
    if provider == "youtube":
        return YouTubeTranscriber()
    raise ValueError(f"Unsupported transcript provider: {provider}")


def build_segmenter(
    provider: str, delay: float = 0.0, model: Optional[str] = None
) -> Segmenter:
    if provider == "stub":
        return StubSegmenter(delay=delay)
    if provider == "llm":
        if model:
            return LLMSegmenter(model=model_choice_from_name(model))
        return LLMSegmenter()
    raise ValueError(f"Unsupported segmenter provider: {provider}")


def build_pipeline(
    *,
    metadata_provider: str = "stub",
    transcript_provider: str = "stub",
    segmenter_provider: str = "stub",
    segmenter_model: Optional[str] = None,
    metadata_delay: float = 0.0,
    transcript_delay: float = 0.0,
    segmenter_delay: float = 0.0,
    stage_timeout: Optional[float] = 30.0,
) -> ProcessingPipeline:
    """Assemble a pipeline from provider names (``stub``, ``oembed``, ``youtube``, ``llm``)."""
    return ProcessingPipeline(
        build_metadata_extractor(metadata_provider, metadata_delay),
        build_transcriber(transcript_provider, transcript_delay),
        build_segmenter(segmenter_provider, segmenter_delay, segmenter_model),
        stage_timeout=stage_timeout,
    )


async def run_podboard(
    url: str,
    *,
    pipeline: Optional[ProcessingPipeline] = None,
    progress_callback: Optional[Callable[[str, str, int, dict], None]] = None,
) -> ProcessingResult:
    """
    Process a single media URL end to end.

    Args:
        url: Media URL to process.
        pipeline: Pipeline to use (defaults to the demo stub pipeline).
        progress_callback: Receives ``(step, message, progress, data)`` updates.

    Returns:
        The completed ProcessingResult.
    """
    pipeline = pipeline or build_pipeline()
    result = await pipeline.run(url, progress_callback=progress_callback)

    _logger.info(f"=== SEGMENTS ({len(result.segments)}) ===")
    for segment in result.segments:
        _logger.info(
            "  [%7.1fs - %7.1fs] %s", segment.start_time, segment.end_time, segment.title
        )
    return result


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    MEDIA_URL = "https://example.com/ep1"

    result = asyncio.run(run_podboard(MEDIA_URL))
    print(result.model_dump_json(indent=2))
