import asyncio
import logging
from abc import ABC, abstractmethod

from pydantic_ai import Agent

from podboard.components.metadata.schemas import MediaMetadata
from podboard.components.segmenter.schemas import Segment, SegmentPlan
from podboard.models.config import SEGMENTER_MODEL
from podboard.models.llm import ModelChoice, fit_to_context, get_model

_logger = logging.getLogger(__name__)

# (title, start, end, description) of the demo chapters for a one hour episode.
_DEMO_CHAPTERS = [
    (
        "Introduction & Guest Welcome",
        0,
        300,
        "Host introduces the topic and welcomes Sarah Chen",
    ),
    (
        "Current State of AI Tools",
        300,
        900,
        "Discussion about existing AI developer tools and their impact",
    ),
    (
        "Future Predictions",
        900,
        1800,
        "Sarah's predictions about where AI development tools are heading",
    ),
    (
        "Challenges and Limitations",
        1800,
        2700,
        "Exploring the current limitations of AI in software development",
    ),
    ("Q&A and Closing", 2700, 3600, "Audience questions and final thoughts"),
]
_DEMO_LENGTH = 3600


class Segmenter(ABC):
    """Splits a transcript into titled chapters."""

    @abstractmethod
    async def segment(
        self, transcript: str, metadata: MediaMetadata
    ) -> list[Segment]:
        """Return chapters ordered by start time."""


class StubSegmenter(Segmenter):
    """Returns the five demo chapters, rescaled to the media duration."""

    def __init__(self, delay: float = 0.0):
        self.delay = delay

    async def segment(
        self, transcript: str, metadata: MediaMetadata
    ) -> list[Segment]:
        if self.delay:
            await asyncio.sleep(self.delay)
        if metadata.duration <= 0:
            return []

        scale = metadata.duration / _DEMO_LENGTH
        return [
            Segment(
                id=str(index),
                title=title,
                start_time=round(start * scale, 3),
                end_time=round(end * scale, 3),
                description=description,
            )
            for index, (title, start, end, description) in enumerate(
                _DEMO_CHAPTERS, 1
            )
        ]


def _get_segmenter_agent(choice: ModelChoice) -> Agent:
    """Get the segmenter agent instance."""
    return Agent(
        model=get_model(choice),
        output_type=SegmentPlan,  # type: ignore[arg-type]
        retries=2,
        system_prompt="""
        You split podcast and video transcripts into chapters.

        For each chapter provide:
        - title: a short, specific title
        - start_time / end_time: seconds from the beginning of the media
        - description: one sentence describing what is discussed

        Chapters must be in chronological order, must not overlap and should
        cover the whole media duration when it is known.
        Prefer 3-8 chapters. Never invent topics absent from the transcript.
        """,
    )


class LLMSegmenter(Segmenter):
    """Segments a transcript with a pydantic-ai agent."""

    def __init__(
        self, agent: Agent | None = None, model: ModelChoice = SEGMENTER_MODEL
    ):
        self._agent = agent
        self.model = model

    @property
    def agent(self) -> Agent:
        if self._agent is None:
            self._agent = _get_segmenter_agent(self.model)
        return self._agent

    async def segment(
        self, transcript: str, metadata: MediaMetadata
    ) -> list[Segment]:
        prompt_transcript = fit_to_context(transcript, self.model)
        if len(prompt_transcript) < len(transcript):
            _logger.warning(
                f"Transcript of {metadata.title} truncated to "
                f"{len(prompt_transcript)} characters for {self.model.name}"
            )
        duration_hint = (
            f"{metadata.duration} seconds" if metadata.duration else "unknown"
        )
        result = await self.agent.run(
            f"Title: {metadata.title}\n"
            f"Duration: {duration_hint}\n\n"
            f"Split this transcript into chapters:\n\n{prompt_transcript}"
        )
        drafts = sorted(result.output.segments, key=lambda draft: draft.start_time)
        _logger.info(f"Segmenter proposed {len(drafts)} chapters for {metadata.title}")
        return [
            Segment(
                id=str(index),
                title=draft.title,
                start_time=draft.start_time,
                end_time=draft.end_time,
                description=draft.description,
            )
            for index, draft in enumerate(drafts, 1)
        ]
