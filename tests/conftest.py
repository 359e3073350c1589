"""Pytest fixtures for podboard tests."""

from typing import Optional

import pytest
from fastapi.testclient import TestClient

from podboard.boards.service import BoardService
from podboard.components.metadata.extractor import (
    MetadataExtractor,
    StubMetadataExtractor,
)
from podboard.components.metadata.schemas import MediaMetadata
from podboard.components.segmenter.schemas import Segment
from podboard.components.segmenter.segmenter import Segmenter, StubSegmenter
from podboard.components.transcriptor.transcriptor import (
    StubTranscriber,
    Transcriber,
)
from podboard.pipeline.pipeline import ProcessingPipeline
from podboard.pipeline.schemas import ProcessingResult
from podboard.session.schemas import Identity, User
from podboard.session.store import InMemorySessionStore, SessionManager
from podboard.timeline.timeline import Timeline
from podboard_api.core.config import Settings
from podboard_api.main import create_app


@pytest.fixture
def make_pipeline():
    """Build a pipeline from the stub collaborators, overriding any of them."""

    def _make(
        metadata_extractor: Optional[MetadataExtractor] = None,
        transcriber: Optional[Transcriber] = None,
        segmenter: Optional[Segmenter] = None,
        stage_timeout: Optional[float] = 5.0,
    ) -> ProcessingPipeline:
        return ProcessingPipeline(
            metadata_extractor or StubMetadataExtractor(),
            transcriber or StubTranscriber(),
            segmenter or StubSegmenter(),
            stage_timeout=stage_timeout,
        )

    return _make


@pytest.fixture
def pipeline(make_pipeline) -> ProcessingPipeline:
    return make_pipeline()


@pytest.fixture
def sample_segments() -> list[Segment]:
    return [
        Segment(id="1", title="Intro", start_time=0, end_time=300),
        Segment(id="2", title="Tools", start_time=300, end_time=900),
        Segment(id="3", title="Outlook", start_time=900, end_time=3600),
    ]


@pytest.fixture
def sample_media(sample_segments: list[Segment]) -> ProcessingResult:
    return ProcessingResult(
        id="media-1",
        url="https://example.com/ep1",
        metadata=MediaMetadata(
            title="The Future of AI in Software Development",
            description="A deep dive",
            duration=3600,
            author="Tech Talk Podcast",
        ),
        transcript="Welcome to Tech Talk Podcast.",
        segments=sample_segments,
        status="completed",
    )


@pytest.fixture
def timeline(sample_media: ProcessingResult) -> Timeline:
    timeline = Timeline()
    timeline.register_media(sample_media)
    return timeline


@pytest.fixture
def boards() -> BoardService:
    return BoardService()


@pytest.fixture
def sessions() -> SessionManager:
    return SessionManager(InMemorySessionStore())


@pytest.fixture
def guest() -> Identity:
    return Identity(session_id="device-1")


@pytest.fixture
def member() -> Identity:
    return Identity(
        session_id="device-2",
        user=User(id="sarah@example.com", email="sarah@example.com", name="sarah"),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        metadata_delay_seconds=0,
        transcript_delay_seconds=0,
        segmenter_delay_seconds=0,
        stage_timeout_seconds=5,
    )


@pytest.fixture
def client(settings: Settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client
