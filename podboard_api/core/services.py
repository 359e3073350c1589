from dataclasses import dataclass

from fastapi import Depends, Header, Request

from podboard.boards.service import BoardService
from podboard.pipeline.pipeline import ProcessingPipeline
from podboard.quota.gate import QuotaGate
from podboard.run import build_pipeline
from podboard.session.schemas import Identity
from podboard.session.store import InMemorySessionStore, SessionManager
from podboard.timeline.timeline import Timeline
from podboard_api.core.config import Settings

DEFAULT_SESSION_ID = "anonymous"


@dataclass
class Services:
    """Process-wide service instances shared by all requests."""

    pipeline: ProcessingPipeline
    timeline: Timeline
    boards: BoardService
    sessions: SessionManager
    quota: QuotaGate


def create_services(settings: Settings) -> Services:
    """Wire collaborators, pipeline and stores from settings."""
    pipeline = build_pipeline(
        metadata_provider=settings.metadata_provider,
        transcript_provider=settings.transcript_provider,
        segmenter_provider=settings.segmenter_provider,
        segmenter_model=settings.segmenter_model,
        metadata_delay=settings.metadata_delay_seconds,
        transcript_delay=settings.transcript_delay_seconds,
        segmenter_delay=settings.segmenter_delay_seconds,
        stage_timeout=settings.stage_timeout_seconds,
    )
    timeline = Timeline()
    pipeline.add_result_handler(timeline.register_media)

    sessions = SessionManager(InMemorySessionStore())
    quota = QuotaGate(
        sessions,
        guest_limit=settings.guest_trial_limit,
        user_limit=settings.user_trial_limit,
    )
    return Services(
        pipeline=pipeline,
        timeline=timeline,
        boards=BoardService(),
        sessions=sessions,
        quota=quota,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_session_id(
    x_session_id: str | None = Header(default=None, alias="X-Session-Id"),
) -> str:
    """Device/session key sent by the client; anonymous when missing."""
    return (x_session_id or "").strip() or DEFAULT_SESSION_ID


def get_identity(
    session_id: str = Depends(get_session_id),
    services: Services = Depends(get_services),
) -> Identity:
    return services.sessions.identity(session_id)
