import asyncio
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse

from podboard.pipeline.pipeline import ProcessingPipeline, validate_url
from podboard.pipeline.schemas import JobStatus, ProcessingResult
from podboard.session.schemas import Identity
from podboard_api.core.services import Services, get_identity, get_services
from podboard_api.schemas.v1.requests import ProcessRequest
from podboard_api.schemas.v1.responses import ErrorResponse, ProgressUpdate

router = APIRouter(tags=["process"])
_logger = logging.getLogger(__name__)

_ADMISSION_ERRORS = {
    400: {"model": ErrorResponse, "description": "Missing or malformed URL"},
    402: {"model": ErrorResponse, "description": "Free trials used up"},
}


def _admit(request: ProcessRequest, identity: Identity, services: Services) -> str:
    """Validate the URL before spending a trial, then spend it atomically."""
    url = validate_url(request.url)
    services.quota.consume(identity)
    return url


@router.post(
    "/process",
    response_model=ProcessingResult,
    responses={
        **_ADMISSION_ERRORS,
        500: {"model": ErrorResponse, "description": "Processing failed"},
    },
)
async def process_media(
    request: ProcessRequest,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> ProcessingResult:
    """
    Process a media URL and return metadata, transcript and segments.

    Blocks until every stage has run. Spends one free trial of the caller.
    """
    url = _admit(request, identity, services)
    _logger.info(f"Processing {url} for {identity.key}")
    return await services.pipeline.run(url, owner=identity.key)


@router.post(
    "/jobs",
    response_model=JobStatus,
    status_code=status.HTTP_202_ACCEPTED,
    responses=_ADMISSION_ERRORS,
)
async def submit_job(
    request: ProcessRequest,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> JobStatus:
    """Start processing in the background and return the queued job."""
    url = _admit(request, identity, services)
    job_id = services.pipeline.submit(url, owner=identity.key)
    return services.pipeline.get_status(job_id)


@router.get(
    "/jobs/{job_id}",
    response_model=JobStatus,
    responses={404: {"model": ErrorResponse}},
)
async def get_job(
    job_id: str,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> JobStatus:
    return services.pipeline.get_status(job_id, owner=identity.key)


@router.post(
    "/jobs/{job_id}/cancel",
    response_model=JobStatus,
    responses={404: {"model": ErrorResponse}},
)
async def cancel_job(
    job_id: str,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> JobStatus:
    return services.pipeline.cancel(job_id, owner=identity.key)


def _status_update(job: JobStatus) -> ProgressUpdate:
    if job.result is not None:
        data: dict | None = {"result": job.result.model_dump(mode="json")}
    elif job.error is not None:
        data = {"error": job.error, "kind": job.error_kind}
    else:
        data = None
    return ProgressUpdate(
        step=job.stage.value,
        message=job.error or f"Job is {job.stage.value.replace('_', ' ')}",
        progress=job.progress,
        data=data,
    )


async def job_event_stream(
    job_id: str, pipeline: ProcessingPipeline, owner: str | None = None
) -> AsyncGenerator[str, None]:
    """
    Stream progress updates of a job using Server-Sent Events (SSE).

    The first message is the job's current status; the stream ends after the
    ``completed`` or ``error`` update.
    """
    updates_queue: asyncio.Queue[ProgressUpdate] = asyncio.Queue()

    def progress_handler(step: str, message: str, progress: int, data: dict):
        """Callback that collects updates for SSE streaming."""
        updates_queue.put_nowait(
            ProgressUpdate(step=step, message=message, progress=progress, data=data)
        )

    job = pipeline.subscribe(job_id, progress_handler, owner)
    try:
        yield _format_sse(_status_update(job))
        if job.stage.is_terminal:
            return

        while True:
            update = await updates_queue.get()
            yield _format_sse(update)
            if update.step in ("completed", "error"):
                break
    finally:
        pipeline.unsubscribe(job_id, progress_handler)


def _format_sse(update: ProgressUpdate) -> str:
    """Format a progress update as an SSE message."""
    return f"data: {update.model_dump_json()}\n\n"


@router.get(
    "/jobs/{job_id}/stream",
    response_class=StreamingResponse,
    responses={
        200: {
            "description": "Stream of progress updates",
            "content": {"text/event-stream": {"example": "data: {...}\n\n"}},
        },
        404: {"model": ErrorResponse, "description": "Unknown job"},
    },
)
async def stream_job(
    job_id: str,
    identity: Identity = Depends(get_identity),
    services: Services = Depends(get_services),
) -> StreamingResponse:
    """Follow a job's stages in real time via Server-Sent Events."""
    services.pipeline.get_status(job_id, owner=identity.key)
    return StreamingResponse(
        job_event_stream(job_id, services.pipeline, identity.key),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable buffering in nginx
        },
    )
