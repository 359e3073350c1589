import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional
from urllib.parse import urlparse

from podboard.components.metadata.extractor import MetadataExtractor
from podboard.components.metadata.schemas import MediaMetadata
from podboard.components.segmenter.schemas import Segment
from podboard.components.segmenter.segmenter import Segmenter
from podboard.components.transcriptor.transcriptor import Transcriber
from podboard.errors import (
    InvalidInputError,
    JobCancelledError,
    NotFoundError,
    PipelineStageError,
    PodBoardError,
)
from podboard.pipeline.schemas import (
    STAGE_PROGRESS,
    JobStage,
    JobStatus,
    ProcessingResult,
)
from podboard.utils.profile import Stopwatch, timer

_logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, str, int, dict], None]
ResultHandler = Callable[[ProcessingResult], None]


def validate_url(url: str | None) -> str:
    """Return the stripped URL or raise ``InvalidInputError``."""
    if url is None or not url.strip():
        raise InvalidInputError("URL is required")

    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidInputError(f"Malformed URL: {url}")
    return url


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _Job:
    """Mutable bookkeeping for one pipeline run."""

    def __init__(self, job_id: str, url: str, owner: Optional[str] = None):
        self.id = job_id
        self.url = url
        self.owner = owner
        self.stage = JobStage.QUEUED
        self.progress = STAGE_PROGRESS[JobStage.QUEUED]
        self.history: list[JobStage] = [JobStage.QUEUED]
        self.stage_seconds: dict[str, float] = {}
        self.metadata: MediaMetadata | None = None
        self.transcript: str | None = None
        self.segments: list[Segment] = []
        self.error: str | None = None
        self.error_kind: str | None = None
        self.failed_stage: JobStage | None = None
        self.exception: PodBoardError | None = None
        self.created_at = _now()
        self.finished_at: datetime | None = None
        self.listeners: list[ProgressCallback] = []
        self.done = asyncio.Event()
        self.task: asyncio.Task | None = None

    @property
    def result_status(self) -> str:
        if self.stage is JobStage.COMPLETED:
            return "completed"
        if self.stage is JobStage.ERROR:
            return "error"
        return "processing"

    def result(self) -> ProcessingResult:
        return ProcessingResult(
            id=self.id,
            url=self.url,
            metadata=self.metadata,
            transcript=self.transcript,
            segments=list(self.segments),
            status=self.result_status,  # type: ignore[arg-type]
        )

    def status(self) -> JobStatus:
        return JobStatus(
            id=self.id,
            url=self.url,
            stage=self.stage,
            status=self.result_status,  # type: ignore[arg-type]
            progress=self.progress,
            error=self.error,
            error_kind=self.error_kind,  # type: ignore[arg-type]
            failed_stage=self.failed_stage,
            history=list(self.history),
            stage_seconds=dict(self.stage_seconds),
            result=self.result() if self.stage is JobStage.COMPLETED else None,
            created_at=self.created_at,
            finished_at=self.finished_at,
        )


class ProcessingPipeline:
    """
    Turns a submitted URL into a ProcessingResult.

    Stages run strictly in order inside one asyncio task per job:
    extracting_metadata -> transcribing -> segmenting -> completed.
    Any stage failure, timeout or cancellation moves the job to ``error``;
    jobs are never retried and never move backwards.
    """

    def __init__(
        self,
        metadata_extractor: MetadataExtractor,
        transcriber: Transcriber,
        segmenter: Segmenter,
        *,
        stage_timeout: Optional[float] = 30.0,
        result_handlers: Optional[list[ResultHandler]] = None,
    ):
        self.metadata_extractor = metadata_extractor
        self.transcriber = transcriber
        self.segmenter = segmenter
        self.stage_timeout = stage_timeout
        self._result_handlers: list[ResultHandler] = list(result_handlers or [])
        self._jobs: dict[str, _Job] = {}

    def add_result_handler(self, handler: ResultHandler) -> None:
        """Register a callback receiving every completed result."""
        self._result_handlers.append(handler)

    def submit(
        self,
        url: str,
        progress_callback: Optional[ProgressCallback] = None,
        owner: Optional[str] = None,
    ) -> str:
        """Validate ``url`` and start a new job. Must be called inside an event loop.

        With ``owner`` set, lookups passing a different owner treat the job as
        unknown.
        """
        url = validate_url(url)
        job = _Job(uuid.uuid4().hex, url, owner)
        if progress_callback:
            job.listeners.append(progress_callback)
        self._jobs[job.id] = job

        _logger.info(f"Submitted job {job.id} for {url}")
        job.task = asyncio.get_running_loop().create_task(self._execute(job))
        return job.id

    def subscribe(
        self, job_id: str, callback: ProgressCallback, owner: Optional[str] = None
    ) -> JobStatus:
        """Attach a progress listener and return the status at attach time."""
        job = self._get(job_id, owner)
        if not job.stage.is_terminal:
            job.listeners.append(callback)
        return job.status()

    def unsubscribe(self, job_id: str, callback: ProgressCallback) -> None:
        job = self._get(job_id)
        if callback in job.listeners:
            job.listeners.remove(callback)

    def get_status(self, job_id: str, owner: Optional[str] = None) -> JobStatus:
        return self._get(job_id, owner).status()

    async def wait(self, job_id: str, timeout: Optional[float] = None) -> JobStatus:
        """Wait until the job reaches ``completed`` or ``error``."""
        job = self._get(job_id)
        await asyncio.wait_for(job.done.wait(), timeout=timeout)
        return job.status()

    def cancel(self, job_id: str, owner: Optional[str] = None) -> JobStatus:
        """Stop a processing job; terminal jobs are left untouched."""
        job = self._get(job_id, owner)
        if job.stage.is_terminal:
            return job.status()

        _logger.info(f"Cancelling job {job.id} during {job.stage.value}")
        self._fail(job, JobCancelledError(job.id), kind="cancelled")
        if job.task is not None:
            job.task.cancel()
        return job.status()

    async def run(
        self,
        url: str,
        progress_callback: Optional[ProgressCallback] = None,
        owner: Optional[str] = None,
    ) -> ProcessingResult:
        """Submit ``url`` and wait for the result, raising the job's error."""
        job_id = self.submit(url, progress_callback, owner)
        status = await self.wait(job_id)
        if status.result is None:
            raise self._jobs[job_id].exception or PipelineStageError(
                "pipeline", status.error or "failed"
            )
        return status.result

    def _get(self, job_id: str, owner: Optional[str] = None) -> _Job:
        job = self._jobs.get(job_id)
        if job is None or (owner is not None and job.owner != owner):
            raise NotFoundError("job", job_id)
        return job

    async def _execute(self, job: _Job) -> None:
        try:
            job.metadata = await self._run_stage(
                job,
                JobStage.EXTRACTING_METADATA,
                "Extracting media metadata...",
                lambda: self.metadata_extractor.extract(job.url),
            )
            metadata = job.metadata

            job.transcript = await self._run_stage(
                job,
                JobStage.TRANSCRIBING,
                f"Generating transcript for {metadata.title}...",
                lambda: self.transcriber.transcribe(job.url),
            )
            transcript = job.transcript

            if transcript and transcript.strip():
                segments = await self._run_stage(
                    job,
                    JobStage.SEGMENTING,
                    "Segmenting transcript into chapters...",
                    lambda: self.segmenter.segment(transcript, metadata),
                )
                job.segments = self._check_segments(segments, metadata)
            else:
                _logger.warning(
                    "No transcript for job %s, skipping segmentation", job.id
                )
                job.segments = []

            result = job.result().model_copy(update={"status": "completed"})
            for handler in self._result_handlers:
                handler(result)
        except PipelineStageError as exc:
            _logger.error("Job %s failed: %s", job.id, exc)
            self._fail(job, exc)
            return
        except asyncio.CancelledError:
            if not job.stage.is_terminal:
                self._fail(job, JobCancelledError(job.id), kind="cancelled")
            raise
        except Exception as exc:
            _logger.exception("Job %s failed while publishing its result", job.id)
            self._fail(job, PipelineStageError(job.stage.value, str(exc)))
            return

        self._complete(job)

    async def _run_stage(
        self,
        job: _Job,
        stage: JobStage,
        message: str,
        call: Callable[[], Awaitable[Any]],
    ) -> Any:
        self._advance(job, stage, message)
        watch: Stopwatch | None = None
        try:
            with timer(f"{stage.value} for job {job.id}") as watch:
                return await asyncio.wait_for(call(), timeout=self.stage_timeout)
        except asyncio.TimeoutError:
            raise PipelineStageError(
                stage.value, f"timed out after {self.stage_timeout}s"
            ) from None
        except PipelineStageError:
            raise
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            raise PipelineStageError(stage.value, reason) from exc
        finally:
            if watch is not None:
                job.stage_seconds[stage.value] = round(watch.elapsed, 3)

    @staticmethod
    def _check_segments(
        segments: list[Segment], metadata: MediaMetadata
    ) -> list[Segment]:
        """Sort segments and reject ranges outside a known media duration."""
        ordered = sorted(segments, key=lambda segment: segment.start_time)
        if metadata.duration > 0:
            for segment in ordered:
                if segment.end_time > metadata.duration:
                    raise PipelineStageError(
                        JobStage.SEGMENTING.value,
                        f"segment {segment.id} ends at {segment.end_time}s, "
                        f"beyond the media duration of {metadata.duration}s",
                    )
        return ordered

    def _advance(
        self, job: _Job, stage: JobStage, message: str, data: Optional[dict] = None
    ) -> None:
        job.stage = stage
        job.history.append(stage)
        job.progress = max(job.progress, STAGE_PROGRESS[stage])
        self._notify(job, stage.value, message, data or {})

    def _complete(self, job: _Job) -> None:
        job.finished_at = _now()
        result = job.result().model_copy(update={"status": "completed"})
        self._advance(
            job,
            JobStage.COMPLETED,
            f"Processing complete ({len(job.segments)} segments)",
            {"result": result.model_dump(mode="json")},
        )
        _logger.info(f"Job {job.id} completed with {len(job.segments)} segments")
        job.done.set()

    def _fail(self, job: _Job, exc: PodBoardError, kind: str = "stage_failed") -> None:
        job.failed_stage = job.stage
        job.stage = JobStage.ERROR
        job.history.append(JobStage.ERROR)
        job.error = str(exc)
        job.error_kind = kind
        job.exception = exc
        job.finished_at = _now()
        self._notify(job, "error", job.error, {"error": job.error, "kind": kind})
        job.done.set()

    def _notify(self, job: _Job, step: str, message: str, data: dict) -> None:
        for listener in list(job.listeners):
            try:
                listener(step, message, job.progress, data)
            except Exception:
                _logger.exception("Progress listener failed for job %s", job.id)
