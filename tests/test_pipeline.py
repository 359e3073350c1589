"""Tests for the processing pipeline state machine."""

import asyncio

import pytest

from podboard.components.segmenter.schemas import Segment
from podboard.components.transcriptor.transcriptor import StubTranscriber
from podboard.errors import (
    InvalidInputError,
    JobCancelledError,
    NotFoundError,
    PipelineStageError,
)
from podboard.pipeline.pipeline import validate_url
from podboard.pipeline.schemas import JobStage

from fakes import (
    ExplodingSegmenter,
    FailingExtractor,
    FixedSegmenter,
    SlowTranscriber,
)

STAGE_ORDER = [
    JobStage.QUEUED,
    JobStage.EXTRACTING_METADATA,
    JobStage.TRANSCRIBING,
    JobStage.SEGMENTING,
    JobStage.COMPLETED,
]


async def _wait_for_stage(pipeline, job_id: str, stage: JobStage) -> None:
    for _ in range(200):
        if pipeline.get_status(job_id).stage is stage:
            return
        await asyncio.sleep(0.005)
    raise AssertionError(f"job never reached {stage}")


class TestValidateUrl:
    @pytest.mark.parametrize("url", [None, "", "   "])
    def test_missing_url(self, url):
        with pytest.raises(InvalidInputError, match="URL is required"):
            validate_url(url)

    @pytest.mark.parametrize(
        "url", ["not a url", "ftp://example.com/ep1", "https://", "example.com/ep1"]
    )
    def test_malformed_url(self, url):
        with pytest.raises(InvalidInputError, match="Malformed URL"):
            validate_url(url)

    def test_strips_whitespace(self):
        assert validate_url("  https://example.com/ep1 ") == "https://example.com/ep1"


class TestHappyPath:
    async def test_example_episode_yields_five_ordered_segments(self, pipeline):
        result = await pipeline.run("https://example.com/ep1")

        assert result.status == "completed"
        assert result.metadata.duration == 3600
        assert len(result.segments) == 5
        assert result.segments[0].start_time == 0
        assert result.segments[-1].end_time == 3600
        for previous, current in zip(result.segments, result.segments[1:]):
            assert previous.start_time < current.start_time
            assert previous.end_time <= current.start_time

    async def test_stages_run_in_order(self, pipeline):
        job_id = pipeline.submit("https://example.com/ep1")
        status = await pipeline.wait(job_id, timeout=5)

        assert status.history == STAGE_ORDER
        assert status.status == "completed"
        assert status.progress == 100
        assert status.result is not None
        assert status.finished_at is not None
        assert set(status.stage_seconds) == {
            "extracting_metadata",
            "transcribing",
            "segmenting",
        }

    async def test_submit_returns_before_stages_run(self, pipeline):
        job_id = pipeline.submit("https://example.com/ep1")
        status = pipeline.get_status(job_id)

        assert status.stage is JobStage.QUEUED
        assert status.status == "processing"
        assert status.progress == 0
        assert status.result is None

    async def test_progress_is_monotonic_and_reaches_100_only_on_completion(
        self, pipeline
    ):
        updates: list[tuple[str, int]] = []
        await pipeline.run(
            "https://example.com/ep1",
            progress_callback=lambda step, message, progress, data: updates.append(
                (step, progress)
            ),
        )

        percents = [progress for _, progress in updates]
        assert percents == sorted(percents)
        assert all(0 <= progress <= 100 for progress in percents)
        assert [step for step, progress in updates if progress == 100] == ["completed"]

    async def test_resubmitting_same_url_creates_independent_jobs(self, pipeline):
        first = pipeline.submit("https://example.com/ep1")
        second = pipeline.submit("https://example.com/ep1")

        assert first != second
        await pipeline.wait(first, timeout=5)
        await pipeline.wait(second, timeout=5)
        assert pipeline.get_status(first).result.id == first
        assert pipeline.get_status(second).result.id == second

    async def test_raising_progress_callback_does_not_affect_job(self, pipeline):
        steps: list[str] = []

        def broken_listener(step, message, progress, data):
            steps.append(step)
            raise RuntimeError("listener crashed")

        job_id = pipeline.submit("https://example.com/ep1", broken_listener)
        status = await pipeline.wait(job_id, timeout=2)

        assert status.status == "completed"
        assert status.history == STAGE_ORDER
        assert steps == [
            "extracting_metadata",
            "transcribing",
            "segmenting",
            "completed",
        ]

    async def test_result_handlers_receive_completed_result(self, pipeline):
        received = []
        pipeline.add_result_handler(received.append)

        result = await pipeline.run("https://example.com/ep1")

        assert [r.id for r in received] == [result.id]
        assert received[0].status == "completed"


class TestEmptyTranscript:
    @pytest.mark.parametrize("transcript", [None, "", "   \n"])
    async def test_segmentation_skipped(self, make_pipeline, transcript):
        pipeline = make_pipeline(
            transcriber=StubTranscriber(transcript=transcript),
            segmenter=ExplodingSegmenter(),
        )

        job_id = pipeline.submit("https://example.com/ep1")
        status = await pipeline.wait(job_id, timeout=5)

        assert status.status == "completed"
        assert status.progress == 100
        assert status.result.segments == []
        assert JobStage.SEGMENTING not in status.history


class TestFailures:
    async def test_metadata_failure_moves_job_to_error(self, make_pipeline):
        pipeline = make_pipeline(metadata_extractor=FailingExtractor())

        job_id = pipeline.submit("https://example.com/ep1")
        status = await pipeline.wait(job_id, timeout=5)

        assert status.stage is JobStage.ERROR
        assert status.status == "error"
        assert status.failed_stage is JobStage.EXTRACTING_METADATA
        assert status.error_kind == "stage_failed"
        assert "metadata service unreachable" in status.error
        assert status.progress < 100
        assert status.result is None
        assert status.history == [
            JobStage.QUEUED,
            JobStage.EXTRACTING_METADATA,
            JobStage.ERROR,
        ]

    async def test_run_raises_stage_error(self, make_pipeline):
        pipeline = make_pipeline(segmenter=ExplodingSegmenter())

        with pytest.raises(PipelineStageError) as exc_info:
            await pipeline.run("https://example.com/ep1")

        assert exc_info.value.stage == "segmenting"
        assert exc_info.value.reason == "model overloaded"

    async def test_stage_timeout(self, make_pipeline):
        pipeline = make_pipeline(transcriber=SlowTranscriber(), stage_timeout=0.05)

        job_id = pipeline.submit("https://example.com/ep1")
        status = await pipeline.wait(job_id, timeout=5)

        assert status.failed_stage is JobStage.TRANSCRIBING
        assert "timed out" in status.error

    async def test_segment_beyond_duration_fails_segmenting(self, make_pipeline):
        pipeline = make_pipeline(
            segmenter=FixedSegmenter(
                [Segment(id="1", title="Too long", start_time=0, end_time=4000)]
            )
        )

        job_id = pipeline.submit("https://example.com/ep1")
        status = await pipeline.wait(job_id, timeout=5)

        assert status.failed_stage is JobStage.SEGMENTING
        assert "beyond the media duration" in status.error

    async def test_unsorted_segments_are_ordered(self, make_pipeline):
        pipeline = make_pipeline(
            segmenter=FixedSegmenter(
                [
                    Segment(id="b", title="Second", start_time=600, end_time=1200),
                    Segment(id="a", title="First", start_time=0, end_time=600),
                ]
            )
        )

        result = await pipeline.run("https://example.com/ep1")

        assert [segment.id for segment in result.segments] == ["a", "b"]

    async def test_failure_leaves_other_jobs_untouched(self, make_pipeline):
        pipeline = make_pipeline()
        done = await pipeline.run("https://example.com/ep1")
        pipeline.metadata_extractor = FailingExtractor()

        failed = pipeline.submit("https://example.com/ep2")
        await pipeline.wait(failed, timeout=5)

        assert pipeline.get_status(done.id).status == "completed"
        assert pipeline.get_status(failed).status == "error"

    def test_invalid_url_rejected_before_any_stage(self, pipeline):
        with pytest.raises(InvalidInputError):
            pipeline.submit("")

    def test_unknown_job(self, pipeline):
        with pytest.raises(NotFoundError):
            pipeline.get_status("missing")


class TestCancellation:
    async def test_cancel_running_job(self, make_pipeline):
        pipeline = make_pipeline(transcriber=SlowTranscriber())
        job_id = pipeline.submit("https://example.com/ep1")
        await _wait_for_stage(pipeline, job_id, JobStage.TRANSCRIBING)

        status = pipeline.cancel(job_id)

        assert status.stage is JobStage.ERROR
        assert status.error == "Cancelled"
        assert status.error_kind == "cancelled"
        assert status.failed_stage is JobStage.TRANSCRIBING

        final = await pipeline.wait(job_id, timeout=1)
        assert final.history[-1] is JobStage.ERROR
        assert final.history.count(JobStage.ERROR) == 1

    async def test_run_raises_when_cancelled(self, make_pipeline):
        pipeline = make_pipeline(transcriber=SlowTranscriber())
        task = asyncio.create_task(pipeline.run("https://example.com/ep1"))
        await asyncio.sleep(0.01)
        (job_id,) = pipeline._jobs

        pipeline.cancel(job_id)

        with pytest.raises(JobCancelledError):
            await task

    async def test_cancel_completed_job_is_noop(self, pipeline):
        result = await pipeline.run("https://example.com/ep1")

        status = pipeline.cancel(result.id)

        assert status.status == "completed"
        assert status.error is None


class TestOwnership:
    async def test_jobs_hidden_from_other_owners(self, pipeline):
        job_id = pipeline.submit("https://example.com/ep1", owner="guest:a")
        await pipeline.wait(job_id, timeout=5)

        assert pipeline.get_status(job_id, owner="guest:a").status == "completed"
        assert pipeline.get_status(job_id).status == "completed"
        with pytest.raises(NotFoundError):
            pipeline.get_status(job_id, owner="guest:b")
        with pytest.raises(NotFoundError):
            pipeline.cancel(job_id, owner="guest:b")
