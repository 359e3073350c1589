from datetime import datetime
from enum import Enum
from typing import List, Literal

from pydantic import BaseModel, Field

from podboard.components.metadata.schemas import MediaMetadata
from podboard.components.segmenter.schemas import Segment


class JobStage(str, Enum):
    """Pipeline stages in execution order, plus the two terminal states."""

    QUEUED = "queued"
    EXTRACTING_METADATA = "extracting_metadata"
    TRANSCRIBING = "transcribing"
    SEGMENTING = "segmenting"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStage.COMPLETED, JobStage.ERROR)


# Progress reported when a stage starts.
STAGE_PROGRESS: dict[JobStage, int] = {
    JobStage.QUEUED: 0,
    JobStage.EXTRACTING_METADATA: 5,
    JobStage.TRANSCRIBING: 30,
    JobStage.SEGMENTING: 65,
    JobStage.COMPLETED: 100,
}

ResultStatus = Literal["processing", "completed", "error"]
ErrorKind = Literal["stage_failed", "cancelled"]


class ProcessingResult(BaseModel):
    """Bundle produced by one run of the processing pipeline."""

    id: str = Field(description="Job identifier, also used as the media id")
    url: str
    metadata: MediaMetadata | None = None
    transcript: str | None = None
    segments: List[Segment] = Field(default_factory=list)
    status: ResultStatus = "processing"


class JobStatus(BaseModel):
    """Point-in-time view of a job."""

    id: str
    url: str
    stage: JobStage
    status: ResultStatus
    progress: int = Field(ge=0, le=100, description="Completion percentage (0-100)")
    error: str | None = None
    error_kind: ErrorKind | None = None
    failed_stage: JobStage | None = None
    history: List[JobStage] = Field(
        default_factory=list, description="Stages entered, in order"
    )
    stage_seconds: dict[str, float] = Field(
        default_factory=dict, description="Wall-clock seconds spent in each stage run"
    )
    result: ProcessingResult | None = Field(
        default=None, description="Populated only once the job is completed"
    )
    created_at: datetime
    finished_at: datetime | None = None
