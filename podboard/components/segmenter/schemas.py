from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Segment(BaseModel):
    """A named time range within a media item's duration."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Identifier, unique within one media item")
    title: str
    start_time: float = Field(ge=0.0, description="Start of the range in seconds")
    end_time: float = Field(gt=0.0, description="End of the range in seconds")
    description: str | None = None

    @model_validator(mode="after")
    def _check_range(self) -> "Segment":
        if self.start_time >= self.end_time:
            raise ValueError(
                f"start_time ({self.start_time}) must be before end_time ({self.end_time})"
            )
        return self

    def contains(self, timestamp: float) -> bool:
        return self.start_time <= timestamp < self.end_time


class SegmentDraft(BaseModel):
    """A chapter proposed by the language model, before ids are assigned."""

    title: str = Field(description="Short chapter title (max ~8 words)")
    start_time: float = Field(ge=0.0, description="Chapter start in seconds")
    end_time: float = Field(gt=0.0, description="Chapter end in seconds")
    description: str | None = Field(
        default=None, description="One sentence summary of the chapter"
    )


class SegmentPlan(BaseModel):
    """Ordered chapters covering a media item."""

    segments: List[SegmentDraft]
