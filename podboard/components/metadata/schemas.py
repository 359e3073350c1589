from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MediaMetadata(BaseModel):
    """Descriptive metadata for a submitted media item."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(description="Human readable title of the episode or video")
    description: str = Field(default="", description="Long-form description")
    duration: int = Field(ge=0, description="Total duration in seconds")
    thumbnail: str = Field(default="", description="Thumbnail image URI")
    author: str = Field(default="", description="Channel, show or author name")
    published_at: datetime | None = Field(
        default=None,
        description=(
            "Original publication timestamp; None when the source does not "
            "expose one (oEmbed responses carry no date)"
        ),
    )
