from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class NoteKind(str, Enum):
    TEXT = "text"
    SKETCH = "sketch"


class Note(BaseModel):
    """A user annotation anchored to one instant of a media item."""

    id: str
    media_id: str = Field(description="Media (job) the note is anchored to")
    owner: str | None = Field(
        default=None, description="Key of the session identity that created the note"
    )
    timestamp: float = Field(ge=0.0, description="Position in seconds")
    content: str = Field(
        description="Note text, or the image payload (e.g. data URL) of a sketch"
    )
    kind: NoteKind = NoteKind.TEXT
    created_at: datetime
    updated_at: datetime


class TimelineEntry(BaseModel):
    """A note, sketch or segment placed on the media timeline."""

    kind: Literal["note", "sketch", "segment"]
    ref_id: str = Field(description="Id of the underlying note or segment")
    start: float = Field(ge=0.0)
    end: float | None = Field(default=None, description="Set for segments only")
    title: str | None = None
    content: str
