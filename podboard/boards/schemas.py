import uuid
from datetime import datetime, timezone
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from podboard.components.segmenter.schemas import Segment
from podboard.pipeline.schemas import ProcessingResult
from podboard.timeline.schemas import Note, NoteKind

BoardItemKind = Literal["note", "sketch", "segment"]


def _media_title(media: ProcessingResult) -> str:
    return media.metadata.title if media.metadata else media.url


class BoardItem(BaseModel):
    """
    A copy of a note, sketch or segment saved to a board.

    Items are snapshots taken at save time: later edits to the source note
    do not reach the board.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    kind: BoardItemKind
    content: str
    timestamp: float = Field(ge=0.0, description="Position in the source media (s)")
    media_id: str
    media_title: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_note(cls, note: Note, media: ProcessingResult) -> "BoardItem":
        return cls(
            kind="sketch" if note.kind is NoteKind.SKETCH else "note",
            content=note.content,
            timestamp=note.timestamp,
            media_id=media.id,
            media_title=_media_title(media),
        )

    @classmethod
    def from_segment(cls, segment: Segment, media: ProcessingResult) -> "BoardItem":
        return cls(
            kind="segment",
            content=segment.description or segment.title,
            timestamp=segment.start_time,
            media_id=media.id,
            media_title=_media_title(media),
        )


class Board(BaseModel):
    """A named, colour-tagged collection of board items."""

    id: str
    owner: str = Field(description="Key of the identity that owns the board")
    title: str
    description: str = ""
    color: str
    items: List[BoardItem] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @computed_field  # type: ignore[prop-decorator]
    @property
    def item_count(self) -> int:
        return len(self.items)
