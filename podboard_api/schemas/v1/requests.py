from pydantic import BaseModel, Field, model_validator

from podboard.timeline.schemas import NoteKind


class ProcessRequest(BaseModel):
    """Request schema for processing a media URL."""

    url: str | None = Field(
        default=None,
        description="Podcast or video URL to process",
        examples=["https://example.com/ep1"],
    )

    class Config:
        json_schema_extra = {"example": {"url": "https://example.com/ep1"}}


class NoteCreateRequest(BaseModel):
    """A text note or sketch anchored at a timeline position."""

    timestamp: float = Field(..., description="Position in seconds")
    content: str = Field(..., description="Note text or sketch image data URL")
    kind: NoteKind = Field(default=NoteKind.TEXT)

    class Config:
        json_schema_extra = {
            "example": {
                "timestamp": 1245,
                "content": "Build systems that adapt to user behaviour.",
                "kind": "text",
            }
        }


class NoteUpdateRequest(BaseModel):
    content: str


class BoardCreateRequest(BaseModel):
    title: str = Field(..., description="Board title")
    description: str = Field(default="")
    color: str | None = Field(
        default=None, description="Colour tag; picked from the palette when omitted"
    )


class BoardItemCreateRequest(BaseModel):
    """Save a note or a segment of a processed media item to a board."""

    media_id: str
    note_id: str | None = None
    segment_id: str | None = None

    @model_validator(mode="after")
    def _one_source(self) -> "BoardItemCreateRequest":
        if (self.note_id is None) == (self.segment_id is None):
            raise ValueError("Provide exactly one of note_id or segment_id")
        return self


class SignUpRequest(BaseModel):
    name: str
    email: str
    password: str


class SignInRequest(BaseModel):
    email: str
    password: str
