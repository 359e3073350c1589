from typing import Literal

from pydantic import BaseModel, Field

from podboard.session.schemas import User


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy"] = "healthy"
    version: str
    providers: dict[str, str] = Field(
        default_factory=dict, description="Collaborator used for each pipeline stage"
    )


class ProgressUpdate(BaseModel):
    """SSE progress update during processing."""

    step: str = Field(..., description="Current stage identifier")
    message: str = Field(..., description="Human-readable progress message")
    progress: int = Field(
        ..., ge=0, le=100, description="Completion percentage (0-100)"
    )
    data: dict | None = Field(default=None, description="Optional step-specific data")

    class Config:
        json_schema_extra = {
            "example": {
                "step": "transcribing",
                "message": "Generating transcript for The Future of AI...",
                "progress": 30,
                "data": None,
            }
        }


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str = Field(..., description="Error message")
    type: str = Field(..., description="Error type")
    detail: str | None = Field(default=None, description="Additional error details")

    class Config:
        json_schema_extra = {
            "example": {
                "error": "URL is required",
                "type": "InvalidInputError",
                "detail": None,
            }
        }


class JumpTargetResponse(BaseModel):
    """Where the player should seek to for a note."""

    note_id: str
    timestamp: float
    display: str = Field(..., description="Timestamp formatted as m:ss")


class IdentityResponse(BaseModel):
    """Current identity with its trial allowance."""

    kind: Literal["guest", "user"]
    session_id: str
    user: User | None = None
    trial_limit: int
    trials_remaining: int
    trial_message: str
