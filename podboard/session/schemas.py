from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """A signed-in account and its trial counter."""

    id: str
    email: str
    name: str
    free_trials_used: int = Field(default=0, ge=0)


class Identity(BaseModel):
    """Who is making a request: an anonymous device session or a user."""

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(description="Device/session key supplied by the client")
    user: User | None = None

    @property
    def kind(self) -> Literal["guest", "user"]:
        return "guest" if self.user is None else "user"

    @property
    def is_guest(self) -> bool:
        return self.user is None

    @property
    def key(self) -> str:
        """Stable owner key for data scoped to this identity."""
        if self.user is None:
            return f"guest:{self.session_id}"
        return f"user:{self.user.id}"
