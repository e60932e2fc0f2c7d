from uuid import UUID

from pydantic import BaseModel, ConfigDict


class CurrentUser(BaseModel):
    """Caller identity taken from a verified access token."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID
    email: str = ""
