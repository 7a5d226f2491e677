"""API response models."""

from pydantic import BaseModel, Field
from typing import Literal


class NoteResponse(BaseModel):
    """A note looked up by id."""

    note_id: str = Field(alias="noteId")

    model_config = {"populate_by_name": True}


class WhoAmIResponse(BaseModel):
    """Identity of the calling client."""

    client_id: str


class ProfileResponse(BaseModel):
    """Values echoed back from the profile cookies."""

    name: str
    jwt: str


class HealthResponse(BaseModel):
    """Service liveness."""

    status: Literal["healthy", "unhealthy"]
    version: str = "1.0.0"
    uptime_seconds: float
    validated_routes: int
