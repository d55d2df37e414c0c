"""
Pydantic data transfer objects (DTOs) for the application's API endpoints.

Pet profiles, pet-photo links and emotion records are unstructured client
bodies, so their models accept extra fields and hand them through untouched.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ClientBody(BaseModel):
    """Unstructured client body; extra fields are accepted and stored as sent."""

    model_config = ConfigDict(extra="allow")

    def as_record(self) -> dict[str, Any]:
        """Returns every field the client sent, explicit nulls included."""
        return {**self.model_dump(exclude_unset=True), **(self.model_extra or {})}


class PetProfileRequest(ClientBody):
    """Pet profile synced from the app. Only ``id`` and ``name`` are known fields."""

    id: str | None = None
    name: str | None = None


class PetPhotoLinkRequest(ClientBody):
    """Payload associating an uploaded photo with a pet."""

    photoId: str | None = None


class DiaryRequest(BaseModel):
    """Payload creating or replacing a diary entry."""

    id: str | None = None
    petId: str | None = None
    date: str | None = None
    content: str | None = None
    imagePath: str | None = None
    isLocked: bool = False
    emotionRecordId: str | None = None
    photoIds: list[str] = Field(default_factory=list)
    createdAt: str | None = None


class EmotionRecordRequest(ClientBody):
    """Emotion analysis result recorded for a pet."""

    petId: str | None = None
    emotion: str | None = None


class ScanControlRequest(BaseModel):
    """Payload dictating control signals ('pause', 'resume', 'cancel') to the scanner."""

    action: str


class RestoreRequest(BaseModel):
    """Payload conveying the filename of a JSON snapshot to restore."""

    filename: str
