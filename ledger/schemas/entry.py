"""Entry and timeline schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class CreateEntryRequest(BaseModel):
    """POST /api/entry/create request."""

    title: str = Field(min_length=1)
    description: str | None = None


class CreateEntryResponse(BaseModel):
    entry_id: str
    created_at: datetime


class SaveIntentRequest(BaseModel):
    """POST /api/intent/save request."""

    entry_id: UUID
    intent_prompt: str = Field(min_length=1)


class SaveIntentResponse(BaseModel):
    success: bool = True


class TimelineEntry(BaseModel):
    """One row of the learner's timeline."""

    id: str
    created_at: datetime
    title: str
    evidence_summary: str
    status: str
    public_id: str | None = None
    file_evidence_id: str | None = None


class ListEntriesResponse(BaseModel):
    entries: list[TimelineEntry] = Field(default_factory=list)
