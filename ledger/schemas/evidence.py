"""Evidence schemas."""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from ledger.utils.validation import is_http_url


class AddEvidenceRequest(BaseModel):
    """POST /api/evidence/add request."""

    entry_id: UUID
    evidence_type: Literal["text", "link", "file"]
    content: str = Field(min_length=1)

    @model_validator(mode="after")
    def link_must_be_url(self) -> "AddEvidenceRequest":
        if self.evidence_type == "link" and not is_http_url(self.content):
            raise ValueError("content must be a valid URL for link evidence")
        return self


class AddEvidenceResponse(BaseModel):
    evidence_id: str
    created_at: datetime


class EvidenceItem(BaseModel):
    id: str
    evidence_type: str
    content: str | None = None
    storage_path: str | None = None
    original_filename: str | None = None
    mime_type: str | None = None
    size: int | None = None
    transcript: str | None = None
    created_at: datetime


class GetEvidenceResponse(BaseModel):
    evidence: list[EvidenceItem] = Field(default_factory=list)


class SignedUrlResponse(BaseModel):
    url: str
    expires_at: datetime


class TranscriptRequest(BaseModel):
    """POST /api/youtube-transcript request."""

    url: str = Field(min_length=1)

    @field_validator("url")
    @classmethod
    def must_be_url(cls, v: str) -> str:
        if not is_http_url(v):
            raise ValueError("url is required and must be a valid URL")
        return v.strip()


class TranscriptResponse(BaseModel):
    text: str
