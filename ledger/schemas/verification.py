"""Public verification record schema."""

from datetime import datetime

from pydantic import BaseModel


class VerificationRecord(BaseModel):
    """GET /api/verify/{public_id} response. No entry id, no raw evidence."""

    public_id: str
    domain: str
    capabilitySummary: str
    confidenceBand: str
    created_at: datetime
    intent_prompt: str | None = None
    layer1_descriptor: str | None = None
    layer2_descriptor: str | None = None
    layer3_descriptor: str | None = None
    layer4_descriptor: str | None = None
