"""Public verification lookup - no authentication."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.database import get_db
from ledger.errors import NotFoundError
from ledger.schemas.verification import VerificationRecord
from ledger.storage.repositories import get_verification_by_public_id

router = APIRouter()


@router.get(
    "/verify/{public_id}", response_model=VerificationRecord, response_model_exclude_none=True
)
async def get_verification(
    public_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Return the safe public subset of a verification record."""
    record = await get_verification_by_public_id(db, public_id.strip())
    if record is None:
        raise NotFoundError("Verification record not found")
    return VerificationRecord(
        public_id=record.public_id,
        domain=record.domain,
        capabilitySummary=record.capability_summary,
        confidenceBand=record.confidence_band,
        created_at=record.created_at,
        intent_prompt=record.intent_prompt,
        layer1_descriptor=record.layer1_descriptor,
        layer2_descriptor=record.layer2_descriptor,
        layer3_descriptor=record.layer3_descriptor,
        layer4_descriptor=record.layer4_descriptor,
    )
