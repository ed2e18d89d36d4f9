"""Entry endpoints - create, save intent, timeline."""

import asyncio
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.api.deps import SessionMakerDep
from ledger.auth.middleware import UserIdDep
from ledger.database import get_db
from ledger.engine.assessment import entry_status, short_evidence_summary
from ledger.schemas.entry import (
    CreateEntryRequest,
    CreateEntryResponse,
    ListEntriesResponse,
    SaveIntentRequest,
    SaveIntentResponse,
    TimelineEntry,
)
from ledger.storage import repositories as repo

router = APIRouter()


@router.post("/entry/create", response_model=CreateEntryResponse)
async def create_entry(
    body: CreateEntryRequest,
    user_id: UserIdDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a new learning entry owned by the caller."""
    entry = await repo.create_entry(db, user_id, body.title, body.description or None)
    return CreateEntryResponse(entry_id=str(entry.id), created_at=entry.created_at)


@router.post("/intent/save", response_model=SaveIntentResponse)
async def save_intent(
    body: SaveIntentRequest,
    user_id: UserIdDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Record why the learner did this work."""
    entry = await repo.get_owned_entry(db, str(body.entry_id), user_id)
    entry.intent_prompt = body.intent_prompt
    await db.flush()
    return SaveIntentResponse(success=True)


async def _read(session_maker, query, entry_ids):
    async with session_maker() as session:
        return await query(session, entry_ids)


@router.get("/entries", response_model=ListEntriesResponse, response_model_exclude_none=True)
async def list_entries(
    user_id: UserIdDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    session_maker: SessionMakerDep,
):
    """
    Learning timeline for the caller, newest first, with a derived status.
    Verification, question and evidence lookups run concurrently.
    """
    entries = await repo.list_entries_for_user(db, user_id)
    if not entries:
        return ListEntriesResponse(entries=[])

    entry_ids = [str(e.id) for e in entries]
    public_ids, with_questions, first_evidence = await asyncio.gather(
        _read(session_maker, repo.get_public_ids_for_entries, entry_ids),
        _read(session_maker, repo.get_entry_ids_with_questions, entry_ids),
        _read(session_maker, repo.get_first_evidence_for_entries, entry_ids),
    )

    timeline = []
    for entry in entries:
        eid = str(entry.id)
        public_id = public_ids.get(eid)
        ev = first_evidence.get(eid)
        timeline.append(
            TimelineEntry(
                id=eid,
                created_at=entry.created_at,
                title=entry.title or "Untitled",
                evidence_summary=short_evidence_summary(ev, entry.title),
                status=entry_status(
                    has_public_id=public_id is not None,
                    confidence_band=entry.confidence_band,
                    has_questions=eid in with_questions,
                ),
                public_id=public_id,
                file_evidence_id=(
                    str(ev.id)
                    if ev is not None and ev.evidence_type == "file" and ev.storage_path
                    else None
                ),
            )
        )
    return ListEntriesResponse(entries=timeline)
