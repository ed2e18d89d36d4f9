"""Evidence endpoints - add, upload, replace, list, signed download URL."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.api.deps import SettingsDep, StorageDep, TranscriptsDep
from ledger.auth.middleware import UserIdDep
from ledger.database import get_db
from ledger.engine.transcripts import is_youtube_url
from ledger.errors import NotFoundError
from ledger.schemas.evidence import (
    AddEvidenceRequest,
    AddEvidenceResponse,
    EvidenceItem,
    GetEvidenceResponse,
    SignedUrlResponse,
)
from ledger.storage import repositories as repo
from ledger.storage.objects import SupabaseStorage
from ledger.utils.validation import file_extension, validate_upload

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_valid_upload(file: UploadFile | None, max_bytes: int) -> tuple[bytes, str]:
    """Read and validate an upload. Nothing is stored until this passes."""
    if file is None:
        validate_upload(None, None, None, max_bytes)
    data = await file.read()
    mime_type = validate_upload(file.filename, file.content_type, len(data), max_bytes)
    return data, mime_type


async def _store_file(
    storage: SupabaseStorage,
    user_id: str,
    entry_id: str,
    filename: str,
    data: bytes,
    mime_type: str,
) -> str:
    path = f"{user_id}/{entry_id}/{uuid4()}{file_extension(filename)}"
    await storage.upload(path, data, mime_type)
    logger.info("Stored %d bytes of evidence for entry %s", len(data), entry_id)
    return path


@router.post("/evidence/add", response_model=AddEvidenceResponse)
async def add_evidence(
    body: AddEvidenceRequest,
    user_id: UserIdDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    transcripts: TranscriptsDep,
):
    """Attach text, link or file-reference evidence to an entry."""
    entry_id = str(body.entry_id)
    await repo.get_owned_entry(db, entry_id, user_id)

    if body.evidence_type == "file":
        # File references share the one-current-file row with uploads
        existing = await repo.get_file_evidence(db, entry_id)
        if existing:
            _overwrite_file_row(existing, body.content, None, None, None)
            await db.flush()
            return AddEvidenceResponse(evidence_id=str(existing.id), created_at=existing.created_at)

    transcript = None
    if body.evidence_type == "link" and is_youtube_url(body.content):
        transcript = await transcripts.fetch(body.content)

    ev = await repo.create_evidence(
        db,
        entry_id=entry_id,
        evidence_type=body.evidence_type,
        content=body.content,
        original_filename=body.content if body.evidence_type == "file" else None,
        transcript=transcript,
    )
    return AddEvidenceResponse(evidence_id=str(ev.id), created_at=ev.created_at)


@router.post("/evidence/upload", response_model=AddEvidenceResponse)
async def upload_evidence(
    entry_id: Annotated[UUID, Form()],
    user_id: UserIdDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    storage: StorageDep,
    settings: SettingsDep,
    file: Annotated[UploadFile | None, File()] = None,
):
    """
    Upload a file as evidence. An entry keeps one current file: if it already
    has one, that row is overwritten in place.
    """
    data, mime_type = await _read_valid_upload(file, settings.max_upload_bytes)
    eid = str(entry_id)
    await repo.get_owned_entry(db, eid, user_id)

    path = await _store_file(storage, user_id, eid, file.filename, data, mime_type)
    existing = await repo.get_file_evidence(db, eid)
    if existing:
        _overwrite_file_row(existing, file.filename, path, mime_type, len(data))
        await db.flush()
        ev = existing
    else:
        ev = await repo.create_evidence(
            db,
            entry_id=eid,
            evidence_type="file",
            content=file.filename,
            storage_path=path,
            original_filename=file.filename,
            mime_type=mime_type,
            size=len(data),
        )
    return AddEvidenceResponse(evidence_id=str(ev.id), created_at=ev.created_at)


def _overwrite_file_row(
    ev, filename: str, path: str | None, mime_type: str | None, size: int | None
) -> None:
    # The previous object stays in the bucket
    ev.content = filename
    ev.storage_path = path
    ev.original_filename = filename
    ev.mime_type = mime_type
    ev.size = size


@router.post("/evidence/replace", response_model=AddEvidenceResponse)
async def replace_evidence(
    entry_id: Annotated[UUID, Form()],
    user_id: UserIdDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    storage: StorageDep,
    settings: SettingsDep,
    file: Annotated[UploadFile | None, File()] = None,
):
    """Replace the entry's existing file evidence."""
    data, mime_type = await _read_valid_upload(file, settings.max_upload_bytes)
    eid = str(entry_id)
    await repo.get_owned_entry(db, eid, user_id)

    existing = await repo.get_file_evidence(db, eid)
    if not existing:
        raise NotFoundError("No file evidence found for this entry")

    path = await _store_file(storage, user_id, eid, file.filename, data, mime_type)
    _overwrite_file_row(existing, file.filename, path, mime_type, len(data))
    await db.flush()
    return AddEvidenceResponse(evidence_id=str(existing.id), created_at=existing.created_at)


@router.get("/evidence", response_model=GetEvidenceResponse)
async def get_evidence(
    entry_id: UUID,
    user_id: UserIdDep,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """List an entry's evidence, newest first."""
    eid = str(entry_id)
    await repo.get_owned_entry(db, eid, user_id)
    rows = await repo.list_evidence(db, eid, newest_first=True)
    return GetEvidenceResponse(
        evidence=[
            EvidenceItem(
                id=str(e.id),
                evidence_type=e.evidence_type,
                content=e.content,
                storage_path=e.storage_path,
                original_filename=e.original_filename,
                mime_type=e.mime_type,
                size=e.size,
                transcript=e.transcript,
                created_at=e.created_at,
            )
            for e in rows
        ]
    )


@router.get("/evidence/{evidence_id}/signed-url", response_model=SignedUrlResponse)
async def get_signed_url(
    evidence_id: UUID,
    user_id: UserIdDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    storage: StorageDep,
    settings: SettingsDep,
):
    """Short-lived download URL for a file evidence item."""
    ev = await repo.get_evidence(db, str(evidence_id))
    if ev is None or ev.evidence_type != "file" or not ev.storage_path:
        raise NotFoundError("Evidence not found or not a file")
    await repo.get_owned_entry(db, str(ev.entry_id), user_id)

    expires_in = settings.signed_url_expires_in
    url = await storage.create_signed_url(ev.storage_path, expires_in)
    return SignedUrlResponse(
        url=url,
        expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    )
