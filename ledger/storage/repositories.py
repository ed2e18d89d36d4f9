"""Repository functions for entries, evidence, assessments and verifications."""

from collections.abc import Iterable, Mapping, Sequence
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.errors import ForbiddenError
from ledger.models import (
    AssessmentAnswer,
    AssessmentQuestion,
    Entry,
    Evidence,
    Verification,
)

# Entries


async def create_entry(
    db: AsyncSession, user_id: str, title: str, description: str | None = None
) -> Entry:
    entry = Entry(id=str(uuid4()), user_id=user_id, title=title, description=description)
    db.add(entry)
    await db.flush()
    return entry


async def get_entry(db: AsyncSession, entry_id: str) -> Entry | None:
    result = await db.execute(select(Entry).where(Entry.id == entry_id))
    return result.scalar_one_or_none()


async def get_owned_entry(db: AsyncSession, entry_id: str, user_id: str) -> Entry:
    """
    Single-row ownership check. A missing entry and someone else's entry
    are indistinguishable to the caller.
    """
    entry = await get_entry(db, entry_id)
    if entry is None or str(entry.user_id) != str(user_id):
        raise ForbiddenError()
    return entry


async def list_entries_for_user(db: AsyncSession, user_id: str) -> Sequence[Entry]:
    result = await db.execute(
        select(Entry).where(Entry.user_id == user_id).order_by(Entry.created_at.desc())
    )
    return result.scalars().all()


# Evidence


async def create_evidence(
    db: AsyncSession,
    entry_id: str,
    evidence_type: str,
    content: str,
    storage_path: str | None = None,
    original_filename: str | None = None,
    mime_type: str | None = None,
    size: int | None = None,
    transcript: str | None = None,
) -> Evidence:
    ev = Evidence(
        id=str(uuid4()),
        entry_id=entry_id,
        evidence_type=evidence_type,
        content=content,
        storage_path=storage_path,
        original_filename=original_filename,
        mime_type=mime_type,
        size=size,
        transcript=transcript,
    )
    db.add(ev)
    await db.flush()
    return ev


async def list_evidence(
    db: AsyncSession, entry_id: str, newest_first: bool = False
) -> Sequence[Evidence]:
    order = Evidence.created_at.desc() if newest_first else Evidence.created_at.asc()
    result = await db.execute(
        select(Evidence).where(Evidence.entry_id == entry_id).order_by(order)
    )
    return result.scalars().all()


async def get_evidence(db: AsyncSession, evidence_id: str) -> Evidence | None:
    result = await db.execute(select(Evidence).where(Evidence.id == evidence_id))
    return result.scalar_one_or_none()


async def get_file_evidence(db: AsyncSession, entry_id: str) -> Evidence | None:
    """The entry's current file evidence row, if any."""
    result = await db.execute(
        select(Evidence)
        .where(Evidence.entry_id == entry_id, Evidence.evidence_type == "file")
        .order_by(Evidence.created_at.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


# Assessment questions / answers


async def list_questions(db: AsyncSession, entry_id: str) -> Sequence[AssessmentQuestion]:
    result = await db.execute(
        select(AssessmentQuestion)
        .where(AssessmentQuestion.entry_id == entry_id)
        .order_by(AssessmentQuestion.question_number)
    )
    return result.scalars().all()


async def upsert_questions(db: AsyncSession, entry_id: str, texts: Sequence[str]) -> None:
    """Write questions 1..n, overwriting by question_number."""
    existing = {q.question_number: q for q in await list_questions(db, entry_id)}
    for number, text in enumerate(texts, start=1):
        row = existing.get(number)
        if row:
            row.question_text = text
        else:
            db.add(
                AssessmentQuestion(entry_id=entry_id, question_number=number, question_text=text)
            )
    await db.flush()


async def list_answers(db: AsyncSession, entry_id: str) -> Sequence[AssessmentAnswer]:
    result = await db.execute(
        select(AssessmentAnswer)
        .where(AssessmentAnswer.entry_id == entry_id)
        .order_by(AssessmentAnswer.question_number)
    )
    return result.scalars().all()


async def upsert_answers(db: AsyncSession, entry_id: str, answers: Mapping[int, str]) -> None:
    """Write answers keyed by question_number; resubmission overwrites."""
    existing = {a.question_number: a for a in await list_answers(db, entry_id)}
    for number, text in sorted(answers.items()):
        row = existing.get(number)
        if row:
            row.answer_text = text
        else:
            db.add(AssessmentAnswer(entry_id=entry_id, question_number=number, answer_text=text))
    await db.flush()


# Verifications


async def get_verification_by_public_id(
    db: AsyncSession, public_id: str
) -> Verification | None:
    result = await db.execute(select(Verification).where(Verification.public_id == public_id))
    return result.scalar_one_or_none()


async def public_id_exists(db: AsyncSession, public_id: str) -> bool:
    result = await db.execute(
        select(Verification.id).where(Verification.public_id == public_id).limit(1)
    )
    return result.first() is not None


async def create_verification(db: AsyncSession, **fields) -> Verification:
    """Create the public record. Records are never updated afterwards."""
    v = Verification(id=str(uuid4()), **fields)
    db.add(v)
    await db.flush()
    return v


# Timeline lookups (batched by entry id)


async def get_public_ids_for_entries(
    db: AsyncSession, entry_ids: Iterable[str]
) -> dict[str, str]:
    result = await db.execute(
        select(Verification.entry_id, Verification.public_id)
        .where(Verification.entry_id.in_(list(entry_ids)))
        .order_by(Verification.created_at.asc())
    )
    # Latest record wins
    return {str(entry_id): public_id for entry_id, public_id in result.all()}


async def get_entry_ids_with_questions(db: AsyncSession, entry_ids: Iterable[str]) -> set[str]:
    result = await db.execute(
        select(AssessmentQuestion.entry_id)
        .where(AssessmentQuestion.entry_id.in_(list(entry_ids)))
        .distinct()
    )
    return {str(row[0]) for row in result.all()}


async def get_first_evidence_for_entries(
    db: AsyncSession, entry_ids: Iterable[str]
) -> dict[str, Evidence]:
    result = await db.execute(
        select(Evidence)
        .where(Evidence.entry_id.in_(list(entry_ids)))
        .order_by(Evidence.created_at.asc())
    )
    first: dict[str, Evidence] = {}
    for ev in result.scalars().all():
        first.setdefault(str(ev.entry_id), ev)
    return first
