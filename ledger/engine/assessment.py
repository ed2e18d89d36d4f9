"""Prompt building and AI output validation for the assessment stages."""

import logging
from collections.abc import Mapping, Sequence
from typing import TypeVar

import pydantic
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.errors import AIValidationError, DatabaseError
from ledger.models import AssessmentQuestion, Entry, Evidence
from ledger.storage.repositories import public_id_exists
from ledger.utils.hashing import derive_public_id

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=pydantic.BaseModel)

STATUS_RECORDED = "Recorded only"
STATUS_UNDER_REVIEW = "Under review"
STATUS_REVIEWED = "Reviewed"
STATUS_LINK_AVAILABLE = "Reviewed – link available"

TIMELINE_SUMMARY_CHARS = 80
PUBLIC_ID_ATTEMPTS = 3


def evidence_excerpt(ev: Evidence, limit: int) -> str:
    """'{type}: {text}' with the text (plus any transcript) cut to limit chars."""
    text = ev.content or ""
    if ev.transcript:
        text = f"{text}\nTranscript: {ev.transcript}"
    return f"{ev.evidence_type}: {text[:limit]}"


def build_evidence_summary(evidence: Sequence[Evidence], limit: int) -> str:
    return "\n\n".join(evidence_excerpt(ev, limit) for ev in evidence)


def build_classification_prompt(evidence_summary: str) -> str:
    return f"Evidence to analyze:\n\n{evidence_summary}"


def build_questions_prompt(evidence_summary: str, domain: str, intent: str | None) -> str:
    return (
        f"Learning evidence:\n{evidence_summary}\n\n"
        f"Primary domain: {domain}\n"
        f"Intent: {intent or 'Not provided'}"
    )


def build_evaluation_prompt(
    evidence_summary: str,
    domain: str | None,
    questions: Sequence[AssessmentQuestion],
    answers: Mapping[int, str],
) -> str:
    by_number = {q.question_number: q.question_text for q in questions}
    qa_pairs = "\n\n".join(
        f"Question {n}: {by_number.get(n, 'Unknown')}\nAnswer: {answers[n]}"
        for n in sorted(answers)
    )
    return (
        f"Original evidence:\n{evidence_summary or 'No evidence'}\n\n"
        f"Domain: {domain or 'Unknown'}\n\n"
        f"Questions and answers:\n{qa_pairs}"
    )


def validate_ai_output(model: type[M], data: dict, what: str) -> M:
    """Valid JSON that does not match the expected shape is a validation failure."""
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as err:
        first = err.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        raise AIValidationError(
            f"AI did not return a valid {what}: {field or 'response'} {first.get('msg', '')}".strip()
        ) from err


def is_classified(entry: Entry) -> bool:
    return bool(entry.domain) and entry.eligibility is not None


def entry_status(has_public_id: bool, confidence_band: str | None, has_questions: bool) -> str:
    """Derived timeline status, most advanced stage first."""
    if has_public_id:
        return STATUS_LINK_AVAILABLE
    if confidence_band:
        return STATUS_REVIEWED
    if has_questions:
        return STATUS_UNDER_REVIEW
    return STATUS_RECORDED


def short_evidence_summary(ev: Evidence | None, fallback: str | None) -> str:
    """Short, single-line description for the timeline and verification records."""
    if ev is not None and ev.evidence_type == "file" and ev.original_filename:
        raw = f"File: {ev.original_filename}"
    elif ev is not None and ev.content:
        raw = ev.content
    else:
        raw = fallback or ""
    if len(raw) > TIMELINE_SUMMARY_CHARS:
        raw = raw[:TIMELINE_SUMMARY_CHARS] + "…"
    return raw or "No evidence yet"


async def allocate_public_id(db: AsyncSession, entry_id: str) -> str:
    """
    Derive a public id from entry id + current time, re-deriving if it is
    already taken. The unique index on verifications.public_id still applies.
    """
    for _ in range(PUBLIC_ID_ATTEMPTS):
        candidate = derive_public_id(entry_id)
        if not await public_id_exists(db, candidate):
            return candidate
        logger.warning("Public id collision for entry %s, re-deriving", entry_id)
    raise DatabaseError("Could not allocate a unique public id")
