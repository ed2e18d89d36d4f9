"""AI assessment endpoints - classify evidence, generate questions, evaluate answers."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.api.deps import ModelClientDep, SettingsDep
from ledger.auth.middleware import UserIdDep
from ledger.database import get_db
from ledger.engine.ai import call_ai_with_strict_json
from ledger.engine.assessment import (
    allocate_public_id,
    build_classification_prompt,
    build_evaluation_prompt,
    build_evidence_summary,
    build_questions_prompt,
    is_classified,
    short_evidence_summary,
    validate_ai_output,
)
from ledger.errors import NotFoundError, PreconditionFailedError
from ledger.schemas.assessment import (
    VERIFIABLE_BANDS,
    AnalyzeEvidenceResponse,
    AnswerEvaluation,
    DomainClassification,
    EntryRef,
    EvaluateAnswersRequest,
    EvaluateAnswersResponse,
    GenerateQuestionsResponse,
    QuestionGeneration,
)
from ledger.storage import repositories as repo

logger = logging.getLogger(__name__)

router = APIRouter()

CLASSIFIER_PROMPT = "domain_classifier.txt"
QUESTIONS_PROMPT = "question_generator.txt"
EVALUATOR_PROMPT = "answer_evaluator.txt"


@router.post("/ai/analyze", response_model=AnalyzeEvidenceResponse)
async def analyze_evidence(
    body: EntryRef,
    user_id: UserIdDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    model: ModelClientDep,
    settings: SettingsDep,
):
    """Classify the entry's evidence (domain, complexity, eligibility)."""
    entry_id = str(body.entry_id)
    entry = await repo.get_owned_entry(db, entry_id, user_id)

    evidence = await repo.list_evidence(db, entry_id)
    if not evidence:
        raise NotFoundError("No evidence found for this entry")

    summary = build_evidence_summary(evidence, settings.evidence_excerpt_chars)
    data = await call_ai_with_strict_json(
        model, CLASSIFIER_PROMPT, build_classification_prompt(summary)
    )
    classification = validate_ai_output(DomainClassification, data, "classification")

    entry.domain = classification.primary_domain
    entry.eligibility = "eligible" if classification.eligible else "ineligible"
    await db.flush()
    logger.info("Entry %s classified as %s", entry_id, classification.primary_domain)
    return classification


@router.post("/ai/questions", response_model=GenerateQuestionsResponse)
async def generate_questions(
    body: EntryRef,
    user_id: UserIdDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    model: ModelClientDep,
    settings: SettingsDep,
):
    """Generate the four assessment questions. Requires a classified entry."""
    entry_id = str(body.entry_id)
    entry = await repo.get_owned_entry(db, entry_id, user_id)
    if not is_classified(entry):
        raise PreconditionFailedError("Entry must be analyzed before generating questions")

    evidence = await repo.list_evidence(db, entry_id)
    if not evidence:
        raise NotFoundError("No evidence found for this entry")

    summary = build_evidence_summary(evidence, settings.evidence_excerpt_chars)
    data = await call_ai_with_strict_json(
        model, QUESTIONS_PROMPT, build_questions_prompt(summary, entry.domain, entry.intent_prompt)
    )
    questions = validate_ai_output(QuestionGeneration, data, "set of 4 questions")

    await repo.upsert_questions(db, entry_id, questions.ordered())
    return questions


@router.post(
    "/ai/evaluate", response_model=EvaluateAnswersResponse, response_model_exclude_none=True
)
async def evaluate_answers(
    body: EvaluateAnswersRequest,
    user_id: UserIdDep,
    db: Annotated[AsyncSession, Depends(get_db)],
    model: ModelClientDep,
    settings: SettingsDep,
):
    """
    Evaluate four answers. Answers are committed before the model is called so
    a failed evaluation keeps them. Medium/High outcomes get a public record.
    """
    entry_id = str(body.entry_id)
    entry = await repo.get_owned_entry(db, entry_id, user_id)

    questions = await repo.list_questions(db, entry_id)
    if len(questions) != 4:
        raise NotFoundError("Assessment questions not found")

    answers = {a.question_number: a.answer for a in body.answers}
    await repo.upsert_answers(db, entry_id, answers)
    await db.commit()

    evidence = await repo.list_evidence(db, entry_id)
    summary = build_evidence_summary(evidence, settings.evidence_excerpt_chars)
    data = await call_ai_with_strict_json(
        model,
        EVALUATOR_PROMPT,
        build_evaluation_prompt(summary, entry.domain, questions, answers),
    )
    evaluation = validate_ai_output(AnswerEvaluation, data, "evaluation")

    entry.capability_summary = evaluation.capability_summary
    entry.confidence_band = evaluation.confidence_band
    await db.flush()

    response = EvaluateAnswersResponse(**evaluation.model_dump())
    if evaluation.confidence_band in VERIFIABLE_BANDS:
        public_id = await allocate_public_id(db, entry_id)
        verification = await repo.create_verification(
            db,
            entry_id=entry_id,
            public_id=public_id,
            domain=entry.domain or "Unknown",
            capability_summary=evaluation.capability_summary,
            confidence_band=evaluation.confidence_band,
            intent_prompt=entry.intent_prompt,
            evidence_summary=short_evidence_summary(evidence[0] if evidence else None, entry.title),
            layer1_descriptor=evaluation.layer1_descriptor,
            layer2_descriptor=evaluation.layer2_descriptor,
            layer3_descriptor=evaluation.layer3_descriptor,
            layer4_descriptor=evaluation.layer4_descriptor,
        )
        response.verification_id = str(verification.id)
        response.public_id = public_id
        logger.info("Verification %s created for entry %s", public_id, entry_id)
    return response
