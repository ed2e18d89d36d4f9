"""Assessment stage schemas - API requests/responses and expected AI output shapes."""

from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

ConfidenceBand = Literal["Low", "Medium", "High"]
LayerDescriptor = Literal["Strong", "Adequate", "Needs work"]

VERIFIABLE_BANDS = ("Medium", "High")


class EntryRef(BaseModel):
    """Body for analyze / questions."""

    entry_id: UUID


class AnswerItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_number: int = Field(alias="questionNumber", ge=1, le=4)
    answer: str = Field(min_length=1)


class EvaluateAnswersRequest(BaseModel):
    """POST /api/ai/evaluate request - exactly four answers, one per question."""

    entry_id: UUID
    answers: list[AnswerItem] = Field(min_length=4, max_length=4)

    @model_validator(mode="after")
    def distinct_question_numbers(self) -> "EvaluateAnswersRequest":
        numbers = {a.question_number for a in self.answers}
        if numbers != {1, 2, 3, 4}:
            raise ValueError("answers must cover questions 1-4 exactly once")
        return self


# AI output shapes


class DomainClassification(BaseModel):
    primary_domain: NonEmptyStr
    secondary_domain: str | None = None
    complexity_level: Literal["Beginner", "Intermediate", "Advanced"]
    eligible: bool
    eligibility_reason: str
    key_topics: list[str]
    evaluator_lens: str


class QuestionGeneration(BaseModel):
    q1: NonEmptyStr
    q2: NonEmptyStr
    q3: NonEmptyStr
    q4: NonEmptyStr

    def ordered(self) -> list[str]:
        return [self.q1, self.q2, self.q3, self.q4]


class AnswerEvaluation(BaseModel):
    capability_summary: NonEmptyStr
    confidence_band: ConfidenceBand
    rationale: str
    layer1_descriptor: LayerDescriptor
    layer2_descriptor: LayerDescriptor
    layer3_descriptor: LayerDescriptor
    layer4_descriptor: LayerDescriptor


# API responses

AnalyzeEvidenceResponse = DomainClassification
GenerateQuestionsResponse = QuestionGeneration


class EvaluateAnswersResponse(AnswerEvaluation):
    verification_id: str | None = None
    public_id: str | None = None
