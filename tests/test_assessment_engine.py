"""Unit tests for prompt building, status derivation and AI output validation."""

import pytest

from ledger.engine.assessment import (
    STATUS_LINK_AVAILABLE,
    STATUS_RECORDED,
    STATUS_REVIEWED,
    STATUS_UNDER_REVIEW,
    build_evaluation_prompt,
    build_evidence_summary,
    build_questions_prompt,
    entry_status,
    is_classified,
    short_evidence_summary,
    validate_ai_output,
)
from ledger.errors import AIValidationError
from ledger.models import AssessmentQuestion, Entry, Evidence
from ledger.schemas.assessment import AnswerEvaluation, QuestionGeneration


def _ev(evidence_type, content, **kw):
    return Evidence(evidence_type=evidence_type, content=content, **kw)


def test_evidence_summary_truncates_each_item():
    """Each item is cut to the budget before joining."""
    evidence = [_ev("text", "a" * 20), _ev("link", "https://example.com")]
    summary = build_evidence_summary(evidence, 10)
    assert summary == "text: " + "a" * 10 + "\n\nlink: https://ex"


def test_evidence_summary_includes_transcript():
    """Transcripts are appended to their link item."""
    ev = _ev("link", "https://youtu.be/abc", transcript="we talk about margins")
    summary = build_evidence_summary([ev], 500)
    assert "Transcript: we talk about margins" in summary


def test_questions_prompt_defaults_intent():
    """Missing intent is rendered as not provided."""
    prompt = build_questions_prompt("text: x", "Finance", None)
    assert "Primary domain: Finance" in prompt
    assert "Intent: Not provided" in prompt


def test_evaluation_prompt_pairs_questions_and_answers():
    """Questions and answers are paired in number order."""
    questions = [
        AssessmentQuestion(question_number=n, question_text=f"Q{n}?") for n in (1, 2, 3, 4)
    ]
    answers = {2: "two", 1: "one", 4: "four", 3: "three"}
    prompt = build_evaluation_prompt("text: x", None, questions, answers)
    assert "Domain: Unknown" in prompt
    assert prompt.index("Question 1: Q1?\nAnswer: one") < prompt.index("Question 4: Q4?\nAnswer: four")


def test_entry_status_progression():
    """Status reflects the most advanced stage."""
    assert entry_status(False, None, False) == STATUS_RECORDED
    assert entry_status(False, None, True) == STATUS_UNDER_REVIEW
    assert entry_status(False, "Low", True) == STATUS_REVIEWED
    assert entry_status(True, "High", True) == STATUS_LINK_AVAILABLE


def test_short_summary():
    """Short summary prefers file names and truncates at 80 chars."""
    assert short_evidence_summary(None, None) == "No evidence yet"
    assert short_evidence_summary(None, "My title") == "My title"
    f = _ev("file", "report.pdf", original_filename="report.pdf")
    assert short_evidence_summary(f, "t") == "File: report.pdf"
    long = short_evidence_summary(_ev("text", "x" * 100), "t")
    assert long == "x" * 80 + "…"


def test_is_classified():
    """Classification needs a domain and an eligibility."""
    assert not is_classified(Entry(title="t"))
    assert not is_classified(Entry(title="t", domain="Finance"))
    assert is_classified(Entry(title="t", domain="Finance", eligibility="ineligible"))


def test_validate_missing_question():
    """Missing q4 is a validation error."""
    with pytest.raises(AIValidationError):
        validate_ai_output(QuestionGeneration, {"q1": "a", "q2": "b", "q3": "c"}, "questions")


def test_validate_blank_question():
    """Blank questions are a validation error."""
    with pytest.raises(AIValidationError):
        validate_ai_output(QuestionGeneration, {"q1": "a", "q2": "b", "q3": "c", "q4": "  "}, "questions")


def test_validate_bad_band():
    """Bands outside Low/Medium/High are rejected."""
    data = {
        "capability_summary": "s",
        "confidence_band": "Very high",
        "rationale": "r",
        "layer1_descriptor": "Strong",
        "layer2_descriptor": "Strong",
        "layer3_descriptor": "Strong",
        "layer4_descriptor": "Strong",
    }
    with pytest.raises(AIValidationError):
        validate_ai_output(AnswerEvaluation, data, "evaluation")
    data["confidence_band"] = "High"
    assert validate_ai_output(AnswerEvaluation, data, "evaluation").confidence_band == "High"
