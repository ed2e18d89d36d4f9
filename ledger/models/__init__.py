"""Database models."""

from ledger.models.entry import Entry
from ledger.models.evidence import Evidence
from ledger.models.assessment import AssessmentAnswer, AssessmentQuestion
from ledger.models.verification import Verification

__all__ = ["Entry", "Evidence", "AssessmentQuestion", "AssessmentAnswer", "Verification"]
