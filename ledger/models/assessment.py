"""Assessment question and answer models - keyed by (entry_id, question_number)."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ledger.database import Base
from ledger.models.entry import utcnow


class AssessmentQuestion(Base):
    __tablename__ = "assessment_questions"
    __table_args__ = (
        UniqueConstraint("entry_id", "question_number", name="uq_questions_entry_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entry_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("entries.id"), nullable=False
    )
    question_number: Mapped[int] = mapped_column(Integer, nullable=False)  # 1-4
    question_text: Mapped[str] = mapped_column(Text, nullable=False)


class AssessmentAnswer(Base):
    """Stored for audit even when evaluation later fails."""

    __tablename__ = "assessment_answers"
    __table_args__ = (
        UniqueConstraint("entry_id", "question_number", name="uq_answers_entry_number"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entry_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("entries.id"), nullable=False
    )
    question_number: Mapped[int] = mapped_column(Integer, nullable=False)
    answer_text: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
