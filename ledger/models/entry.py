"""Entry model."""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ledger.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Entry(Base):
    """One learner-submitted unit of work under assessment."""

    __tablename__ = "entries"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    user_id: Mapped[str] = mapped_column(Uuid(as_uuid=False), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    intent_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    # Set by classification
    domain: Mapped[str | None] = mapped_column(Text, nullable=True)
    eligibility: Mapped[str | None] = mapped_column(Text, nullable=True)  # eligible|ineligible
    # Set by evaluation
    capability_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    confidence_band: Mapped[str | None] = mapped_column(Text, nullable=True)  # Low|Medium|High
