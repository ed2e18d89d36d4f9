"""Verification record model - public, append-only."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ledger.database import Base
from ledger.models.entry import utcnow


class Verification(Base):
    """Denormalized snapshot of a Medium/High evaluation. Never updated."""

    __tablename__ = "verifications"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    entry_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("entries.id"), nullable=False, index=True
    )
    public_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    domain: Mapped[str] = mapped_column(Text, nullable=False)
    capability_summary: Mapped[str] = mapped_column(Text, nullable=False)
    confidence_band: Mapped[str] = mapped_column(String(10), nullable=False)
    intent_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
    evidence_summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    layer1_descriptor: Mapped[str | None] = mapped_column(String(20), nullable=True)
    layer2_descriptor: Mapped[str | None] = mapped_column(String(20), nullable=True)
    layer3_descriptor: Mapped[str | None] = mapped_column(String(20), nullable=True)
    layer4_descriptor: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
