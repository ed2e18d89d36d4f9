"""Evidence model."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ledger.database import Base
from ledger.models.entry import utcnow


class Evidence(Base):
    """Evidence attached to an entry - text, link or file."""

    __tablename__ = "evidence"

    id: Mapped[str] = mapped_column(Uuid(as_uuid=False), primary_key=True)
    entry_id: Mapped[str] = mapped_column(
        Uuid(as_uuid=False), ForeignKey("entries.id"), nullable=False, index=True
    )
    evidence_type: Mapped[str] = mapped_column(String(10), nullable=False)  # text|link|file
    content: Mapped[str] = mapped_column(Text, nullable=False)
    storage_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    original_filename: Mapped[str | None] = mapped_column(Text, nullable=True)
    mime_type: Mapped[str | None] = mapped_column(String(255), nullable=True)
    size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    transcript: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
