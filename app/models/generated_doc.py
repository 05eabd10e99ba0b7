import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, UUIDMixin, TimestampMixin

DOC_STATUSES = ("generating", "complete", "error")


class GeneratedDoc(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "generated_docs"

    brand_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True
    )
    template_id: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[dict | None] = mapped_column(JSONB)
    content_markdown: Mapped[str | None] = mapped_column(Text)
    # Snapshot of the brand data used for generation; written once.
    source_data: Mapped[dict] = mapped_column(JSONB, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="generating")
    error_message: Mapped[str | None] = mapped_column(Text)

    google_doc_id: Mapped[str | None] = mapped_column(String(255))
    google_doc_url: Mapped[str | None] = mapped_column(String(500))
    google_exported_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    brand = relationship("Brand", back_populates="generated_docs")
