import uuid
from datetime import datetime
from sqlalchemy import String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, UUIDMixin, TimestampMixin

SCRAPE_STATUSES = ("idle", "scraping", "complete", "failed")


class Brand(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "brands"

    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    source_url: Mapped[str] = mapped_column(String(2048), nullable=False)
    name: Mapped[str | None] = mapped_column(Text)
    scrape_status: Mapped[str] = mapped_column(String(20), nullable=False, default="idle")
    scraped_content: Mapped[str | None] = mapped_column(Text)
    scraped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    scrape_error: Mapped[str | None] = mapped_column(Text)
    is_own_brand: Mapped[bool] = mapped_column(Boolean, default=False)

    user = relationship("User", back_populates="brands")
    analysis_runs = relationship("AnalysisRun", back_populates="brand", cascade="all, delete-orphan")
    generated_docs = relationship("GeneratedDoc", back_populates="brand", cascade="all, delete-orphan")
