from datetime import datetime
from sqlalchemy import String, Boolean, LargeBinary, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, UUIDMixin, TimestampMixin


class User(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(100))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False)

    # Google Docs integration (refresh token is Fernet-encrypted)
    google_refresh_token: Mapped[bytes | None] = mapped_column(LargeBinary)
    google_email: Mapped[str | None] = mapped_column(String(255))
    google_connected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    brands = relationship("Brand", back_populates="user", cascade="all, delete-orphan")
