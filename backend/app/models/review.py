"""
Annuaire Backend — Review SQLAlchemy Model
============================================

What:  ORM model for the `reviews` table.

Legacy column:
    Early records stored the professional id in `image` instead of
    `professional_id`. Review lookups match either column, so the column is
    kept (read-only in practice; new reviews never set it).
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class Review(Base):
    """A customer review attached to a professional."""

    __tablename__ = "reviews"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    professional_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    author_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Machine date plus the French display string computed at insert time
    date_created: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=lambda: datetime.now(timezone.utc),
    )
    date_created_formatted: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    __table_args__ = (
        Index("idx_reviews_professional_id", "professional_id"),
        Index("idx_reviews_date_created", date_created.desc()),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, professional_id={self.professional_id}, rating={self.rating})>"
