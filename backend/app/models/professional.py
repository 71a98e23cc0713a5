"""
Annuaire Backend — Professional SQLAlchemy Model
==================================================

What:  ORM model for the `professionals` table (directory listings).
Why:   Every endpoint reads or writes professionals: the listing, the scored
       search and the payment confirmation upsert.
How:   Portable column types only, so the same model runs on PostgreSQL
       (production) and SQLite (tests).

Table Design Notes:
    - id: string primary key (uuid4 text). Clients also send temporary ids
      prefixed with `temp_`; those never reach this column.
    - Free-text fields (category, sub_category, city, description, ...) are
      what the search heuristics scan; they are nullable because listings are
      created from partial signup forms.
    - Images are inline data URIs (profile + up to five gallery slots).
      They can be large, hence TEXT.
    - title is indexed: payment confirmation looks professionals up by
      business name.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Float, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

GALLERY_SLOTS = 5


def _new_id() -> str:
    return str(uuid.uuid4())


class Professional(Base):
    """
    A paid or free-tier business listing.

    Lifecycle:
        1. Created by payment confirmation (plan chosen, isActive=True)
        2. Re-activated / extended by later confirmations (plan, payment id,
           amount and expiry overwritten)
        3. Read by the listing and search endpoints
    """

    __tablename__ = "professionals"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=_new_id)

    # ── Listing ───────────────────────────────────────────────────────────
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    sub_category: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    speciality: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    subtitle: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ── Contact & Social ──────────────────────────────────────────────────
    phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    facebook: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    instagram: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    tiktok: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    youtube: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    whatsapp: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # ── Plan & Payment ────────────────────────────────────────────────────
    plan: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    sponsor: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    payment_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    amount_paid: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    expiry_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # ── Images (inline data URIs) ─────────────────────────────────────────
    image: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gallery_image_1: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gallery_image_2: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gallery_image_3: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gallery_image_4: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    gallery_image_5: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_professionals_title", "title"),
    )

    def set_gallery_image(self, slot: int, data_uri: str) -> None:
        """Stores a gallery image in slot 1..GALLERY_SLOTS."""
        if not 1 <= slot <= GALLERY_SLOTS:
            raise ValueError(f"Gallery slot must be between 1 and {GALLERY_SLOTS}")
        setattr(self, f"gallery_image_{slot}", data_uri)

    def __repr__(self) -> str:
        return (
            f"<Professional(id={self.id}, title='{self.title}', "
            f"plan='{self.plan}', active={self.is_active})>"
        )
