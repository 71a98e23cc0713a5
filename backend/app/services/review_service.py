"""
Annuaire Backend — Review Service
===================================

What:  Review submission and per-professional review listing.
How:   Presence validation at the boundary, light normalization, one insert.

Validation rules (POST /api/review):
    Required: professionnelId, auteurNom, rating, message, title.
    A field is missing when absent, null, false, 0 or a blank string.
    Every missing field is reported at once, with the received body echoed.

Stored values:
    - strings trimmed
    - rating read as an integer prefix ("4", 4.7, "5 stars" → 4, 4, 5)
    - dateCreation: client ISO date or epoch ms, default now (UTC)
    - dateCreationFormatted: French long date for display ("05 août 2025")
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping

from sqlalchemy import desc, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import DatabaseError, MissingFieldsError, ValidationError
from app.models.review import Review
from app.schemas.review import ReviewCreatedResponse, ReviewListResponse, ReviewOut
from app.services.coercion import is_blank, parse_client_datetime, parse_int_prefix

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("professionnelId", "auteurNom", "rating", "message", "title")

FRENCH_MONTHS = (
    "janvier", "février", "mars", "avril", "mai", "juin",
    "juillet", "août", "septembre", "octobre", "novembre", "décembre",
)


def format_french_date(value: datetime) -> str:
    """Long French date with a two-digit day, e.g. "05 août 2025"."""
    return f"{value.day:02d} {FRENCH_MONTHS[value.month - 1]} {value.year}"


def missing_fields(payload: Mapping[str, Any]) -> List[str]:
    return [name for name in REQUIRED_FIELDS if is_blank(payload.get(name))]


class ReviewService:
    """
    Responsibilities:
        - create_review(): validate and insert one review
        - list_reviews(): reviews for one professional, newest first
    """

    async def create_review(
        self, db: AsyncSession, payload: Dict[str, Any]
    ) -> ReviewCreatedResponse:
        """
        Validate a review submission and store it.

        Raises:
            MissingFieldsError: required fields absent or empty (→ 400)
            ValidationError: rating or dateCreation unparseable (→ 400)
            DatabaseError: insert failed (→ 500, raw error in details)
        """
        missing = missing_fields(payload)
        if missing:
            logger.warning("Review rejected, missing fields: %s", ", ".join(missing))
            raise MissingFieldsError(missing=missing, received=payload)

        rating = parse_int_prefix(payload["rating"])
        if rating is None:
            raise ValidationError(
                message=f"Rating must be a number, got {payload['rating']!r}",
                field="rating",
            )

        raw_date = payload.get("dateCreation")
        if is_blank(raw_date):
            created = datetime.now(timezone.utc)
        else:
            created = parse_client_datetime(raw_date)
            if created is None:
                raise ValidationError(
                    message=f"dateCreation is not a valid date: {raw_date!r}",
                    field="dateCreation",
                )

        review = Review(
            title=str(payload["title"]).strip(),
            professional_id=str(payload["professionnelId"]).strip(),
            message=str(payload["message"]).strip(),
            rating=rating,
            author_name=str(payload["auteurNom"]).strip(),
            date_created=created,
            date_created_formatted=format_french_date(created),
        )

        try:
            db.add(review)
            await db.flush()
        except Exception as e:
            logger.error("Error saving review: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Error while saving the review",
                context={"details": str(e)},
            )

        logger.info(
            "Review %s saved for professional %s (rating=%d)",
            review.id,
            review.professional_id,
            rating,
        )
        return ReviewCreatedResponse(id=review.id)

    async def list_reviews(
        self, db: AsyncSession, professional_id: str
    ) -> ReviewListResponse:
        """
        Reviews for a professional, matching the current column or the
        legacy `image` column, newest first.

        Raises:
            ValidationError: empty id (→ 400)
            DatabaseError: query failed (→ 500)
        """
        professional_id = (professional_id or "").strip()
        if not professional_id:
            raise ValidationError(
                message="Professional id is missing from the URL",
                field="professionalId",
            )

        try:
            result = await db.execute(
                select(Review)
                .where(
                    or_(
                        Review.professional_id == professional_id,
                        Review.image == professional_id,
                    )
                )
                .order_by(desc(Review.date_created))
            )
            reviews = list(result.scalars().all())
        except Exception as e:
            logger.error("Error listing reviews for %s: %s", professional_id, str(e))
            raise DatabaseError(
                message="Could not retrieve reviews.",
                context={"details": str(e)},
            )

        return ReviewListResponse(reviews=[ReviewOut.from_record(r) for r in reviews])


review_service = ReviewService()
