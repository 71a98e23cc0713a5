"""
Annuaire Backend — Review Schemas
===================================

What:  Response models for review creation and listing.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.models.review import Review


class ReviewOut(BaseModel):
    """
    A review as seen by clients.

    Built with `from_record()` rather than `from_attributes` because legacy
    rows keep the professional id in `image`, and absent values are
    normalized to empty strings / 0 for the clients.
    """

    id: str = Field(alias="_id")
    professional_id: str = Field(default="", alias="professionalId")
    author_name: str = Field(default="", alias="auteurNom")
    rating: int = 0
    message: str = ""
    title: str = ""
    date_created: Optional[datetime] = Field(default=None, alias="dateCreation")
    date_created_formatted: Optional[str] = Field(default=None, alias="dateCreationFormatted")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_record(cls, review: Review) -> "ReviewOut":
        return cls(
            id=review.id,
            professional_id=review.professional_id or review.image or "",
            author_name=review.author_name or "",
            rating=review.rating or 0,
            message=review.message or "",
            title=review.title or "",
            date_created=review.date_created or None,
            date_created_formatted=review.date_created_formatted or None,
        )


class ReviewListResponse(BaseModel):
    """Returned by GET /api/reviews/{professional_id}, newest first."""

    reviews: List[ReviewOut]


class ReviewCreatedResponse(BaseModel):
    """Returned by POST /api/review."""

    success: bool = True
    id: str = Field(description="Identifier of the stored review")
    message: str = Field(default="Review saved successfully")
