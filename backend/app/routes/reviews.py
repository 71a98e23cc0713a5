"""
Annuaire Backend — Review Route Handlers
==========================================

POST /api/review                     store one review
GET  /api/reviews/{professional_id}  reviews of a professional, newest first
GET  /api/reviews                    no id in the path → 400

Review lists are never cached: a review posted a second ago must show up
on the next read.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import ValidationError
from app.schemas.common import ErrorResponse
from app.schemas.review import ReviewCreatedResponse, ReviewListResponse
from app.services.review_service import review_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Reviews"])

NO_STORE = "no-store, no-cache, must-revalidate, proxy-revalidate"


@router.post(
    "/review",
    response_model=ReviewCreatedResponse,
    status_code=status.HTTP_200_OK,
    responses={
        400: {"description": "Missing or invalid fields", "model": ErrorResponse},
        500: {"description": "Store failure", "model": ErrorResponse},
    },
    summary="Submit a review",
)
async def create_review(
    payload: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db_session),
) -> ReviewCreatedResponse:
    """
    Required: professionnelId, auteurNom, rating, message, title.
    Optional: dateCreation (ISO date or epoch ms).
    """
    return await review_service.create_review(db=db, payload=payload)


@router.get(
    "/reviews/{professional_id}",
    response_model=ReviewListResponse,
    responses={
        400: {"description": "Empty professional id", "model": ErrorResponse},
        500: {"description": "Store failure", "model": ErrorResponse},
    },
    summary="Reviews of one professional",
)
async def list_reviews(
    professional_id: str,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> ReviewListResponse:
    result = await review_service.list_reviews(db=db, professional_id=professional_id)
    response.headers["Cache-Control"] = NO_STORE
    return result


@router.get(
    "/reviews",
    responses={400: {"description": "Professional id missing", "model": ErrorResponse}},
    summary="Reviews without a professional id",
    include_in_schema=False,
)
async def list_reviews_without_id() -> None:
    raise ValidationError(
        message="Professional id is missing from the URL",
        field="professionalId",
    )
