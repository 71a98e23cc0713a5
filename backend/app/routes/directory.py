"""
Annuaire Backend — Directory Route Handlers
=============================================

GET /api/data    Home payload: professionals (optionally filtered) plus
                 sub-categories, reviews, partners and partner offers.
GET /api/search  Weighted relevance search over professionals.

Query parameters are plain strings. `limit` is read leniently by the
service ("25abc" → 25), so it is not typed as an int here.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query

from app.schemas.common import ErrorResponse
from app.schemas.professional import DataResponse, SearchResponse
from app.services.directory_service import directory_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Directory"])


@router.get(
    "/data",
    response_model=DataResponse,
    responses={500: {"description": "Store failure", "model": ErrorResponse}},
    summary="Directory listing",
)
async def get_data(
    search: str = Query(default="", description="Free text over names, categories, description, address"),
    category: str = Query(default="", description="Exact category or sub-category (case-insensitive)"),
    city: str = Query(default="", description="Substring of city or address"),
) -> DataResponse:
    return await directory_service.get_data(search=search, category=category, city=city)


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={
        400: {"description": "No search criterion", "model": ErrorResponse},
        500: {"description": "Store failure", "model": ErrorResponse},
    },
    summary="Scored professional search",
    description=(
        "At least one of search, category or city is required. Results with "
        "search text are sorted by descending searchScore."
    ),
)
async def search_professionals(
    search: str = Query(default=""),
    category: str = Query(default=""),
    city: str = Query(default=""),
    limit: Optional[str] = Query(default=None, description="Page size, default 100"),
) -> SearchResponse:
    return await directory_service.search_professionals(
        search=search,
        category=category,
        city=city,
        limit=limit,
    )
