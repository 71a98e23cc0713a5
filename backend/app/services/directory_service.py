"""
Annuaire Backend — Directory Service (Listing & Search)
=========================================================

What:  Builds the directory listing and the scored professional search.
How:   Pulls bounded collections into memory, then filters / scores / sorts
       them with the pure helpers in `matching`.

Listing flow (GET /api/data):
    ┌─────────────┐
    │ professionals│──┐
    │ sub_categories│─┤
    │ reviews      │──┼──▶ asyncio.gather ──▶ filter professionals ──▶ DataResponse
    │ partners     │──┤
    │ partner_offers│─┘
    └─────────────┘
    The five reads are independent, so each runs on its own short-lived
    session and they are awaited jointly.

Search flow (GET /api/search):
    professionals ──▶ rank by weighted score ──▶ category filter
                  ──▶ city filter ──▶ truncate to limit
"""

import asyncio
import logging
from typing import Any, List, Optional, Type

from sqlalchemy import select

from app.config import settings
from app.database import read_session
from app.exceptions import DatabaseError, ValidationError
from app.models.catalog import Partner, PartnerOffer, SubCategory
from app.models.professional import Professional
from app.models.review import Review
from app.schemas.professional import (
    DataResponse,
    DataStats,
    PartnerOfferOut,
    PartnerOut,
    ProfessionalOut,
    ScoredProfessionalOut,
    SearchResponse,
    SearchStats,
    SubCategoryOut,
)
from app.schemas.review import ReviewOut
from app.services import matching
from app.services.coercion import parse_int_prefix

logger = logging.getLogger(__name__)


class DirectoryService:
    """
    Stateless read-side service for the directory.

    Responsibilities:
        - get_data(): listing with optional search / category / city filters
        - search_professionals(): weighted relevance search
    """

    async def _fetch_all(self, model: Type[Any]) -> List[Any]:
        """Reads up to `query_limit` rows of one table on a dedicated session."""
        async with read_session() as session:
            result = await session.execute(select(model).limit(settings.query_limit))
            return list(result.scalars().all())

    async def get_data(
        self,
        search: str = "",
        category: str = "",
        city: str = "",
    ) -> DataResponse:
        """
        Directory home payload: filtered professionals plus auxiliary collections.

        Raises:
            DatabaseError: any of the five reads failed (→ 500, raw error in details)
        """
        try:
            professionals, sub_categories, reviews, partners, offers = await asyncio.gather(
                self._fetch_all(Professional),
                self._fetch_all(SubCategory),
                self._fetch_all(Review),
                self._fetch_all(Partner),
                self._fetch_all(PartnerOffer),
            )
        except Exception as e:
            logger.error("Error loading directory data: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not load directory data.",
                context={"details": str(e)},
            )

        filtered = matching.filter_listing(professionals, search, category, city)
        logger.info(
            "Directory listing: %d/%d professionals (search=%r, category=%r, city=%r)",
            len(filtered),
            len(professionals),
            search,
            category,
            city,
        )

        return DataResponse(
            professionals=[ProfessionalOut.model_validate(p) for p in filtered],
            sub_categories=[SubCategoryOut.model_validate(s) for s in sub_categories],
            reviews=[ReviewOut.from_record(r) for r in reviews],
            partners=[PartnerOut.model_validate(p) for p in partners],
            offers=[PartnerOfferOut.model_validate(o) for o in offers],
            search_stats=DataStats(
                total_professionals=len(professionals),
                filtered_professionals=len(filtered),
                search_query=search,
            ),
        )

    async def search_professionals(
        self,
        search: str = "",
        category: str = "",
        city: str = "",
        limit: Optional[Any] = None,
    ) -> SearchResponse:
        """
        Scored search over professionals.

        Args:
            search:   free text, scored against title / categories / speciality / description
            category: exact (case-insensitive) category or sub-category
            city:     substring of city or address
            limit:    page size; read like an integer prefix, default when
                      missing, unparseable or not positive

        Raises:
            ValidationError: no criterion at all (→ 400)
            DatabaseError: the read failed (→ 500)
        """
        if not (search or category or city):
            raise ValidationError(
                message="At least one search criterion is required (search, category or city)",
            )

        page_size = parse_int_prefix(limit)
        if not page_size or page_size < 0:
            page_size = settings.search_default_limit

        try:
            professionals = await self._fetch_all(Professional)
        except Exception as e:
            logger.error("Error loading professionals for search: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not search professionals.",
                context={"details": str(e)},
            )

        if matching.normalize_query(search):
            candidates = matching.rank(professionals, search)
        else:
            candidates = [(professional, None) for professional in professionals]

        if category:
            candidates = [c for c in candidates if matching.matches_category(c[0], category)]
        if city:
            candidates = [c for c in candidates if matching.matches_city(c[0], city)]

        page = candidates[:page_size]
        items = []
        for professional, score in page:
            item = ScoredProfessionalOut.model_validate(professional)
            item.search_score = score
            items.append(item)

        return SearchResponse(
            professionals=items,
            search_stats=SearchStats(total_found=len(candidates), returned=len(page)),
        )


directory_service = DirectoryService()
