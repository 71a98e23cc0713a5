"""
Annuaire Backend — Directory Response Schemas
===============================================

What:  Pydantic models for the listing and search endpoints.
Why:   Python attributes use English snake_case; the wire format keeps the
       camelCase / French keys the mobile and web clients already consume
       (`_id`, `sousCategorie`, `ville`, `galerieImage1`, ...). Aliases bridge
       the two, and FastAPI serializes response models by alias.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.schemas.review import ReviewOut

_ORM = {"from_attributes": True, "populate_by_name": True}


class ProfessionalOut(BaseModel):
    """Full professional record as returned by /api/data and /api/search."""

    id: str = Field(alias="_id")
    title: Optional[str] = None
    email: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = Field(default=None, alias="sousCategorie")
    speciality: Optional[str] = None
    description: Optional[str] = None
    subtitle: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = Field(default=None, alias="ville")
    phone: Optional[str] = Field(default=None, alias="numroDeTlphone")
    website: Optional[str] = Field(default=None, alias="siteWeb")
    facebook: Optional[str] = Field(default=None, alias="lienFacebook")
    instagram: Optional[str] = Field(default=None, alias="lienInstagram")
    tiktok: Optional[str] = Field(default=None, alias="lienTiktok")
    youtube: Optional[str] = Field(default=None, alias="lienYoutube")
    whatsapp: Optional[str] = Field(default=None, alias="lienWhatsapp")
    plan: Optional[str] = None
    is_active: bool = Field(default=False, alias="isActive")
    sponsor: bool = False
    payment_id: Optional[str] = Field(default=None, alias="paymentId")
    amount_paid: float = Field(default=0.0, alias="amountPaid")
    expiry_date: Optional[datetime] = Field(default=None, alias="expiryDate")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    image: Optional[str] = None
    gallery_image_1: Optional[str] = Field(default=None, alias="galerieImage1")
    gallery_image_2: Optional[str] = Field(default=None, alias="galerieImage2")
    gallery_image_3: Optional[str] = Field(default=None, alias="galerieImage3")
    gallery_image_4: Optional[str] = Field(default=None, alias="galerieImage4")
    gallery_image_5: Optional[str] = Field(default=None, alias="galerieImage5")

    model_config = _ORM


class ScoredProfessionalOut(ProfessionalOut):
    """Search hit; `searchScore` is absent (null) when no search text was given."""

    search_score: Optional[float] = Field(default=None, alias="searchScore")


class SubCategoryOut(BaseModel):
    id: str = Field(alias="_id")
    title: str
    category: Optional[str] = None
    image: Optional[str] = None

    model_config = _ORM


class PartnerOut(BaseModel):
    id: str = Field(alias="_id")
    title: str
    description: Optional[str] = None
    website: Optional[str] = None
    image: Optional[str] = None

    model_config = _ORM


class PartnerOfferOut(BaseModel):
    id: str = Field(alias="_id")
    partner_id: Optional[str] = Field(default=None, alias="partnerId")
    title: str
    description: Optional[str] = None
    discount: Optional[str] = None
    image: Optional[str] = None

    model_config = _ORM


# ══════════════════════════════════════════════════════════════════════════
# Endpoint Responses
# ══════════════════════════════════════════════════════════════════════════


class DataStats(BaseModel):
    total_professionals: int = Field(alias="totalProfessionnels")
    filtered_professionals: int = Field(alias="filteredProfessionnels")
    search_query: str = Field(default="", alias="searchQuery")

    model_config = {"populate_by_name": True}


class DataResponse(BaseModel):
    """
    What:  Everything the directory home screen needs in one round trip.
    Who:   Returned by GET /api/data.

    Only `professionnels` is filtered; the auxiliary collections are the
    raw (capped) contents of their tables.
    """

    professionals: List[ProfessionalOut] = Field(alias="professionnels")
    sub_categories: List[SubCategoryOut] = Field(alias="sousCategories")
    reviews: List[ReviewOut]
    partners: List[PartnerOut] = Field(alias="partenaires")
    offers: List[PartnerOfferOut] = Field(alias="offres")
    search_stats: DataStats = Field(alias="searchStats")

    model_config = {"populate_by_name": True}


class SearchStats(BaseModel):
    total_found: int = Field(alias="totalFound")
    returned: int

    model_config = {"populate_by_name": True}


class SearchResponse(BaseModel):
    """Returned by GET /api/search, ordered by descending searchScore."""

    success: bool = True
    professionals: List[ScoredProfessionalOut] = Field(alias="professionnels")
    search_stats: SearchStats = Field(alias="searchStats")

    model_config = {"populate_by_name": True}

