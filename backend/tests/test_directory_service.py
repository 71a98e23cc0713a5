"""
Annuaire Backend — Directory Service Tests
============================================

Runs against the SQLite test database (see conftest); each test seeds its
own rows.
"""

from unittest.mock import patch

import pytest

from app.exceptions import DatabaseError, ValidationError
from app.models.catalog import Partner, PartnerOffer, SubCategory
from app.services.directory_service import DirectoryService


@pytest.fixture
def service():
    return DirectoryService()


@pytest.fixture
def directory(make_professional):
    return [
        make_professional(id="pro-photo"),
        make_professional(
            id="pro-plumb",
            title="Plomberie Gagnon",
            category="Bâtiment",
            sub_category="Plomberie",
            speciality="Chauffe-eau",
            description="Réparations et installations",
            address="3 boulevard Laurier",
            city="Québec",
        ),
        make_professional(
            id="pro-spa",
            title="Spa Massage Zen",
            category="Bien-être",
            sub_category="Massage",
            speciality=None,
            description="Massage suédois et soins",
            address="8 avenue du Parc",
            city="Montréal",
        ),
    ]


class TestGetData:

    @pytest.mark.asyncio
    async def test_returns_all_collections(self, service, seed, directory, make_review):
        await seed(
            *directory,
            make_review(),
            SubCategory(title="Mariage", category="Photographie"),
            Partner(title="Banque Locale"),
            PartnerOffer(partner_id="p-1", title="-10% sur les frais", discount="10%"),
        )

        result = await service.get_data()

        assert len(result.professionals) == 3
        assert len(result.sub_categories) == 1
        assert len(result.reviews) == 1
        assert len(result.partners) == 1
        assert result.offers[0].partner_id == "p-1"
        assert result.search_stats.total_professionals == 3
        assert result.search_stats.filtered_professionals == 3
        assert result.search_stats.search_query == ""

    @pytest.mark.asyncio
    async def test_search_filters_professionals_only(self, service, seed, directory):
        await seed(*directory, SubCategory(title="Mariage"))

        result = await service.get_data(search="massage")

        assert [p.id for p in result.professionals] == ["pro-spa"]
        assert len(result.sub_categories) == 1
        assert result.search_stats.total_professionals == 3
        assert result.search_stats.filtered_professionals == 1
        assert result.search_stats.search_query == "massage"

    @pytest.mark.asyncio
    async def test_category_and_city_filters(self, service, seed, directory):
        await seed(*directory)

        by_category = await service.get_data(category="plomberie")
        by_city = await service.get_data(city="montréal")

        assert [p.id for p in by_category.professionals] == ["pro-plumb"]
        assert {p.id for p in by_city.professionals} == {"pro-photo", "pro-spa"}

    @pytest.mark.asyncio
    async def test_store_failure_is_wrapped(self, service):
        with patch.object(DirectoryService, "_fetch_all", side_effect=RuntimeError("disk I/O error")):
            with pytest.raises(DatabaseError) as exc_info:
                await service.get_data()

        assert exc_info.value.context["details"] == "disk I/O error"


class TestSearchProfessionals:

    @pytest.mark.asyncio
    async def test_requires_a_criterion(self, service, db_schema):
        with pytest.raises(ValidationError):
            await service.search_professionals()

    @pytest.mark.asyncio
    async def test_results_are_scored_and_sorted(self, service, seed, directory):
        await seed(*directory)

        result = await service.search_professionals(search="massage")

        assert result.success is True
        assert [p.id for p in result.professionals] == ["pro-spa"]
        # title word 90×2 + sub-category exact 100×1.5 + description word 90×0.5
        assert result.professionals[0].search_score == pytest.approx(180 + 150 + 45)
        assert result.search_stats.total_found == 1
        assert result.search_stats.returned == 1

    @pytest.mark.asyncio
    async def test_better_title_match_ranks_first(self, service, seed, make_professional):
        await seed(
            make_professional(id="a", title="Atelier Photo", category="Art", sub_category=None,
                              speciality=None, description=None),
            make_professional(id="b", title="Photo", category="Art", sub_category=None,
                              speciality=None, description=None),
        )

        result = await service.search_professionals(search="photo")

        assert [p.id for p in result.professionals] == ["b", "a"]

    @pytest.mark.asyncio
    async def test_category_only_has_no_score(self, service, seed, directory):
        await seed(*directory)

        result = await service.search_professionals(category="Bien-être")

        assert [p.id for p in result.professionals] == ["pro-spa"]
        assert result.professionals[0].search_score is None

    @pytest.mark.asyncio
    async def test_filters_apply_after_scoring(self, service, seed, directory):
        await seed(*directory)

        result = await service.search_professionals(search="massage", city="québec")

        assert result.search_stats.total_found == 0
        assert result.professionals == []

    @pytest.mark.asyncio
    async def test_limit_reads_integer_prefix(self, service, seed, directory):
        await seed(*directory)

        result = await service.search_professionals(city="a", limit="1abc")

        assert result.search_stats.returned == 1
        assert result.search_stats.total_found == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [None, "", "abc", "0", "-4"])
    async def test_bad_limit_falls_back_to_default(self, service, seed, directory, limit):
        await seed(*directory)

        result = await service.search_professionals(city="a", limit=limit)

        assert result.search_stats.returned == 3
