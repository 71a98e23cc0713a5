"""
Annuaire Backend — Matching & Scoring Unit Tests
==================================================

Pure functions, exercised on SimpleNamespace stand-ins (no database).
"""

from types import SimpleNamespace

import pytest

from app.services import matching


def pro(**fields):
    base = {
        "title": None,
        "category": None,
        "sub_category": None,
        "speciality": None,
        "description": None,
        "address": None,
        "city": None,
    }
    base.update(fields)
    return SimpleNamespace(**base)


class TestScoreField:

    @pytest.mark.parametrize(
        "text, query, expected",
        [
            ("Plomberie", "plomberie", 100),
            ("Plombier Expert", "plombier", 90),
            ("Plombier Expert", "plomb", 80),
            ("Studio Lumière", "studio lum", 70),
            ("Photographie", "graph", 50),
            ("Photographie", "coiffure", 0),
        ],
    )
    def test_first_applicable_rule_wins(self, text, query, expected):
        assert matching.score_field(text, query) == expected

    def test_case_insensitive_and_trimmed(self):
        assert matching.score_field("PLOMBIER", "  Plombier  ") == 100

    def test_empty_text_never_matches(self):
        assert matching.score_field(None, "spa") == 0
        assert matching.score_field("", "spa") == 0


class TestSmartMatch:

    def test_word_prefix(self):
        assert matching.smart_match("Atelier de couture", "cout")

    def test_substring(self):
        assert matching.smart_match("Photographie", "tograph")

    def test_no_match(self):
        assert not matching.smart_match("Photographie", "coiffure")

    def test_none_text(self):
        assert not matching.smart_match(None, "spa")


class TestScoreProfessional:

    def test_weights_are_applied_per_field(self):
        p = pro(title="Spa Zen", category="Spa", description="spa de luxe")
        # title word 90×2 + category exact 100×1.5 + description word 90×0.5
        assert matching.score_professional(p, "spa") == pytest.approx(375.0)

    def test_title_counts_double(self):
        p = pro(title="Plombier")
        assert matching.score_professional(p, "plombier") == pytest.approx(200.0)

    def test_no_matching_field_returns_none(self):
        p = pro(title="Plombier", category="Bâtiment")
        assert matching.score_professional(p, "coiffure") is None

    def test_address_is_not_scored(self):
        p = pro(title="Plombier", address="12 rue du Spa")
        assert matching.score_professional(p, "spa") is None


class TestRank:

    def test_sorted_by_descending_score(self):
        weak = pro(title="Maison", description="massage suédois")
        strong = pro(title="Massage Santé")
        ranked = matching.rank([weak, strong], "massage")
        assert [p for p, _ in ranked] == [strong, weak]
        assert ranked[0][1] > ranked[1][1]

    def test_ties_keep_store_order(self):
        first = pro(title="Yoga Centre")
        second = pro(title="Yoga Studio")
        ranked = matching.rank([first, second], "yoga")
        assert [p for p, _ in ranked] == [first, second]

    def test_non_matches_are_dropped(self):
        ranked = matching.rank([pro(title="Yoga"), pro(title="Pilates")], "yoga")
        assert len(ranked) == 1


class TestListingFilters:

    def setup_method(self):
        self.photographer = pro(
            title="Studio Lumière",
            category="Photographie",
            sub_category="Mariage",
            address="12 rue Saint-Denis",
            city="Montréal",
        )
        self.plumber = pro(
            title="Plomberie Gagnon",
            category="Bâtiment",
            sub_category="Plomberie",
            address="3 boulevard Laurier",
            city="Québec",
        )
        self.everyone = [self.photographer, self.plumber]

    def test_search_matches_fields(self):
        assert matching.filter_listing(self.everyone, search="plomb") == [self.plumber]

    def test_search_matches_address_substring(self):
        assert matching.filter_listing(self.everyone, search="saint-d") == [self.photographer]

    def test_blank_search_is_ignored(self):
        assert matching.filter_listing(self.everyone, search="   ") == self.everyone

    def test_category_is_exact_and_case_insensitive(self):
        assert matching.filter_listing(self.everyone, category="mariage") == [self.photographer]
        assert matching.filter_listing(self.everyone, category="Photo") == []

    def test_city_matches_city_or_address(self):
        assert matching.filter_listing(self.everyone, city="québec") == [self.plumber]
        assert matching.filter_listing(self.everyone, city="laurier") == [self.plumber]

    def test_filters_combine(self):
        result = matching.filter_listing(
            self.everyone, search="studio", category="Photographie", city="Québec"
        )
        assert result == []

    def test_no_filters_returns_everything(self):
        assert matching.filter_listing(self.everyone) == self.everyone
