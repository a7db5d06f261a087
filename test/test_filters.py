import pytest

from catalog.filters import (
    ActiveFilters,
    normalize_filters,
    parse_float,
    parse_int,
    resolve_pagination,
)


FULL_RANGE = {
    "energy_min": "0", "energy_max": "1",
    "danceability_min": "0", "danceability_max": "1",
    "popularity_min": "0", "popularity_max": "100",
}


class TestParsing:
    @pytest.mark.parametrize("raw", [None, "", "abc", "1..2", "nan", "inf", "-inf", True, [], {}])
    def test_parse_float_never_raises(self, raw):
        assert parse_float(raw) is None

    def test_parse_float_accepts_padded_text(self):
        assert parse_float(" 0.25 ") == 0.25

    def test_parse_int_truncates(self):
        assert parse_int("70.9") == 70
        assert parse_int("42") == 42
        assert parse_int("x42") is None


class TestDefaults:
    def test_empty_params_resolve_to_domain(self):
        f = normalize_filters({})

        assert (f.energy.min, f.energy.max) == (0.0, 1.0)
        assert (f.danceability.min, f.danceability.max) == (0.0, 1.0)
        assert (f.popularity.min, f.popularity.max) == (0, 100)
        assert f.active == ActiveFilters(False, False, False)
        assert f.range_predicate() == {}
        assert (f.page, f.limit, f.skip) == (1, 50, 0)
        assert f.search == ""
        assert not f.text_mode

    def test_full_range_bounds_are_omitted(self):
        f = normalize_filters(FULL_RANGE)

        assert not f.active.any
        assert f.range_predicate() == {}

    @pytest.mark.parametrize("bad", ["abc", "", "NaN", "1e999", "--1"])
    def test_malformed_values_fall_back_to_defaults(self, bad):
        params = {k: bad for k in FULL_RANGE}
        f = normalize_filters(params)

        assert (f.energy.min, f.energy.max) == (0.0, 1.0)
        assert (f.popularity.min, f.popularity.max) == (0, 100)
        assert f.range_predicate() == {}


class TestActivation:
    def test_min_above_domain_activates(self):
        f = normalize_filters({"energy_min": "0.2"})

        assert f.active.energy
        assert not f.active.danceability
        assert f.range_predicate() == {"energy": {"$gte": 0.2, "$lte": 1.0}}

    def test_max_below_domain_activates(self):
        f = normalize_filters({"popularity_max": "60"})

        assert f.active.popularity
        assert f.range_predicate() == {"popularity": {"$gte": 0, "$lte": 60}}

    def test_bounds_outside_domain_stay_inactive(self):
        f = normalize_filters({"danceability_min": "-3", "danceability_max": "7"})

        assert not f.active.danceability
        assert f.range_predicate() == {}

    def test_popularity_decimal_text_is_truncated(self):
        f = normalize_filters({"popularity_min": "70.9"})

        assert f.popularity.min == 70

    def test_several_dimensions_are_conjunctive(self):
        f = normalize_filters({"energy_min": "0.5", "danceability_max": "0.8", "popularity_min": "10"})

        assert set(f.range_predicate()) == {"energy", "danceability", "popularity"}
        assert f.active.any


class TestPagination:
    @pytest.mark.parametrize("raw_page, expected", [(None, 1), ("0", 1), ("-4", 1), ("abc", 1), ("3", 3)])
    def test_page_is_clamped(self, raw_page, expected):
        page, _ = resolve_pagination(raw_page, None)
        assert page == expected

    @pytest.mark.parametrize("raw_limit, expected", [(None, 50), ("0", 50), ("-10", 50), ("abc", 50), ("20", 20)])
    def test_limit_defaults(self, raw_limit, expected):
        _, limit = resolve_pagination(None, raw_limit)
        assert limit == expected

    def test_limit_is_capped(self):
        _, limit = resolve_pagination(None, "999999", max_limit=2000)
        assert limit == 2000

    def test_skip(self):
        f = normalize_filters({"page": "3", "limit": "20"})
        assert f.skip == 40


class TestSearchTerm:
    def test_whitespace_search_is_browse_mode(self):
        assert not normalize_filters({"search": "   "}).text_mode

    def test_search_is_trimmed(self):
        f = normalize_filters({"search": "  love "})
        assert f.search == "love"
        assert f.text_mode


class TestOversizedNumbers:
    @pytest.mark.parametrize("raw", ["1e300", "-1e300", "9.3e18"])
    def test_parse_int_rejects_values_outside_int64(self, raw):
        assert parse_int(raw) is None

    def test_huge_popularity_bound_falls_back_to_domain(self):
        f = normalize_filters({"popularity_min": "1e300", "popularity_max": "-1e300"})

        assert (f.popularity.min, f.popularity.max) == (0, 100)
        assert not f.active.popularity

    @pytest.mark.parametrize("raw_page", ["1e30", "99999999999999999999", "1e300"])
    def test_huge_page_is_capped(self, raw_page):
        page, _ = resolve_pagination(raw_page, None, max_page=1000)
        assert page == 1000

    def test_huge_limit_falls_back_to_default(self):
        _, limit = resolve_pagination(None, "1e300", max_limit=2000)
        assert limit == 50
