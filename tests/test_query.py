"""
Unit tests for the catalog query engine.
"""

import math

import pytest

from artifind.catalog.query import (
    ARTISAN_PROFILE,
    PRODUCT_PROFILE,
    InvalidDescriptor,
    QueryDescriptor,
    SortOrder,
    filter_records,
    resolve_sort_field,
    resolve_sort_order,
    run_query,
)
from artifind.catalog.schemas import Product


def _products():
    return [
        {"id": "1", "title": "Ceramic Bowl", "description": "Glazed stoneware", "tags": ["pottery"],
         "category": "Pottery", "price": 40.0, "rating": 4.5, "inStock": True, "featured": True,
         "artisanId": "a1", "location": "Santa Fe, NM", "createdAt": "2024-01-01T00:00:00Z"},
        {"id": "2", "title": "Wood Table", "description": "Solid oak", "tags": ["furniture", "oak"],
         "category": "Furniture", "price": 60.0, "rating": 4.8, "inStock": False, "featured": False,
         "artisanId": "a2", "location": "Portland, OR", "createdAt": "2024-03-01T00:00:00Z"},
        {"id": "3", "title": "Glass Vase", "description": "Blown glass", "tags": ["glass", "Bowl-shaped"],
         "category": "Glass Art", "price": 90.0, "rating": 4.5, "inStock": True, "featured": False,
         "artisanId": "a3", "location": "Seattle, WA", "createdAt": "2024-02-01T00:00:00Z"},
        {"id": "4", "title": "Wool Blanket", "description": "Handwoven", "tags": ["textile"],
         "category": "textiles", "price": 120.0, "rating": 5.0, "inStock": True, "featured": True,
         "artisanId": "a1", "location": "Taos, NM", "createdAt": "2024-04-01T00:00:00Z"},
    ]


def _ids(items):
    return [r["id"] for r in items]


class TestWorkedExamples:
    def test_sort_ascending_then_slice(self):
        records = [{"price": 10}, {"price": 30}, {"price": 20}]
        result = run_query(
            records,
            QueryDescriptor(sort_field="price", sort_order="asc", page=1, limit=2),
            PRODUCT_PROFILE,
        )
        assert result.items == [{"price": 10}, {"price": 20}]
        assert result.total_matched == 3
        assert result.total_pages == 2

    def test_search_matches_title(self):
        records = [{"title": "Ceramic Bowl"}, {"title": "Wood Table"}]
        result = run_query(records, QueryDescriptor(search="bowl"), PRODUCT_PROFILE)
        assert result.items == [{"title": "Ceramic Bowl"}]
        assert result.total_matched == 1

    def test_price_range(self):
        records = [{"id": str(p), "price": p} for p in (40, 60, 90, 120)]
        result = run_query(
            records,
            QueryDescriptor(filters={"minPrice": 50, "maxPrice": 100}, sort_order="asc", sort_field="price"),
            PRODUCT_PROFILE,
        )
        assert [r["price"] for r in result.items] == [60, 90]

    def test_page_past_the_end(self):
        records = [{"id": str(i)} for i in range(3)]
        result = run_query(records, QueryDescriptor(page=5, limit=10), PRODUCT_PROFILE)
        assert result.items == []
        assert result.total_matched == 3
        assert result.total_pages == 1


class TestSearch:
    def test_case_insensitive_on_description(self):
        result = run_query(_products(), QueryDescriptor(search="OAK"), PRODUCT_PROFILE)
        assert _ids(result.items) == ["2"]

    def test_tag_substring(self):
        result = run_query(_products(), QueryDescriptor(search="bowl", sort_field="price", sort_order="asc"),
                           PRODUCT_PROFILE)
        assert _ids(result.items) == ["1", "3"]

    def test_empty_search_matches_everything(self):
        assert run_query(_products(), QueryDescriptor(search=""), PRODUCT_PROFILE).total_matched == 4
        assert run_query(_products(), QueryDescriptor(search=None), PRODUCT_PROFILE).total_matched == 4

    def test_non_text_search_is_invalid(self):
        with pytest.raises(InvalidDescriptor):
            run_query(_products(), QueryDescriptor(search=42), PRODUCT_PROFILE)

    def test_artisan_search_uses_name_and_skills(self):
        artisans = [
            {"id": "1", "name": "Elena Rodriguez", "description": "", "skills": ["Glazing"]},
            {"id": "2", "name": "Marcus Chen", "description": "", "skills": ["Wood carving"]},
        ]
        assert _ids(run_query(artisans, QueryDescriptor(search="elena"), ARTISAN_PROFILE).items) == ["1"]
        assert _ids(run_query(artisans, QueryDescriptor(search="carv"), ARTISAN_PROFILE).items) == ["2"]


class TestFilters:
    def test_category_is_case_insensitive(self):
        result = run_query(_products(), QueryDescriptor(filters={"category": "TEXTILES"}), PRODUCT_PROFILE)
        assert _ids(result.items) == ["4"]

    def test_artisan_id_is_case_sensitive(self):
        descriptor = QueryDescriptor(filters={"artisanId": "A1"})
        assert run_query(_products(), descriptor, PRODUCT_PROFILE).total_matched == 0
        descriptor = QueryDescriptor(filters={"artisanId": "a1"})
        assert run_query(_products(), descriptor, PRODUCT_PROFILE).total_matched == 2

    def test_location_substring(self):
        result = run_query(_products(), QueryDescriptor(filters={"location": "nm"}), PRODUCT_PROFILE)
        assert sorted(_ids(result.items)) == ["1", "4"]

    def test_boolean_only_applied_when_present(self):
        assert run_query(_products(), QueryDescriptor(filters={"inStock": None}), PRODUCT_PROFILE).total_matched == 4
        in_stock = run_query(_products(), QueryDescriptor(filters={"inStock": True}), PRODUCT_PROFILE)
        assert in_stock.total_matched == 3
        out_of_stock = run_query(_products(), QueryDescriptor(filters={"inStock": False}), PRODUCT_PROFILE)
        assert _ids(out_of_stock.items) == ["2"]

    def test_boolean_accepts_query_string_text(self):
        result = run_query(_products(), QueryDescriptor(filters={"featured": "true"}), PRODUCT_PROFILE)
        assert sorted(_ids(result.items)) == ["1", "4"]

    def test_range_mapping(self):
        descriptor = QueryDescriptor(filters={"price": {"min": 60, "max": 90}})
        result = run_query(_products(), descriptor, PRODUCT_PROFILE)
        assert sorted(_ids(result.items)) == ["2", "3"]

    def test_bounds_are_inclusive(self):
        descriptor = QueryDescriptor(filters={"minPrice": 40, "maxPrice": 40})
        assert _ids(run_query(_products(), descriptor, PRODUCT_PROFILE).items) == ["1"]

    def test_missing_numeric_field_fails_numeric_filter(self):
        records = [{"id": "1", "price": 10}, {"id": "2"}, {"id": "3", "price": None}]
        result = run_query(records, QueryDescriptor(filters={"maxPrice": 100}), PRODUCT_PROFILE)
        assert _ids(result.items) == ["1"]

    def test_missing_boolean_field_fails_boolean_filter(self):
        records = [{"id": "1", "featured": True}, {"id": "2"}]
        result = run_query(records, QueryDescriptor(filters={"featured": True}), PRODUCT_PROFILE)
        assert _ids(result.items) == ["1"]

    def test_snake_case_keys_accepted(self):
        descriptor = QueryDescriptor(filters={"min_price": 100})
        assert _ids(run_query(_products(), descriptor, PRODUCT_PROFILE).items) == ["4"]

    def test_unknown_filter_is_ignored(self):
        descriptor = QueryDescriptor(filters={"colour": "blue"})
        assert run_query(_products(), descriptor, PRODUCT_PROFILE).total_matched == 4

    def test_non_numeric_bound_is_invalid(self):
        with pytest.raises(InvalidDescriptor):
            run_query(_products(), QueryDescriptor(filters={"minPrice": "cheap"}), PRODUCT_PROFILE)

    @pytest.mark.parametrize("bound", ["nan", "inf", float("nan"), float("-inf")])
    def test_non_finite_bound_is_invalid(self, bound):
        with pytest.raises(InvalidDescriptor):
            run_query(_products(), QueryDescriptor(filters={"minPrice": bound}), PRODUCT_PROFILE)

    def test_empty_bound_is_no_constraint(self):
        descriptor = QueryDescriptor(filters={"minPrice": "", "maxPrice": "  "})
        assert run_query(_products(), descriptor, PRODUCT_PROFILE).total_matched == 4

    def test_non_mapping_filters_are_invalid(self):
        with pytest.raises(InvalidDescriptor):
            run_query(_products(), QueryDescriptor(filters=["category"]), PRODUCT_PROFILE)

    def test_filters_are_conjunctive_and_order_independent(self):
        a = QueryDescriptor(filters={"location": "nm", "featured": True, "maxPrice": 50})
        b = QueryDescriptor(filters={"maxPrice": 50, "featured": True, "location": "nm"})
        assert _ids(filter_records(_products(), a, PRODUCT_PROFILE)) == ["1"]
        assert filter_records(_products(), a, PRODUCT_PROFILE) == filter_records(_products(), b, PRODUCT_PROFILE)

    def test_adding_a_filter_never_grows_the_result(self):
        base = QueryDescriptor(search="a")
        narrower = QueryDescriptor(search="a", filters={"inStock": True})
        narrowest = QueryDescriptor(search="a", filters={"inStock": True, "minRating": 4.9})
        totals = [run_query(_products(), d, PRODUCT_PROFILE).total_matched for d in (base, narrower, narrowest)]
        assert totals == sorted(totals, reverse=True)

    def test_artisan_min_rating(self):
        artisans = [{"id": "1", "rating": 4.6}, {"id": "2", "rating": 4.9}]
        result = run_query(artisans, QueryDescriptor(filters={"rating": "4.8"}), ARTISAN_PROFILE)
        assert _ids(result.items) == ["2"]


class TestSorting:
    def test_default_is_created_at_descending(self):
        result = run_query(_products(), QueryDescriptor(), PRODUCT_PROFILE)
        assert _ids(result.items) == ["4", "2", "3", "1"]

    def test_unknown_field_falls_back_to_default(self):
        result = run_query(_products(), QueryDescriptor(sort_field="__proto__"), PRODUCT_PROFILE)
        assert _ids(result.items) == ["4", "2", "3", "1"]
        assert resolve_sort_field(PRODUCT_PROFILE, "bogus").attr == "created_at"

    def test_snake_case_sort_field(self):
        assert resolve_sort_field(PRODUCT_PROFILE, "created_at").attr == "created_at"
        assert resolve_sort_field(ARTISAN_PROFILE, "joined_date").attr == "joined_date"

    def test_stable_on_ties_both_directions(self):
        # ids 1 and 3 share rating 4.5
        asc = run_query(_products(), QueryDescriptor(sort_field="rating", sort_order="asc"), PRODUCT_PROFILE)
        desc = run_query(_products(), QueryDescriptor(sort_field="rating", sort_order="desc"), PRODUCT_PROFILE)
        assert _ids(asc.items) == ["1", "3", "2", "4"]
        assert _ids(desc.items) == ["4", "2", "1", "3"]

    def test_strings_are_case_sensitive(self):
        result = run_query(_products(), QueryDescriptor(sort_field="category", sort_order="asc"), PRODUCT_PROFILE)
        # Uppercase letters sort before lowercase ones
        assert [r["category"] for r in result.items] == ["Furniture", "Glass Art", "Pottery", "textiles"]

    def test_missing_values_go_last(self):
        records = [{"id": "1"}, {"id": "2", "price": 5}, {"id": "3", "price": 9}, {"id": "4"}]
        asc = run_query(records, QueryDescriptor(sort_field="price", sort_order="asc"), PRODUCT_PROFILE)
        desc = run_query(records, QueryDescriptor(sort_field="price", sort_order="desc"), PRODUCT_PROFILE)
        assert _ids(asc.items) == ["2", "3", "1", "4"]
        assert _ids(desc.items) == ["3", "2", "1", "4"]

    def test_sort_order_spellings(self):
        assert resolve_sort_order("ASC") is SortOrder.ASC
        assert resolve_sort_order("descending") is SortOrder.DESC
        assert resolve_sort_order("sideways") is SortOrder.DESC

    def test_works_on_models(self):
        products = [
            Product(id="1", title="A", price="$30.00"),
            Product(id="2", title="B", price=10),
        ]
        result = run_query(products, QueryDescriptor(sort_field="price", sort_order="asc"), PRODUCT_PROFILE)
        assert [p.id for p in result.items] == ["2", "1"]


class TestPagination:
    @pytest.mark.parametrize("page", [0, -3, "abc", None, 1.5, True])
    def test_bad_page_becomes_first_page(self, page):
        result = run_query(_products(), QueryDescriptor(page=page, limit=2), PRODUCT_PROFILE)
        assert result.page == 1
        assert _ids(result.items) == ["4", "2"]

    @pytest.mark.parametrize("limit", [0, -1, "many", None])
    def test_bad_limit_uses_collection_default(self, limit):
        records = [{"id": str(i)} for i in range(30)]
        assert len(run_query(records, QueryDescriptor(limit=limit), PRODUCT_PROFILE).items) == 12
        assert len(run_query(records, QueryDescriptor(limit=limit), ARTISAN_PROFILE).items) == 10

    def test_numeric_strings_are_accepted(self):
        result = run_query(_products(), QueryDescriptor(page="2", limit="3"), PRODUCT_PROFILE)
        assert result.page == 2
        assert _ids(result.items) == ["1"]

    def test_total_pages(self):
        for total in (0, 1, 11, 12, 13, 25):
            records = [{"id": str(i)} for i in range(total)]
            result = run_query(records, QueryDescriptor(limit=12), PRODUCT_PROFILE)
            assert result.total_pages == math.ceil(total / 12)
            assert len(result.items) <= 12
            assert len(result.items) <= result.total_matched

    def test_pages_partition_the_sorted_sequence(self):
        records = [{"id": str(i), "price": i % 4} for i in range(23)]
        full = run_query(records, QueryDescriptor(sort_field="price", sort_order="asc", limit=100), PRODUCT_PROFILE)
        first = run_query(records, QueryDescriptor(sort_field="price", sort_order="asc", limit=5), PRODUCT_PROFILE)
        collected = []
        for page in range(1, first.total_pages + 1):
            collected += run_query(
                records, QueryDescriptor(sort_field="price", sort_order="asc", limit=5, page=page), PRODUCT_PROFILE
            ).items
        assert collected == full.items


class TestPurity:
    def test_input_is_not_mutated(self):
        records = _products()
        snapshot = [dict(r) for r in records]
        run_query(records, QueryDescriptor(sort_field="price", sort_order="asc", limit=1), PRODUCT_PROFILE)
        assert records == snapshot

    def test_identical_calls_give_identical_results(self):
        descriptor = QueryDescriptor(search="a", filters={"inStock": True}, sort_field="rating", limit=2)
        assert run_query(_products(), descriptor, PRODUCT_PROFILE) == run_query(_products(), descriptor, PRODUCT_PROFILE)
