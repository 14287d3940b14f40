"""Tests for Pydantic models."""

import json
from datetime import date, datetime

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st
from pydantic import ValidationError

from app.models import (
    BestResult,
    BestResultsSearchQuery,
    ErrorResponse,
    Hit,
    MovieSearchQuery,
    MultiSearchResponse,
    Pagination,
    PersonSearchQuery,
    TvSeriesSearchQuery,
    TypeSearchResponse,
    UserSearchQuery,
)
from app.models.search import MAX_PER_PAGE, MAX_RESULTS_PER_TYPE, split_csv


class TestRequestModels:
    """Test single-collection request models."""

    def test_defaults(self):
        request = PersonSearchQuery(query="nolan")

        assert request.page == 1
        assert request.per_page == 10
        assert request.sort_by is None
        assert request.sort_field == "popularity"

    def test_query_required(self):
        with pytest.raises(ValidationError):
            PersonSearchQuery()
        with pytest.raises(ValidationError):
            PersonSearchQuery(query="")

    def test_sort_by_must_be_sortable(self):
        assert MovieSearchQuery(query="x", sort_by="runtime").sort_field == "runtime"

        with pytest.raises(ValidationError) as exc_info:
            MovieSearchQuery(query="x", sort_by="title")

        assert "sort_by" in str(exc_info.value)

    def test_genre_ids_from_csv(self):
        request = MovieSearchQuery(query="x", genre_ids="28, 12,,35")

        assert request.genre_ids == [28, 12, 35]
        assert request.membership_filters() == [("genre_ids", [28, 12, 35])]

    def test_genre_ids_from_repeated_params(self):
        request = TvSeriesSearchQuery(query="x", genre_ids=["18", "10765,80"])

        assert request.genre_ids == [18, 10765, 80]

    def test_non_numeric_genre_rejected(self):
        with pytest.raises(ValidationError):
            MovieSearchQuery(query="x", genre_ids="drama")

    def test_movie_ranges(self):
        request = MovieSearchQuery(
            query="x", runtime_min=0, release_date_max="2020-12-31"
        )

        assert request.range_filters() == [
            ("runtime", 0, None),
            ("release_date", None, date(2020, 12, 31)),
        ]

    def test_inverted_bounds_rejected(self):
        with pytest.raises(ValidationError, match="runtime_min must not exceed runtime_max"):
            MovieSearchQuery(query="x", runtime_min=120, runtime_max=90)
        with pytest.raises(ValidationError, match="first_air_date_min"):
            TvSeriesSearchQuery(
                query="x", first_air_date_min="2021-01-01", first_air_date_max="2020-01-01"
            )

    def test_equal_bounds_allowed(self):
        request = TvSeriesSearchQuery(query="x", vote_average_min=7.5, vote_average_max=7.5)

        assert ("vote_average", 7.5, 7.5) in request.range_filters()

    def test_vote_average_limited_to_scale(self):
        with pytest.raises(ValidationError):
            TvSeriesSearchQuery(query="x", vote_average_max=11)

    def test_user_exclusions(self):
        request = UserSearchQuery(query="x", exclude_ids="a1,b2")

        assert request.exclusion_filters() == [("id", ["a1", "b2"])]

    def test_blank_exclusions_are_absent(self):
        assert UserSearchQuery(query="x", exclude_ids=" , ").exclude_ids is None

    @pytest.mark.parametrize(
        "exclude_ids", ["u1 || id:=u2", "u1&&is_private:true", "[u1]", "(u1)", "a b"]
    )
    def test_filter_syntax_in_exclusions_rejected(self, exclude_ids):
        with pytest.raises(ValidationError, match="exclude_ids"):
            UserSearchQuery(query="x", exclude_ids=exclude_ids)

    def test_uuid_exclusions_accepted(self):
        request = UserSearchQuery(query="x", exclude_ids="3f2b8c1e-9d4a-4e7b-a1c2-0f9e8d7c6b5a,user_2")

        assert request.exclude_ids == ["3f2b8c1e-9d4a-4e7b-a1c2-0f9e8d7c6b5a", "user_2"]


class TestBestResultsRequest:
    """Test the aggregate request model."""

    def test_defaults_cover_every_type(self):
        request = BestResultsSearchQuery(query="heat")

        assert request.results_per_type == 5
        assert [d.type_tag for d in request.descriptors] == [
            "movie",
            "tv_series",
            "person",
            "user",
            "playlist",
        ]

    def test_types_subset_in_precedence_order(self):
        request = BestResultsSearchQuery(query="heat", types="user,movie")

        assert [d.type_tag for d in request.descriptors] == ["movie", "user"]

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError, match="Unknown types"):
            BestResultsSearchQuery(query="heat", types="movie,album")


class TestResponseModels:
    """Test response models."""

    def test_type_response_serialization(self):
        response = TypeSearchResponse(
            data=[{"id": 1, "title": "Heat"}],
            pagination=Pagination(total_results=1, total_pages=1, current_page=1, per_page=10),
        )

        assert json.loads(response.model_dump_json()) == {
            "data": [{"id": 1, "title": "Heat"}],
            "pagination": {
                "total_results": 1,
                "total_pages": 1,
                "current_page": 1,
                "per_page": 10,
            },
        }

    def test_multi_response_uses_best_result_alias(self):
        block = TypeSearchResponse(
            data=[], pagination=Pagination(total_results=0, total_pages=0, current_page=1, per_page=5)
        )
        response = MultiSearchResponse(
            best_result=BestResult(type="movie", data={"id": 1}), movies=block
        )

        dumped = response.model_dump(by_alias=True)

        assert dumped["bestResult"] == {"type": "movie", "data": {"id": 1}}
        assert "best_result" not in dumped

    def test_multi_response_drops_unqueried_types(self):
        block = TypeSearchResponse(
            data=[], pagination=Pagination(total_results=0, total_pages=0, current_page=1, per_page=5)
        )
        response = MultiSearchResponse(persons=block)

        dumped = json.loads(response.model_dump_json(by_alias=True))

        assert set(dumped) == {"bestResult", "persons"}
        assert dumped["bestResult"] is None

    def test_pagination_rejects_page_zero(self):
        with pytest.raises(ValidationError):
            Pagination(total_results=0, total_pages=0, current_page=0, per_page=10)

    def test_error_response(self):
        error = ErrorResponse(
            error="Internal Server Error",
            detail="An internal server error occurred",
            timestamp=datetime(2024, 1, 1),
            request_id="req-1",
        )

        assert error.model_dump(mode="json")["timestamp"] == "2024-01-01T00:00:00"

    def test_hit_popularity_fallback(self):
        hit = Hit(id="1", fields={"popularity": None, "followers_count": 12})

        assert hit.popularity(("popularity", "followers_count")) == 12.0
        assert Hit(id="2").popularity(("popularity",)) == 0.0


class TestModelProperties:
    """Property-based tests for request validation."""

    @given(per_page=st.one_of(st.integers(max_value=0), st.integers(min_value=MAX_PER_PAGE + 1)))
    @settings(max_examples=50)
    def test_out_of_range_per_page_rejected(self, per_page):
        with pytest.raises(ValidationError):
            PersonSearchQuery(query="x", per_page=per_page)

    @given(page=st.integers(max_value=0))
    @settings(max_examples=50)
    def test_non_positive_page_rejected(self, page):
        with pytest.raises(ValidationError):
            PersonSearchQuery(query="x", page=page)

    @given(
        results_per_type=st.one_of(
            st.integers(max_value=0), st.integers(min_value=MAX_RESULTS_PER_TYPE + 1)
        )
    )
    @settings(max_examples=50)
    def test_out_of_range_results_per_type_rejected(self, results_per_type):
        with pytest.raises(ValidationError):
            BestResultsSearchQuery(query="x", results_per_type=results_per_type)

    @given(values=st.lists(st.integers(min_value=1, max_value=100000), min_size=1, max_size=10))
    @settings(max_examples=50)
    def test_csv_and_list_forms_agree(self, values):
        csv_form = MovieSearchQuery(query="x", genre_ids=",".join(map(str, values)))
        list_form = MovieSearchQuery(query="x", genre_ids=values)

        assert csv_form.genre_ids == list_form.genre_ids == values

    def test_split_csv_passthrough(self):
        assert split_csv(None) is None
        assert split_csv("") is None
        assert split_csv(["a", "b,c"]) == ["a", "b", "c"]
