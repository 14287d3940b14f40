"""Tests for cross-type best result selection."""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from app.models.hits import Hit
from app.retrieval.ranking import hybrid_score, score_candidates, select_best_result
from app.search.collections import MOVIES, PERSONS, PLAYLISTS, TV_SERIES, USERS


class TestBestResultScenarios:
    """Worked examples of the hybrid score."""

    def test_relevance_outweighs_popularity(self):
        top_hits = [
            (MOVIES, Hit(id="a", relevance=8.0, fields={"popularity": 100})),
            (TV_SERIES, Hit(id="b", relevance=4.0, fields={"popularity": 500})),
        ]

        candidates = score_candidates(top_hits)

        assert candidates[0].score == pytest.approx(0.92)
        assert candidates[1].score == pytest.approx(0.55)
        best = select_best_result(top_hits)
        assert (best.type, best.id) == ("movie", "a")

    def test_single_candidate_always_wins(self):
        top_hits = [
            (MOVIES, None),
            (TV_SERIES, None),
            (PERSONS, Hit(id="p1", relevance=0.0, fields={})),
            (USERS, None),
            (PLAYLISTS, None),
        ]

        best = select_best_result(top_hits)

        assert best.type == "person"
        assert best.id == "p1"

    def test_no_hits_means_no_best_result(self):
        assert select_best_result([(MOVIES, None), (USERS, None)]) is None
        assert select_best_result([]) is None

    def test_ties_go_to_the_earlier_type(self):
        top_hits = [
            (USERS, Hit(id="u", relevance=5.0, fields={"followers_count": 10})),
            (PLAYLISTS, Hit(id="l", relevance=5.0, fields={"likes_count": 10})),
        ]
        assert select_best_result(top_hits).type == "user"

    def test_popularity_fallback_order(self):
        hit = Hit(id="x", fields={"followers_count": 7, "likes_count": 99})
        assert hit.popularity(("popularity", "followers_count", "likes_count")) == 7.0
        assert Hit(id="y").popularity(("popularity",)) == 0.0

    def test_maxima_are_floored_at_one(self):
        top_hits = [(MOVIES, Hit(id="a", relevance=0.5, fields={"popularity": 0.2}))]
        [candidate] = score_candidates(top_hits)
        assert candidate.score == pytest.approx(0.9 * 0.5 + 0.1 * 0.2)

    def test_hybrid_score_weights(self):
        assert hybrid_score(1.0, 1.0, 1.0, 1.0) == pytest.approx(1.0)
        assert hybrid_score(0.0, 3.0, 1.0, 3.0) == pytest.approx(0.1)


hit_strategy = st.builds(
    Hit,
    id=st.text(alphabet="abcdef0123456789", min_size=1, max_size=8),
    relevance=st.floats(min_value=0, max_value=1e18, allow_nan=False),
    fields=st.fixed_dictionaries(
        {},
        optional={
            "popularity": st.floats(min_value=0, max_value=1e6, allow_nan=False),
            "followers_count": st.integers(min_value=0, max_value=10**7),
            "likes_count": st.integers(min_value=0, max_value=10**7),
        },
    ),
)


class TestBestResultProperties:
    """Invariants of the fused score."""

    @settings(deadline=None)
    @given(hits=st.lists(st.one_of(st.none(), hit_strategy), min_size=5, max_size=5))
    def test_property_scores_are_normalized(self, hits):
        """Every hybrid score lies in [0, 1]."""
        descriptors = [MOVIES, TV_SERIES, PERSONS, USERS, PLAYLISTS]
        candidates = score_candidates(list(zip(descriptors, hits)))

        assert len(candidates) == sum(hit is not None for hit in hits)
        for candidate in candidates:
            assert 0.0 <= candidate.score <= 1.0 + 1e-9

    @settings(deadline=None)
    @given(hits=st.lists(st.one_of(st.none(), hit_strategy), min_size=5, max_size=5))
    def test_property_winner_has_the_maximum_score(self, hits):
        """The winner scores highest and is the first type reaching that score."""
        descriptors = [MOVIES, TV_SERIES, PERSONS, USERS, PLAYLISTS]
        top_hits = list(zip(descriptors, hits))
        candidates = score_candidates(top_hits)
        best = select_best_result(top_hits)

        if not candidates:
            assert best is None
            return
        top_score = max(c.score for c in candidates)
        first_top = next(c for c in candidates if c.score == top_score)
        assert best.score == top_score
        assert best.type == first_top.type
