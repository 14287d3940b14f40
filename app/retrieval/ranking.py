"""Cross-type best result selection.

Engine relevance and popularity are not comparable across collections, so
each type's rank-1 hit is normalized against the maxima of the rank-1 hits
of the same request before blending:

    hybrid = 0.9 * text / max_text + 0.1 * popularity / max_popularity

Both maxima are floored at 1 to avoid division by zero.
"""

import logging
from collections.abc import Sequence

from app.models.hits import BestResultCandidate, Hit
from app.search.collections import CollectionDescriptor

logger = logging.getLogger(__name__)

TEXT_WEIGHT = 0.9
POPULARITY_WEIGHT = 0.1


def hybrid_score(text: float, popularity: float, max_text: float, max_popularity: float) -> float:
    """Blend normalized relevance and popularity into a score in [0, 1]."""
    return TEXT_WEIGHT * (text / max_text) + POPULARITY_WEIGHT * (popularity / max_popularity)


def score_candidates(
    top_hits: Sequence[tuple[CollectionDescriptor, Hit | None]],
) -> list[BestResultCandidate]:
    """Score every type's rank-1 hit against this request's maxima.

    Args:
        top_hits: (descriptor, rank-1 hit or None) in tie-break precedence order

    Returns:
        One candidate per type that produced a hit, in input order
    """
    present = [
        (descriptor, hit, hit.relevance, hit.popularity(descriptor.popularity_fields))
        for descriptor, hit in top_hits
        if hit is not None
    ]
    if not present:
        return []

    max_text = max([text for _, _, text, _ in present] + [1.0])
    max_popularity = max([pop for _, _, _, pop in present] + [1.0])

    return [
        BestResultCandidate(
            type=descriptor.type_tag,
            id=hit.id,
            score=hybrid_score(text, popularity, max_text, max_popularity),
        )
        for descriptor, hit, text, popularity in present
    ]


def select_best_result(
    top_hits: Sequence[tuple[CollectionDescriptor, Hit | None]],
) -> BestResultCandidate | None:
    """Pick the candidate with the strictly greatest hybrid score.

    Ties keep the earlier type in ``top_hits`` order.

    Returns:
        Winning candidate, or None if no type produced a hit
    """
    best: BestResultCandidate | None = None
    for candidate in score_candidates(top_hits):
        if best is None or candidate.score > best.score:
            best = candidate

    if best is not None:
        logger.info(f"Best result: {best.type} '{best.id}' (score={best.score:.4f})")
    return best
