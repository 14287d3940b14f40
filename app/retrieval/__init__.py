"""Fan-out execution and cross-type ranking."""

from app.retrieval.fanout import FanoutExecutor
from app.retrieval.ranking import score_candidates, select_best_result

__all__ = [
    "FanoutExecutor",
    "score_candidates",
    "select_best_result",
]
