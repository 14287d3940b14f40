"""Engine-side result types shared by the fan-out, ranking and hydration layers."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Hit:
    """A single engine match.

    Attributes:
        id: Engine document id (opaque string)
        relevance: Engine text-match score, 0.0 when the engine omits it
        fields: Minimal raw document fields kept for ranking fusion
    """

    id: str
    relevance: float = 0.0
    fields: dict[str, Any] = field(default_factory=dict)

    def popularity(self, fallback_fields: tuple[str, ...]) -> float:
        """Return the first present popularity field, or 0.0 when none is."""
        for name in fallback_fields:
            value = self.fields.get(name)
            if value is not None:
                return float(value)
        return 0.0


@dataclass
class EngineResult:
    """Ranked hits for one collection plus the engine's total match count."""

    collection: str
    found: int = 0
    hits: list[Hit] = field(default_factory=list)

    @property
    def top_hit(self) -> Hit | None:
        return self.hits[0] if self.hits else None

    @property
    def ids(self) -> list[str]:
        """Hit ids in engine rank order."""
        return [hit.id for hit in self.hits]


@dataclass
class BestResultCandidate:
    """A type's rank-1 hit scored against the other types' rank-1 hits."""

    type: str
    id: str
    score: float
