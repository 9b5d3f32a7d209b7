from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from expense_categorizer.logger import get_logger
from expense_categorizer.models import (
    EXACT_MERCHANT,
    FUZZY_MERCHANT,
    GENERIC,
    KEYWORD,
    NO_SOURCE,
    AggregateResult,
    Prediction,
)

logger = get_logger(__name__)

DEFAULT_SOURCE_WEIGHTS: Mapping[str, float] = MappingProxyType({
    EXACT_MERCHANT: 1.0,
    FUZZY_MERCHANT: 0.75,
    KEYWORD: 0.6,
    GENERIC: 0.5,
})
UNKNOWN_SOURCE_WEIGHT = 0.5
AGREEMENT_BONUS = 0.1


@dataclass
class CategoryTally:
    total_score: float = 0.0
    count: int = 0
    max_confidence: float = 0.0
    sources: list[str] = field(default_factory=list)

    def add(self, prediction: Prediction, weight: float) -> None:
        self.total_score += prediction.confidence * weight
        self.count += 1
        self.max_confidence = max(self.max_confidence, prediction.confidence)
        self.sources.append(prediction.source)

    @property
    def average_score(self) -> float:
        # Reported for diagnostics only; confidence is anchored to max_confidence
        return self.total_score / self.count if self.count else 0.0


def tally_predictions(
    predictions: Sequence[Prediction],
    weights: Mapping[str, float] = DEFAULT_SOURCE_WEIGHTS,
) -> dict[str, CategoryTally]:
    tallies: dict[str, CategoryTally] = {}
    for prediction in predictions:
        weight = weights.get(prediction.source, UNKNOWN_SOURCE_WEIGHT)
        tallies.setdefault(prediction.category, CategoryTally()).add(prediction, weight)
    return tallies


def aggregate_predictions(
    predictions: Sequence[Prediction],
    weights: Mapping[str, float] = DEFAULT_SOURCE_WEIGHTS,
) -> AggregateResult:
    """
    Combine matcher outputs into one decision.

    The category with the highest weighted total wins; on equal totals the
    category seen first in ``predictions`` wins. Confidence is the strongest
    single confidence for the winner, plus a flat bonus when more than one
    source nominated it. The reported source is the first nominating source.
    """
    tallies = tally_predictions(predictions, weights)
    if not tallies:
        return AggregateResult(category=None, confidence=0.0, source=NO_SOURCE)

    winner: str | None = None
    best: CategoryTally | None = None
    for category, tally in tallies.items():
        if best is None or tally.total_score > best.total_score:
            winner, best = category, tally

    for category, tally in tallies.items():
        logger.debug(
            "Tally %s: total=%.3f avg=%.3f max=%.3f sources=%s",
            category,
            tally.total_score,
            tally.average_score,
            tally.max_confidence,
            tally.sources,
        )

    bonus = AGREEMENT_BONUS if best.count > 1 else 0.0
    confidence = min(best.max_confidence + bonus, 1.0)
    return AggregateResult(
        category=winner,
        confidence=round(confidence, 3),
        source=best.sources[0],
    )
