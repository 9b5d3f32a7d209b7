from collections.abc import Sequence

from expense_categorizer.classifiers.base import Classifier
from expense_categorizer.classifiers.similarity import RapidfuzzSimilarity, SimilarityMetric
from expense_categorizer.core.settings import PredictorSettings
from expense_categorizer.domain.text import normalize_merchant
from expense_categorizer.logger import get_logger
from expense_categorizer.models import (
    EXACT_MERCHANT,
    FUZZY_MERCHANT,
    HistoricalExpense,
    Prediction,
)

logger = get_logger(__name__)

FREQUENCY_CAP = 10


class ExactMerchantMatcher(Classifier):
    """Dominant category among past expenses at the same merchant."""

    def find(self, merchant: str | None, history: Sequence[HistoricalExpense]) -> Prediction | None:
        target = normalize_merchant(merchant)
        if not target or not history:
            return None

        # Insertion order decides ties between equally common categories
        counts: dict[str, int] = {}
        total = 0
        for expense in history:
            if not expense.merchant or not expense.category:
                continue
            if normalize_merchant(expense.merchant) != target:
                continue
            counts[expense.category] = counts.get(expense.category, 0) + 1
            total += 1

        if total == 0:
            return None

        dominant = max(counts, key=counts.__getitem__)
        consistency = counts[dominant] / total
        frequency = min(total / FREQUENCY_CAP, 1.0)
        blend = consistency * 0.7 + frequency * 0.3
        # Exact history is trusted: confidence stays in [0.9, 0.99]
        confidence = min(0.9 + blend * 0.1, 0.99)

        return Prediction(
            category=dominant,
            confidence=round(confidence, 3),
            source=EXACT_MERCHANT,
            count=total,
        )

    def classify(
        self,
        merchant: str | None,
        amount: float | None,
        description: str | None,
        history: Sequence[HistoricalExpense],
    ) -> Prediction | None:
        return self.find(merchant, history)


class FuzzyMerchantMatcher(Classifier):
    """
    Closest known merchant by text similarity, scored like an exact match on
    that merchant and then discounted by the similarity rating.
    """

    def __init__(
        self,
        metric: SimilarityMetric | None = None,
        settings: PredictorSettings | None = None,
        exact: ExactMerchantMatcher | None = None,
    ):
        self.metric = metric or RapidfuzzSimilarity()
        self.settings = settings or PredictorSettings()
        self.exact = exact or ExactMerchantMatcher()

    def find(self, merchant: str | None, history: Sequence[HistoricalExpense]) -> Prediction | None:
        if not merchant or not history:
            return None

        known = list(dict.fromkeys(e.merchant for e in history if e.merchant))
        if not known:
            return None

        best = self.metric.best_match(
            normalize_merchant(merchant), [name.lower() for name in known]
        )
        if best is None:
            return None

        index, rating = best
        if rating < self.settings.fuzzy_match_threshold:
            logger.debug(
                "Closest merchant to '%s' is '%s' (%.3f), below threshold.",
                merchant,
                known[index],
                rating,
            )
            return None

        matched_merchant = known[index]
        exact = self.exact.find(matched_merchant, history)
        if exact is None:
            return None

        confidence = exact.confidence * rating * self.settings.fuzzy_discount
        return Prediction(
            category=exact.category,
            confidence=round(confidence, 3),
            source=FUZZY_MERCHANT,
            matched_merchant=matched_merchant,
            similarity=round(rating, 3),
        )

    def classify(
        self,
        merchant: str | None,
        amount: float | None,
        description: str | None,
        history: Sequence[HistoricalExpense],
    ) -> Prediction | None:
        return self.find(merchant, history)
