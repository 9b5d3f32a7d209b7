from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from expense_categorizer.classifiers.base import Classifier
from expense_categorizer.classifiers.generic import GenericMatcher
from expense_categorizer.classifiers.keywords import DescriptionKeywordMatcher
from expense_categorizer.classifiers.memory import ExactMerchantMatcher, FuzzyMerchantMatcher
from expense_categorizer.classifiers.similarity import SimilarityMetric
from expense_categorizer.core.settings import PredictorSettings
from expense_categorizer.domain.catalog import (
    DEFAULT_DESCRIPTION_KEYWORDS,
    DEFAULT_RULE_CATALOG,
    KeywordTable,
    RuleCatalog,
)
from expense_categorizer.logger import get_logger
from expense_categorizer.models import (
    Alternative,
    HistoricalExpense,
    Prediction,
    PredictionResponse,
    TransactionInput,
)
from expense_categorizer.services.aggregation import DEFAULT_SOURCE_WEIGHTS, aggregate_predictions

logger = get_logger(__name__)

HistoryInput = Iterable[HistoricalExpense | Mapping[str, Any]]


def coerce_history(history: HistoryInput | None) -> tuple[HistoricalExpense, ...]:
    """Snapshot the caller's history; entries that fail validation are skipped."""
    expenses: list[HistoricalExpense] = []
    for entry in history or ():
        if isinstance(entry, HistoricalExpense):
            expenses.append(entry)
            continue
        try:
            expenses.append(HistoricalExpense.model_validate(entry))
        except ValidationError as exc:
            logger.debug("Skipping malformed history entry %r: %s", entry, exc)
    return tuple(expenses)


def build_alternatives(
    predictions: Sequence[Prediction], winner: str | None, limit: int
) -> list[Alternative]:
    best: dict[str, float] = {}
    for prediction in predictions:
        category = prediction.category
        if not category or category == winner:
            continue
        if category not in best or best[category] < prediction.confidence:
            best[category] = prediction.confidence

    ranked = sorted(best.items(), key=lambda item: item[1], reverse=True)
    return [
        Alternative(category=category, confidence=round(confidence, 3))
        for category, confidence in ranked[:limit]
    ]


class CategoryPredictor:
    """
    Runs every matcher, aggregates their votes and applies the confidence gate.

    Stateless between calls: all configuration is fixed at construction.
    """

    def __init__(
        self,
        catalog: RuleCatalog = DEFAULT_RULE_CATALOG,
        keyword_table: KeywordTable = DEFAULT_DESCRIPTION_KEYWORDS,
        settings: PredictorSettings | None = None,
        metric: SimilarityMetric | None = None,
        source_weights: Mapping[str, float] = DEFAULT_SOURCE_WEIGHTS,
    ):
        self.settings = settings or PredictorSettings()
        self.source_weights = source_weights

        self.exact = ExactMerchantMatcher()
        self.fuzzy = FuzzyMerchantMatcher(metric=metric, settings=self.settings, exact=self.exact)
        self.keywords = DescriptionKeywordMatcher(table=keyword_table)
        self.generic = GenericMatcher(catalog=catalog, settings=self.settings)

        # Order matters: aggregation breaks ties by first nomination
        self.classifiers: list[Classifier] = [self.exact, self.fuzzy, self.keywords, self.generic]

    @property
    def categories(self) -> tuple[str, ...]:
        return self.generic.catalog.categories

    def collect(
        self,
        merchant: str | None,
        amount: float | None,
        description: str | None,
        history: Sequence[HistoricalExpense],
    ) -> list[Prediction]:
        predictions: list[Prediction] = []
        for classifier in self.classifiers:
            name = classifier.__class__.__name__
            prediction = classifier.classify(merchant, amount, description, history)
            if prediction is None:
                logger.debug("%s returned: None", name)
                continue
            logger.debug(
                "%s returned: '%s' (confidence: %.3f)",
                name,
                prediction.category,
                prediction.confidence,
            )
            predictions.append(prediction)
        return predictions

    def predict(
        self,
        merchant: str | None = None,
        amount: float | None = None,
        description: str | None = None,
        history: HistoryInput | None = None,
    ) -> PredictionResponse:
        return self._predict(merchant, amount, description, coerce_history(history))

    def predict_many(
        self,
        transactions: Iterable[TransactionInput | Mapping[str, Any]],
        history: HistoryInput | None = None,
    ) -> list[PredictionResponse]:
        """Predict several transactions against one shared history snapshot."""
        expenses = coerce_history(history)
        responses = []
        for item in transactions:
            tx = item if isinstance(item, TransactionInput) else TransactionInput.model_validate(item)
            responses.append(self._predict(tx.merchant, tx.amount, tx.description, expenses))
        return responses

    def _predict(
        self,
        merchant: str | None,
        amount: float | None,
        description: str | None,
        history: Sequence[HistoricalExpense],
    ) -> PredictionResponse:
        predictions = self.collect(merchant, amount, description, history)
        result = aggregate_predictions(predictions, self.source_weights)
        alternatives = build_alternatives(
            predictions, result.category, self.settings.max_alternatives
        )

        below_threshold = result.confidence < self.settings.confidence_threshold
        if below_threshold:
            logger.debug(
                "Confidence %.3f below threshold %.2f; withholding '%s'.",
                result.confidence,
                self.settings.confidence_threshold,
                result.category,
            )

        return PredictionResponse(
            category=None if below_threshold else result.category,
            confidence=result.confidence,
            below_threshold=below_threshold,
            alternatives=alternatives,
            source=result.source,
        )


_default_predictor = CategoryPredictor()


def predict_category(
    merchant: str | None = None,
    amount: float | None = None,
    description: str | None = None,
    history: HistoryInput | None = None,
) -> PredictionResponse:
    """Predict with the default catalog, keyword table and thresholds."""
    return _default_predictor.predict(merchant, amount, description, history)
