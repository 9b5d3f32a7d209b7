from collections.abc import Sequence

from expense_categorizer.classifiers.base import Classifier
from expense_categorizer.domain.catalog import DEFAULT_DESCRIPTION_KEYWORDS, KeywordTable
from expense_categorizer.domain.text import normalize_text
from expense_categorizer.models import KEYWORD, HistoricalExpense, Prediction

SATURATION_MATCHES = 3


class DescriptionKeywordMatcher(Classifier):
    """
    Keyword scan over the free-text description.

    Only runs for users with some history; the history itself is not read.
    """

    def __init__(self, table: KeywordTable = DEFAULT_DESCRIPTION_KEYWORDS):
        self.table = table

    def analyze(
        self, description: str | None, history: Sequence[HistoricalExpense]
    ) -> Prediction | None:
        if not description or not history:
            return None

        text = normalize_text(description)
        best_category: str | None = None
        best_score = 0.0
        best_keywords: tuple[str, ...] = ()

        for group in self.table:
            matched = tuple(keyword for keyword in group.keywords if keyword in text)
            if not matched:
                continue
            score = min(len(matched) / SATURATION_MATCHES, 1.0)
            # Strictly greater keeps the first-declared category on ties
            if score > best_score:
                best_category, best_score, best_keywords = group.category, score, matched

        if best_category is None:
            return None

        return Prediction(
            category=best_category,
            confidence=round(0.5 + best_score * 0.3, 3),
            source=KEYWORD,
            keywords=best_keywords,
        )

    def classify(
        self,
        merchant: str | None,
        amount: float | None,
        description: str | None,
        history: Sequence[HistoricalExpense],
    ) -> Prediction | None:
        return self.analyze(description, history)
