"""
Keyword and amount heuristics against the Rule Catalog.

This is the universal fallback: it always produces a prediction, even when the
best it can say is ``other`` with a low confidence.
"""
import math
from collections.abc import Sequence

from expense_categorizer.classifiers.base import Classifier
from expense_categorizer.core.settings import PredictorSettings
from expense_categorizer.domain.catalog import DEFAULT_RULE_CATALOG, AmountRange, RuleCatalog
from expense_categorizer.domain.text import normalize_text, split_words
from expense_categorizer.models import (
    GENERIC,
    OTHER_CATEGORY,
    Alternative,
    HistoricalExpense,
    Prediction,
)

NEUTRAL_AMOUNT_SCORE = 0.5


def keyword_score(text: str | None, keywords: Sequence[str]) -> float:
    """
    Score how strongly ``text`` matches a keyword list, in [0, 1].

    Longer keywords weigh more (``len / 8``). A keyword that also shows up
    inside a single whitespace-delimited word counts as an exact-word hit,
    which multiplies its weight by 1.5 and boosts the final score by 1.2.
    """
    normalized = normalize_text(text)
    if not normalized:
        return 0.0

    words = split_words(normalized)
    match_count = 0
    total_weight = 0.0
    has_exact_match = False

    for keyword in keywords:
        if keyword not in normalized:
            continue
        weight = len(keyword) / 8
        if any(word == keyword or keyword in word for word in words):
            weight *= 1.5
            has_exact_match = True
        match_count += 1
        total_weight += weight

    if match_count == 0:
        return 0.0

    score = min(total_weight / 1.5, 1.0)
    if has_exact_match:
        score = min(score * 1.2, 1.0)
    return score


def amount_score(amount: float | None, amount_range: AmountRange, typical_amount: float) -> float:
    """
    Score how plausible ``amount`` is for a category, in [0, 1].

    Missing, NaN or non-positive amounts are neutral (0.5). In-range amounts never
    score below 0.7; out-of-range amounts decay towards 0.3 (below) or 0.2 (above).
    """
    if amount is None or math.isnan(amount) or amount <= 0:
        return NEUTRAL_AMOUNT_SCORE

    if amount_range.contains(amount):
        typical_score = 1 - abs(amount - typical_amount) / amount_range.size
        return max(0.7, min(typical_score, 1.0))

    if amount < amount_range.min:
        return max(0.3, 0.7 - (amount_range.min - amount) / amount_range.min)
    return max(0.2, 0.7 - (amount - amount_range.max) / amount_range.max)


def composite_score(keyword: float, amount: float) -> float:
    # Stronger keyword evidence shifts weight away from the amount
    if keyword > 0.7:
        return keyword * 0.85 + amount * 0.15
    if keyword > 0.4:
        return keyword * 0.75 + amount * 0.25
    return keyword * 0.6 + amount * 0.4


class GenericMatcher(Classifier):
    def __init__(
        self,
        catalog: RuleCatalog = DEFAULT_RULE_CATALOG,
        settings: PredictorSettings | None = None,
    ):
        self.catalog = catalog
        self.settings = settings or PredictorSettings()

    def score_categories(
        self, merchant: str | None, amount: float | None, description: str | None
    ) -> list[tuple[str, float]]:
        """All catalog categories ranked by composite score; ties keep catalog order."""
        text = f"{merchant or ''} {description or ''}"
        scores = [
            (
                rule.category,
                composite_score(
                    keyword_score(text, rule.keywords),
                    amount_score(amount, rule.amount_range, rule.typical_amount),
                ),
            )
            for rule in self.catalog
        ]
        # sorted() is stable, so equal scores stay in declaration order
        return sorted(scores, key=lambda item: item[1], reverse=True)

    def match(
        self, merchant: str | None, amount: float | None = None, description: str | None = None
    ) -> Prediction:
        if not merchant and not description:
            return Prediction(
                category=OTHER_CATEGORY,
                confidence=self.settings.empty_input_confidence,
                source=GENERIC,
                alternatives=(),
            )

        ranked = self.score_categories(merchant, amount, description)
        top_category, top_score = ranked[0]
        alternatives = tuple(
            Alternative(category=category, confidence=round(score, 3))
            for category, score in ranked[1:4]
            if score > self.settings.generic_alternative_floor
        )

        if top_score < self.settings.generic_min_confidence:
            top_category = OTHER_CATEGORY

        return Prediction(
            category=top_category,
            confidence=round(top_score, 3),
            source=GENERIC,
            alternatives=alternatives,
        )

    def classify(
        self,
        merchant: str | None,
        amount: float | None,
        description: str | None,
        history: Sequence[HistoricalExpense],
    ) -> Prediction:
        return self.match(merchant, amount, description)
