import pytest

from expense_categorizer.classifiers.generic import (
    GenericMatcher,
    amount_score,
    composite_score,
    keyword_score,
)
from expense_categorizer.domain.catalog import (
    DEFAULT_RULE_CATALOG,
    AmountRange,
    CategoryRule,
    RuleCatalog,
)


@pytest.fixture
def matcher() -> GenericMatcher:
    return GenericMatcher()


def test_keyword_score_exact_word_saturates() -> None:
    food = DEFAULT_RULE_CATALOG.get("food")
    assert keyword_score("Starbucks", food.keywords) == 1.0


def test_keyword_score_short_keyword() -> None:
    # 2/8 * 1.5 = 0.375 -> 0.25, boosted by 1.2
    assert keyword_score("BP", ["bp"]) == pytest.approx(0.3)


def test_keyword_score_multiword_keyword_is_not_an_exact_word() -> None:
    # "home depot" is a substring but no single token contains it
    assert keyword_score("The Home Depot store", ["home depot"]) == pytest.approx(1.25 / 1.5)


def test_keyword_score_keyword_inside_a_token_counts_as_exact_word() -> None:
    assert keyword_score("foodstore", ["food"]) == pytest.approx(0.6)


def test_keyword_score_empty_or_unmatched() -> None:
    assert keyword_score(None, ["coffee"]) == 0.0
    assert keyword_score("   ", ["coffee"]) == 0.0
    assert keyword_score("hardware", ["coffee"]) == 0.0


@pytest.mark.parametrize("amount", [0, -12.5, None, float("nan")])
def test_amount_score_is_neutral_without_a_positive_amount(amount) -> None:
    assert amount_score(amount, AmountRange(3, 150), 15) == 0.5


def test_amount_score_in_range() -> None:
    assert amount_score(6, AmountRange(3, 150), 15) == pytest.approx(1 - 9 / 147)
    # Far from typical but in range never drops below 0.7
    assert amount_score(150, AmountRange(3, 150), 15) == 0.7


def test_amount_score_below_range() -> None:
    assert amount_score(15, AmountRange(20, 300), 60) == pytest.approx(0.45)
    assert amount_score(10, AmountRange(20, 300), 60) == 0.3


def test_amount_score_above_range() -> None:
    assert amount_score(180, AmountRange(3, 150), 15) == pytest.approx(0.5)
    assert amount_score(500, AmountRange(3, 150), 15) == 0.2


def test_composite_score_bands() -> None:
    assert composite_score(0.8, 0.5) == pytest.approx(0.755)
    assert composite_score(0.7, 1.0) == pytest.approx(0.775)
    assert composite_score(0.5, 1.0) == pytest.approx(0.625)
    assert composite_score(0.4, 1.0) == pytest.approx(0.64)
    assert composite_score(0.0, 0.5) == pytest.approx(0.2)


def test_starbucks_scores_as_food(matcher: GenericMatcher) -> None:
    result = matcher.match("Starbucks", 6, "")
    assert result.category == "food"
    assert result.confidence == 0.991
    assert result.source == "generic"
    assert [alt.category for alt in result.alternatives] == ["fun", "transport"]
    assert [alt.confidence for alt in result.alternatives] == [0.351, 0.28]


def test_empty_merchant_and_description_short_circuits(matcher: GenericMatcher) -> None:
    result = matcher.match(None, 0, None)
    assert result.category == "other"
    assert result.confidence == 0.1
    assert result.alternatives == ()
    assert result.source == "generic"
    assert matcher.match("", 50.0, "").category == "other"


def test_unknown_merchant_falls_back_to_other(matcher: GenericMatcher) -> None:
    result = matcher.match("Unknown Store XYZ", 50.0)
    assert result.category == "other"
    assert result.confidence == 0.386
    # The computed runner-ups are kept even when the winner is replaced
    assert [alt.category for alt in result.alternatives] == ["transport", "fun", "home"]


@pytest.mark.parametrize(
    ("merchant", "amount", "expected"),
    [
        ("Whole Foods Market", 67.32, "groceries"),
        ("Shell Gas Station", 45.0, "transport"),
        ("Home Depot", 87.45, "home"),
        ("AMC Theater", 28.5, "fun"),
        ("Target Groceries", 80.0, "groceries"),
        ("STARBUCKS", 5.0, "food"),
        ("StArBuCkS", 5.0, "food"),
    ],
)
def test_known_merchants(matcher: GenericMatcher, merchant: str, amount: float, expected: str) -> None:
    result = matcher.match(merchant, amount)
    assert result.category == expected
    assert result.confidence > 0.5


def test_amount_outside_range_lowers_confidence(matcher: GenericMatcher) -> None:
    coffee = matcher.match("Starbucks", 5.0)
    large = matcher.match("Starbucks", 500.0)
    assert coffee.confidence > 0.7
    assert large.confidence < coffee.confidence


def test_description_contributes_keywords(matcher: GenericMatcher) -> None:
    result = matcher.match("Acme", 12.0, "lunch at the diner")
    assert result.category == "food"


def test_alternatives_are_limited_and_exclude_winner(matcher: GenericMatcher) -> None:
    result = matcher.match("Whole Foods Market", 67.32)
    assert 0 < len(result.alternatives) <= 3
    assert all(alt.category != result.category for alt in result.alternatives)
    assert all(alt.confidence > 0.2 for alt in result.alternatives)
    confidences = [alt.confidence for alt in result.alternatives]
    assert confidences == sorted(confidences, reverse=True)


def test_ties_go_to_first_declared_category() -> None:
    def rule(name: str) -> CategoryRule:
        return CategoryRule(name, ("shop",), AmountRange(10, 100), 50)

    matcher = GenericMatcher(catalog=RuleCatalog((rule("beta"), rule("alpha"))))
    result = matcher.match("shop", 50)
    assert result.category == "beta"
    assert result.confidence == pytest.approx(0.7)
    assert [alt.category for alt in result.alternatives] == ["alpha"]


def test_classify_ignores_history(matcher: GenericMatcher) -> None:
    assert matcher.classify("Starbucks", 6, "", []) == matcher.match("Starbucks", 6, "")


def test_nan_amount_scores_like_missing_amount(matcher: GenericMatcher) -> None:
    assert matcher.match("Starbucks", float("nan")) == matcher.match("Starbucks", None)
