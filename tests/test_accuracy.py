"""Regression guard for the calibrated constants: accuracy on a labeled set."""
import pytest

from expense_categorizer.manager import CategoryPredictor

LABELED_TRANSACTIONS = [
    ("Walmart", 45.50, "groceries", "groceries"),
    ("Whole Foods", 67.23, None, "groceries"),
    ("Kroger", 41.67, None, "groceries"),
    ("Safeway", 89.45, "weekly shopping", "groceries"),
    ("Starbucks", 12.50, "coffee", "food"),
    ("Chipotle", 23.40, "dinner", "food"),
    ("Chevron", 55.30, "fuel", "transport"),
    ("Exxon", 62.40, "gasoline", "transport"),
    ("Lyft", 18.50, None, "transport"),
    ("Home Depot", 125.50, "tools", "home"),
    ("IKEA", 234.50, "furniture", "home"),
    ("AMC", 45.00, "movie night", "fun"),
    ("Netflix", 15.99, None, "fun"),
    ("Spotify", 9.99, None, "fun"),
]


@pytest.fixture(scope="module")
def results() -> list[tuple[str, str | None, float]]:
    predictor = CategoryPredictor()
    outcomes = []
    for merchant, amount, description, expected in LABELED_TRANSACTIONS:
        response = predictor.predict(merchant, amount, description, [])
        outcomes.append((expected, response.category, response.confidence))
    return outcomes


def test_accuracy_without_history(results) -> None:
    correct = sum(1 for expected, predicted, _ in results if predicted == expected)
    assert correct / len(results) >= 0.9


def test_high_confidence_predictions_are_reliable(results) -> None:
    confident = [(expected, predicted) for expected, predicted, confidence in results if confidence >= 0.8]
    assert len(confident) >= len(results) // 2
    correct = sum(1 for expected, predicted in confident if predicted == expected)
    assert correct / len(confident) >= 0.95
