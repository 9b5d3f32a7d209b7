from collections.abc import Callable, Sequence
from typing import Protocol

from rapidfuzz import fuzz, process


class SimilarityMetric(Protocol):
    """
    Text similarity used for fuzzy merchant lookup.

    Implementations must be symmetric, bounded in [0, 1] and increase with
    shared substrings; the fuzzy threshold is calibrated for that class of
    metric (bigram Dice, normalized Indel and similar).
    """

    def similarity(self, a: str, b: str) -> float:
        ...

    def best_match(self, query: str, candidates: Sequence[str]) -> tuple[int, float] | None:
        """Index and rating of the closest candidate, or None if there are none."""
        ...


class RapidfuzzSimilarity:
    def __init__(self, scorer: Callable[..., float] = fuzz.ratio):
        self.scorer = scorer

    def similarity(self, a: str, b: str) -> float:
        return self.scorer(a, b) / 100.0

    def best_match(self, query: str, candidates: Sequence[str]) -> tuple[int, float] | None:
        if not candidates:
            return None
        result = process.extractOne(query, candidates, scorer=self.scorer)
        if result is None:
            return None
        _, score, index = result
        return index, score / 100.0
