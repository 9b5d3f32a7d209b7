from abc import ABC, abstractmethod
from collections.abc import Sequence

from expense_categorizer.models import HistoricalExpense, Prediction


class Classifier(ABC):
    @abstractmethod
    def classify(
        self,
        merchant: str | None,
        amount: float | None,
        description: str | None,
        history: Sequence[HistoricalExpense],
    ) -> Prediction | None:
        """Return a prediction, or None when this signal has nothing to say."""
        pass
