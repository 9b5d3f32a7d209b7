from pydantic import BaseModel, Field

from expense_categorizer.models import HistoricalExpense, TransactionInput


class PredictRequest(BaseModel):
    merchant: str | None = None
    amount: float | None = None
    description: str | None = None
    history: list[HistoricalExpense] = Field(default_factory=list)


class BatchPredictRequest(BaseModel):
    transactions: list[TransactionInput]
    history: list[HistoricalExpense] = Field(default_factory=list)
