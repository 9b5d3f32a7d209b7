from pydantic import BaseModel, ConfigDict, Field

OTHER_CATEGORY = "other"

# Prediction sources
EXACT_MERCHANT = "exact_merchant"
FUZZY_MERCHANT = "fuzzy_merchant"
KEYWORD = "keyword"
GENERIC = "generic"
NO_SOURCE = "none"


class HistoricalExpense(BaseModel):
    """A previously categorized expense supplied by the host's data store."""
    model_config = ConfigDict(frozen=True, extra="ignore")

    merchant: str | None = None
    category: str | None = None
    amount: float | None = None
    description: str | None = None


class TransactionInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    merchant: str | None = None
    amount: float | None = None
    description: str | None = None


class Alternative(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str
    confidence: float = Field(ge=0.0, le=1.0)


class Prediction(BaseModel):
    """
    Output of a single matcher. Only the fields relevant to the producing
    source are set; the rest stay None.
    """
    model_config = ConfigDict(frozen=True)

    category: str
    confidence: float = Field(ge=0.0, le=1.0)
    source: str
    count: int | None = None  # exact_merchant: matching visits
    matched_merchant: str | None = None  # fuzzy_merchant
    similarity: float | None = None  # fuzzy_merchant
    keywords: tuple[str, ...] | None = None  # keyword
    alternatives: tuple[Alternative, ...] | None = None  # generic


class AggregateResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str | None
    confidence: float = Field(ge=0.0, le=1.0)
    source: str


class PredictionResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    category: str | None
    confidence: float = Field(ge=0.0, le=1.0)
    below_threshold: bool
    alternatives: list[Alternative]
    source: str
