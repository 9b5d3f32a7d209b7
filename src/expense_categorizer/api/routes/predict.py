from typing import Annotated

from fastapi import APIRouter, Depends

from expense_categorizer.api.dependencies import get_predictor
from expense_categorizer.api.schemas import BatchPredictRequest, PredictRequest
from expense_categorizer.manager import CategoryPredictor
from expense_categorizer.models import OTHER_CATEGORY, PredictionResponse

router = APIRouter()


@router.post("/predict", response_model=PredictionResponse)
def predict(
    req: PredictRequest,
    predictor: Annotated[CategoryPredictor, Depends(get_predictor)],
) -> PredictionResponse:
    return predictor.predict(req.merchant, req.amount, req.description, req.history)


@router.post("/predict/batch", response_model=list[PredictionResponse])
def predict_batch(
    req: BatchPredictRequest,
    predictor: Annotated[CategoryPredictor, Depends(get_predictor)],
) -> list[PredictionResponse]:
    return predictor.predict_many(req.transactions, req.history)


@router.get("/categories")
def get_categories(
    predictor: Annotated[CategoryPredictor, Depends(get_predictor)],
) -> list[str]:
    categories = list(predictor.categories)
    if OTHER_CATEGORY not in categories:
        categories.append(OTHER_CATEGORY)
    return categories


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
