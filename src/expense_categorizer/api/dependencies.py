from fastapi import HTTPException, Request

from expense_categorizer.manager import CategoryPredictor


def get_predictor(request: Request) -> CategoryPredictor:
    predictor = getattr(request.app.state, "predictor", None)
    if predictor is None:
        raise HTTPException(status_code=500, detail="Predictor not initialized")
    return predictor
