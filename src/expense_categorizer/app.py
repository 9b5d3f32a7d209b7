from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from expense_categorizer.api.routes import predict
from expense_categorizer.core import settings
from expense_categorizer.domain.catalog import (
    DEFAULT_DESCRIPTION_KEYWORDS,
    DEFAULT_RULE_CATALOG,
    load_keyword_table,
    load_rule_catalog,
)
from expense_categorizer.logger import get_logger, setup_logging
from expense_categorizer.manager import CategoryPredictor

logger = get_logger(__name__)


def build_predictor() -> CategoryPredictor:
    rules_path = settings.get_env_path("RULES_PATH")
    keywords_path = settings.get_env_path("DESCRIPTION_KEYWORDS_PATH")

    catalog = load_rule_catalog(rules_path) if rules_path else DEFAULT_RULE_CATALOG
    keyword_table = load_keyword_table(keywords_path) if keywords_path else DEFAULT_DESCRIPTION_KEYWORDS
    if rules_path:
        logger.info("Loaded rule catalog from %s (%d categories).", rules_path, len(catalog))
    if keywords_path:
        logger.info("Loaded description keywords from %s.", keywords_path)

    return CategoryPredictor(
        catalog=catalog,
        keyword_table=keyword_table,
        settings=settings.PredictorSettings.from_env(),
    )


def create_app() -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing predictor...")
        settings.log_environment()
        app.state.predictor = build_predictor()
        logger.info(
            "Predictor ready (threshold=%.2f).",
            app.state.predictor.settings.confidence_threshold,
        )
        yield
        logger.info("Service shutting down.")

    app = FastAPI(title="Expense Categorizer", lifespan=lifespan)
    app.include_router(predict.router)
    return app


app = create_app()
