import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.services.gift_advisor import GiftAdvisor
from app.services.recommendation import RecommendationPipeline, get_recommendation_pipeline
from app.services.search_intent import SearchIntentService
from app.utils.errors import install_exception_handlers
from recommendations.enhanced import EnhancedRecommendationEngine
from routes.ai import router as ai_router
from routes.search import router as search_router


@pytest.fixture
def pipeline(catalog, ruleset, affiliate):
    return RecommendationPipeline(
        catalog=catalog,
        ruleset=ruleset,
        advisor=GiftAdvisor(None, catalog, affiliate, ruleset),
        search_intent=SearchIntentService(None),
        enhanced=EnhancedRecommendationEngine(catalog, ruleset=ruleset),
    )


@pytest.fixture
def app(pipeline):
    app = FastAPI()
    install_exception_handlers(app)
    app.include_router(search_router)
    app.include_router(ai_router)
    app.dependency_overrides[get_recommendation_pipeline] = lambda: pipeline
    return app


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)
