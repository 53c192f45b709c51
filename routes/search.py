from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.services.recommendation import RecommendationPipeline, get_recommendation_pipeline
from app.utils.errors import BadRequestError
from integrations.amazon.models import CatalogEntry
from integrations.amazon.search import search_real_amazon_products
from recommendations.models import ScoredCandidate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["search"])


def _require_query(query: Optional[str]) -> str:
    if query is None or not query.strip():
        raise BadRequestError("Query parameter is required", {"query": "missing"})
    return query.strip()


@router.get("/search/products", response_model=list[ScoredCandidate], response_model_by_alias=True)
async def search_products(
    query: Optional[str] = Query(None),
    pipeline: RecommendationPipeline = Depends(get_recommendation_pipeline),
) -> list[ScoredCandidate]:
    query = _require_query(query)
    logger.info(f"Product search: '{query}'")
    return await pipeline.search_products(query)


@router.get("/affiliate/amazon/search", response_model=list[CatalogEntry], response_model_by_alias=True)
async def amazon_search(
    query: Optional[str] = Query(None),
    interests: Optional[str] = Query(None, description="Comma separated interests"),
    pipeline: RecommendationPipeline = Depends(get_recommendation_pipeline),
) -> list[CatalogEntry]:
    query = _require_query(query)
    interest_list = [i.strip() for i in (interests or "").split(",") if i.strip()]
    return search_real_amazon_products(query, interest_list, catalog=pipeline.catalog)
