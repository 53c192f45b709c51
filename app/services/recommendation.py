from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Optional

from app.config import Settings, get_settings
from app.services.gift_advisor import GiftAdvisor
from app.services.llm.factory import get_llm_client
from app.services.search_intent import SearchIntentService
from integrations.affiliates import AffiliateConfig
from integrations.amazon.catalog import ProductCatalog, load_catalog
from integrations.amazon.models import CatalogEntry
from integrations.amazon.search import search_real_amazon_products
from recommendations.cache import TTLCache
from recommendations.enhanced import EnhancedRecommendationEngine
from recommendations.intent import analyze_gift_intent, context_to_search_intent
from recommendations.models import (
    GiftContext,
    GiftRequest,
    GiftSuggestion,
    PersonalizedRecommendation,
    ScoredCandidate,
)
from recommendations.query_generator import build_smart_search_queries
from recommendations.query_rules_loader import load_ruleset
from recommendations.ranker import DEFAULT_WEIGHTS, ScoringWeights

logger = logging.getLogger(__name__)


@dataclass
class ChatRecommendations:
    context: GiftContext
    queries: list[str]
    recommendations: list[ScoredCandidate]


def _dedupe(products: list[CatalogEntry]) -> list[CatalogEntry]:
    unique: dict[str, CatalogEntry] = {}
    for product in products:
        unique.setdefault(product.id, product)
    return list(unique.values())


class RecommendationPipeline:
    """
    Intent -> queries -> catalog lookup -> ranking.
    Every collaborator is passed in; nothing here reads the environment.
    """

    def __init__(
        self,
        *,
        catalog: ProductCatalog,
        ruleset: dict[str, Any],
        advisor: GiftAdvisor,
        search_intent: SearchIntentService,
        enhanced: EnhancedRecommendationEngine,
        search_top_n: int = 8,
        chat_top_n: int = 6,
    ):
        self.catalog = catalog
        self.ruleset = ruleset
        self.advisor = advisor
        self.search_intent = search_intent
        self.enhanced = enhanced
        self.search_top_n = search_top_n
        self.chat_top_n = chat_top_n

    def _collect(self, queries: list[str], interests: list[str]) -> list[CatalogEntry]:
        products: list[CatalogEntry] = []
        for query in queries:
            products.extend(search_real_amazon_products(query, interests, catalog=self.catalog))
        return _dedupe(products)

    async def search_products(self, query: str) -> list[ScoredCandidate]:
        context = analyze_gift_intent(query, self.ruleset)
        queries = build_smart_search_queries(context, self.ruleset)
        logger.info(f"Search queries for '{query}': {queries}")

        intent = await self.search_intent.analyze_search_intent(query)
        products = self._collect([query, *queries], context.interests)
        logger.info(f"Collected {len(products)} catalog products for '{query}'")

        return await self.search_intent.enhance_product_matching(
            products, intent, context, top_n=self.search_top_n
        )

    async def chat_recommendations(self, message: str, top_n: Optional[int] = None) -> ChatRecommendations:
        context = analyze_gift_intent(message, self.ruleset)
        queries = build_smart_search_queries(context, self.ruleset)
        intent = context_to_search_intent(context, self.ruleset)
        products = self._collect(queries, context.interests)
        logger.info(f"Chat request produced {len(queries)} queries and {len(products)} products")

        recommendations = await self.search_intent.enhance_product_matching(
            products, intent, context, top_n=top_n or self.chat_top_n
        )
        return ChatRecommendations(context=context, queries=queries, recommendations=recommendations)

    async def gift_recommendations(self, request: GiftRequest) -> list[GiftSuggestion]:
        return await self.advisor.recommend(request)

    def enhanced_recommendations(self, request: GiftRequest) -> tuple[list[PersonalizedRecommendation], bool]:
        return self.enhanced.generate_with_cache_status(request)


def build_pipeline(
    settings: Settings,
    *,
    catalog: Optional[ProductCatalog] = None,
    ruleset: Optional[dict[str, Any]] = None,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> RecommendationPipeline:
    affiliate: AffiliateConfig = settings.affiliate_config()
    catalog = catalog or load_catalog(settings.catalog_path, affiliate)
    ruleset = ruleset or load_ruleset(settings.ruleset_path)
    llm = get_llm_client(settings)

    return RecommendationPipeline(
        catalog=catalog,
        ruleset=ruleset,
        advisor=GiftAdvisor(llm, catalog, affiliate, ruleset, model=settings.openai_model),
        search_intent=SearchIntentService(llm, weights, model=settings.openai_model),
        enhanced=EnhancedRecommendationEngine(
            catalog,
            ruleset=ruleset,
            cache=TTLCache(settings.reco_cache_ttl_seconds, settings.reco_cache_max_items),
            weights=weights,
            top_n=settings.chat_top_n,
        ),
        search_top_n=settings.search_top_n,
        chat_top_n=settings.chat_top_n,
    )


@lru_cache()
def get_recommendation_pipeline() -> RecommendationPipeline:
    return build_pipeline(get_settings())
