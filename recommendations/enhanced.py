from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

from integrations.amazon.catalog import ProductCatalog
from integrations.amazon.models import CatalogEntry

from .cache import TTLCache, make_cache_key
from .models import GiftContext, GiftRequest, PersonalizedRecommendation, SearchIntent
from .ranker import (
    DEFAULT_WEIGHTS,
    ENHANCED_FACTORS,
    RankingContext,
    ScoringWeights,
    score_candidate,
)

logger = logging.getLogger(__name__)

PER_INTEREST_LIMIT = 3
OCCASION_LIMIT = 2
FALLBACK_TAG = "gift"
FALLBACK_SCORE = 60.0


def estimate_delivery(is_prime: bool, now: datetime) -> str:
    delivery = now + timedelta(days=2 if is_prime else 5)
    return f"{delivery.strftime('%A')}, {delivery.strftime('%b')} {delivery.day}"


def product_features(entry: CatalogEntry) -> list[str]:
    features = []
    if entry.is_prime_eligible:
        features.append("Prime Delivery")
    if entry.rating >= 4.5:
        features.append("Highly Rated")
    if entry.review_count > 1000:
        features.append("Popular Choice")
    return features


class EnhancedRecommendationEngine:
    def __init__(
        self,
        catalog: ProductCatalog,
        *,
        ruleset: dict[str, Any],
        cache: Optional[TTLCache] = None,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        top_n: int = 6,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.catalog = catalog
        self.ruleset = ruleset
        self.cache = cache
        self.weights = weights
        self.top_n = top_n
        self._clock = clock

    @staticmethod
    def cache_key(request: GiftRequest) -> str:
        # Interests stay in request order; the reasoning text follows it.
        return make_cache_key(
            f"{request.recipient}_{request.occasion}",
            request.effective_relationship,
            list(request.interests),
            request.budget,
            request.age,
        )

    def generate(self, request: GiftRequest) -> list[PersonalizedRecommendation]:
        recommendations, _ = self.generate_with_cache_status(request)
        return recommendations

    def generate_with_cache_status(self, request: GiftRequest) -> tuple[list[PersonalizedRecommendation], bool]:
        """Return personalized recommendations and whether they were served from cache."""
        key = self.cache_key(request)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                logger.info("Enhanced recommendations cache hit for %s", key)
                return cached, True

        try:
            recommendations = self._personalize(request)
        except Exception:
            logger.exception("Enhanced recommendations failed, using fallback")
            return self._fallback(request), False

        if self.cache is not None:
            self.cache.set(key, recommendations)
        return recommendations, False

    def _base_products(self, request: GiftRequest) -> list[CatalogEntry]:
        products: list[CatalogEntry] = []
        for interest in request.interests:
            products.extend(self.catalog.search(interest.lower(), request.interests)[:PER_INTEREST_LIMIT])
        products.extend(self.catalog.search(request.occasion.lower(), request.interests)[:OCCASION_LIMIT])

        unique: dict[str, CatalogEntry] = {}
        for product in products:
            unique.setdefault(product.id, product)
        return list(unique.values())

    def _ranking_context(self, request: GiftRequest) -> RankingContext:
        interests = [i.lower() for i in request.interests]
        intent = SearchIntent(keywords=interests)
        context = GiftContext(
            recipient_relationship=request.effective_relationship,
            age=request.age,
            occasion=request.occasion.lower(),
            interests=interests,
            budget=request.budget,
        )
        occasion_keywords = (self.ruleset.get("occasion_keywords") or {}).get(request.occasion.lower(), [])
        return RankingContext.from_intent(intent, context, occasion_keywords)

    def _personalize(self, request: GiftRequest) -> list[PersonalizedRecommendation]:
        ctx = self._ranking_context(request)
        now = self._clock()
        reasoning = f"Recommended based on {', '.join(request.interests)} interests"

        recommendations = []
        for product in self._base_products(request):
            result = score_candidate(product, ctx, factors=ENHANCED_FACTORS, weights=self.weights)
            recommendations.append(
                self._to_recommendation(product, result.score, result.reason, reasoning, now)
            )

        recommendations.sort(key=lambda item: item.relevance_score, reverse=True)
        logger.info("Enhanced engine scored %d products", len(recommendations))
        return recommendations[: self.top_n]

    def _fallback(self, request: GiftRequest) -> list[PersonalizedRecommendation]:
        now = self._clock()
        reason = f"Fallback recommendation for {request.occasion}"
        return [
            self._to_recommendation(product, FALLBACK_SCORE, reason, reason, now)
            for product in self.catalog.lookup_by_tag(FALLBACK_TAG)[:3]
        ]

    def _to_recommendation(
        self,
        product: CatalogEntry,
        score: float,
        reason: str,
        reasoning: str,
        now: datetime,
    ) -> PersonalizedRecommendation:
        return PersonalizedRecommendation(
            **product.model_dump(include=set(CatalogEntry.model_fields)),
            relevance_score=score,
            match_reason=reason,
            reasoning=reasoning,
            features=product_features(product),
            availability="InStock",
            estimated_delivery=estimate_delivery(product.is_prime_eligible, now),
        )
