from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from app.services.recommendation import RecommendationPipeline, get_recommendation_pipeline
from app.utils.errors import BadRequestError
from recommendations.models import (
    CamelModel,
    GiftContext,
    GiftRequest,
    GiftSuggestion,
    PersonalizedRecommendation,
    ScoredCandidate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class GiftMetadata(CamelModel):
    recipient: str
    occasion: str
    interests: list[str]
    generated_at: str


class GiftRecommendationsResponse(CamelModel):
    success: bool = True
    suggestions: list[GiftSuggestion]
    metadata: GiftMetadata


class ChatRequest(CamelModel):
    message: str
    top_n: Optional[int] = Field(None, ge=1, le=30)


class ChatResponse(CamelModel):
    success: bool = True
    context: GiftContext
    queries: list[str]
    recommendations: list[ScoredCandidate]


class EnhancedMetadata(CamelModel):
    total_recommendations: int
    average_score: float
    cache_hit: bool = False
    generated_at: str


class EnhancedResponse(CamelModel):
    success: bool = True
    recommendations: list[PersonalizedRecommendation]
    metadata: EnhancedMetadata


@router.post("/gift-recommendations", response_model=GiftRecommendationsResponse, response_model_by_alias=True)
async def gift_recommendations(
    payload: GiftRequest,
    pipeline: RecommendationPipeline = Depends(get_recommendation_pipeline),
) -> GiftRecommendationsResponse:
    logger.info(f"AI gift request for {payload.recipient} ({payload.occasion}), interests={payload.interests}")
    suggestions = await pipeline.gift_recommendations(payload)
    return GiftRecommendationsResponse(
        suggestions=suggestions,
        metadata=GiftMetadata(
            recipient=payload.recipient,
            occasion=payload.occasion,
            interests=payload.interests,
            generated_at=_now_iso(),
        ),
    )


@router.post("/chat-recommendations", response_model=ChatResponse, response_model_by_alias=True)
async def chat_recommendations(
    payload: ChatRequest,
    pipeline: RecommendationPipeline = Depends(get_recommendation_pipeline),
) -> ChatResponse:
    if not payload.message.strip():
        raise BadRequestError("Message is required", {"message": "blank"})
    result = await pipeline.chat_recommendations(payload.message, payload.top_n)
    return ChatResponse(context=result.context, queries=result.queries, recommendations=result.recommendations)


@router.post("/enhanced-recommendations", response_model=EnhancedResponse, response_model_by_alias=True)
async def enhanced_recommendations(
    payload: GiftRequest,
    pipeline: RecommendationPipeline = Depends(get_recommendation_pipeline),
) -> EnhancedResponse:
    recommendations, cache_hit = pipeline.enhanced_recommendations(payload)
    scores = [r.relevance_score for r in recommendations]
    average = round(sum(scores) / len(scores), 1) if scores else 0.0
    return EnhancedResponse(
        recommendations=recommendations,
        metadata=EnhancedMetadata(
            total_recommendations=len(recommendations),
            average_score=average,
            cache_hit=cache_hit,
            generated_at=_now_iso(),
        ),
    )
