from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from integrations.amazon.models import CatalogEntry

from .models import GiftContext, ScoredCandidate, SearchIntent

logger = logging.getLogger(__name__)

DEFAULT_REASON = "General relevance match"
CAMERA_BAG_REASON = "Perfect camera bag match"

_CAMERA_BAG_TERMS = {"camera", "backpack", "bag"}
_BOOSTED_SOURCES = {"amazon", "best buy", "bestbuy"}


@dataclass(frozen=True)
class ScoringWeights:
    """Points awarded by each factor, all on the 0-100 relevance scale."""

    category_match: float = 40.0
    title_keyword: float = 15.0
    title_keyword_cap: float = 30.0
    description_keyword: float = 10.0
    description_keyword_cap: float = 20.0
    source_boost: float = 10.0
    camera_bag_boost: float = 20.0
    age_under_18: float = 10.0
    age_under_30: float = 20.0
    age_under_50: float = 15.0
    age_50_plus: float = 10.0
    budget_within: float = 20.0
    budget_near: float = 10.0
    budget_over: float = -10.0
    budget_near_ratio: float = 1.2
    interest_match: float = 15.0
    occasion_keyword: float = 10.0
    rating_per_star: float = 10.0
    popular_reviews: float = 10.0
    popular_review_threshold: int = 100
    floor: float = 25.0
    ceiling: float = 100.0


DEFAULT_WEIGHTS = ScoringWeights()


def _normalized(values: Sequence[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(v.strip().lower() for v in values if v and v.strip()))


@dataclass(frozen=True)
class RankingContext:
    category: str = "general"
    subcategory: str = "general"
    keywords: tuple[str, ...] = ()
    age: Optional[int] = None
    budget: Optional[float] = None
    interests: tuple[str, ...] = ()
    occasion_keywords: tuple[str, ...] = ()

    @classmethod
    def from_intent(
        cls,
        intent: SearchIntent,
        context: Optional[GiftContext] = None,
        occasion_keywords: Sequence[str] = (),
    ) -> "RankingContext":
        return cls(
            category=(intent.category or "general").lower(),
            subcategory=(intent.subcategory or intent.category or "general").lower(),
            keywords=_normalized(intent.keywords),
            age=context.age if context else None,
            budget=context.budget if context else None,
            interests=_normalized(context.interests) if context else (),
            occasion_keywords=tuple(k.lower() for k in occasion_keywords),
        )


@dataclass(frozen=True)
class FactorScore:
    points: float = 0.0
    reason: Optional[str] = None
    overrides_reason: bool = False


class ScoringFactor:
    name = "factor"

    def score(self, candidate: CatalogEntry, ctx: RankingContext, weights: ScoringWeights) -> FactorScore:
        raise NotImplementedError


class CategoryMatch(ScoringFactor):
    name = "category"

    def score(self, candidate, ctx, weights):
        category = candidate.category.lower()
        targets = [t for t in (ctx.category, ctx.subcategory) if t and t != "general"]
        if any(target in category for target in targets):
            return FactorScore(weights.category_match, "Category match")
        return FactorScore()


class TitleKeywords(ScoringFactor):
    name = "title"

    def score(self, candidate, ctx, weights):
        title = candidate.title.lower()
        matches = sum(1 for kw in ctx.keywords if kw in title)
        if not matches:
            return FactorScore()
        return FactorScore(min(weights.title_keyword_cap, matches * weights.title_keyword), "Title keyword match")


class DescriptionKeywords(ScoringFactor):
    name = "description"

    def score(self, candidate, ctx, weights):
        description = candidate.description.lower()
        matches = sum(1 for kw in ctx.keywords if kw in description)
        if not matches:
            return FactorScore()
        points = min(weights.description_keyword_cap, matches * weights.description_keyword)
        return FactorScore(points, "Description keyword match")


class SourceBoost(ScoringFactor):
    name = "source"

    def score(self, candidate, ctx, weights):
        if ctx.category == "electronics" and candidate.source.lower() in _BOOSTED_SOURCES:
            return FactorScore(weights.source_boost, f"Trusted {candidate.source} electronics")
        return FactorScore()


class CameraBagBoost(ScoringFactor):
    name = "camera_bag"

    def score(self, candidate, ctx, weights):
        if not _CAMERA_BAG_TERMS.intersection(ctx.keywords):
            return FactorScore()
        title = candidate.title.lower()
        if "camera" in title and ("backpack" in title or "bag" in title):
            return FactorScore(weights.camera_bag_boost, CAMERA_BAG_REASON, overrides_reason=True)
        return FactorScore()


class InterestMatch(ScoringFactor):
    """Every interest found in the candidate's category or title counts, in any order."""

    name = "interest"

    def score(self, candidate, ctx, weights):
        category = candidate.category.lower()
        title = candidate.title.lower()
        matches = sum(1 for interest in ctx.interests if interest in category or interest in title)
        if not matches:
            return FactorScore()
        return FactorScore(matches * weights.interest_match, "Matches their interests")


class AgeFit(ScoringFactor):
    name = "age"

    def score(self, candidate, ctx, weights):
        if ctx.age is None:
            return FactorScore()
        if ctx.age < 18:
            points = weights.age_under_18
        elif ctx.age < 30:
            points = weights.age_under_30
        elif ctx.age < 50:
            points = weights.age_under_50
        else:
            points = weights.age_50_plus
        return FactorScore(points, "Age appropriate")


class BudgetFit(ScoringFactor):
    name = "budget"

    def score(self, candidate, ctx, weights):
        price = candidate.price_value
        if not ctx.budget or price is None:
            return FactorScore()
        if price <= ctx.budget:
            return FactorScore(weights.budget_within, "Within budget")
        if price <= ctx.budget * weights.budget_near_ratio:
            return FactorScore(weights.budget_near, "Slightly over budget")
        return FactorScore(weights.budget_over)


class OccasionFit(ScoringFactor):
    name = "occasion"

    def score(self, candidate, ctx, weights):
        title = candidate.title.lower()
        matches = sum(1 for kw in ctx.occasion_keywords if kw in title)
        if not matches:
            return FactorScore()
        return FactorScore(matches * weights.occasion_keyword, "Fits the occasion")


class RatingQuality(ScoringFactor):
    name = "rating"

    def score(self, candidate, ctx, weights):
        points = (candidate.rating - 3.0) * weights.rating_per_star
        if candidate.review_count > weights.popular_review_threshold:
            points += weights.popular_reviews
        return FactorScore(points, "Highly rated" if points > 0 else None)


KEYWORD_FACTORS: tuple[ScoringFactor, ...] = (
    CategoryMatch(),
    TitleKeywords(),
    DescriptionKeywords(),
    SourceBoost(),
    CameraBagBoost(),
)

ENHANCED_FACTORS: tuple[ScoringFactor, ...] = KEYWORD_FACTORS + (
    InterestMatch(),
    AgeFit(),
    BudgetFit(),
    OccasionFit(),
    RatingQuality(),
)


@dataclass
class ScoreResult:
    score: float
    reason: str
    contributions: dict[str, float] = field(default_factory=dict)


def clamp_score(value: float, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
    return max(weights.floor, min(weights.ceiling, value))


def score_candidate(
    candidate: CatalogEntry,
    ctx: RankingContext,
    *,
    factors: Sequence[ScoringFactor] = KEYWORD_FACTORS,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> ScoreResult:
    total = 0.0
    contributions: dict[str, float] = {}
    override: Optional[str] = None
    dominant: tuple[float, Optional[str]] = (0.0, None)

    for factor in factors:
        result = factor.score(candidate, ctx, weights)
        if not result.points:
            continue
        contributions[factor.name] = result.points
        total += result.points
        if result.overrides_reason and result.reason:
            override = result.reason
        if result.reason and result.points > dominant[0]:
            dominant = (result.points, result.reason)

    reason = override or dominant[1] or DEFAULT_REASON
    return ScoreResult(score=clamp_score(total, weights), reason=reason, contributions=contributions)


def to_scored(
    candidate: CatalogEntry,
    score: float,
    reason: Optional[str],
    *,
    ai_ranked: bool = False,
) -> ScoredCandidate:
    data: dict[str, Any] = candidate.model_dump(include=set(CatalogEntry.model_fields))
    return ScoredCandidate(**data, relevance_score=score, match_reason=reason, ai_ranked=ai_ranked)


def sort_by_relevance(items: Sequence[ScoredCandidate]) -> list[ScoredCandidate]:
    # sorted() keeps insertion order for equal scores, also with reverse=True.
    return sorted(items, key=lambda item: item.relevance_score, reverse=True)


def rank_candidates(
    candidates: Sequence[CatalogEntry],
    ctx: RankingContext,
    *,
    top_n: Optional[int] = 8,
    factors: Sequence[ScoringFactor] = KEYWORD_FACTORS,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> list[ScoredCandidate]:
    scored: list[ScoredCandidate] = []
    for candidate in candidates:
        result = score_candidate(candidate, ctx, factors=factors, weights=weights)
        scored.append(to_scored(candidate, result.score, result.reason))

    ranked = sort_by_relevance(scored)
    if top_n is not None:
        ranked = ranked[:top_n]
    logger.debug("Ranked %d candidates, returning %d", len(candidates), len(ranked))
    return ranked
