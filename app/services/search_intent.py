import logging
import re
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from app.prompts import registry
from app.services.llm.interface import LLMClient, LLMError, LLMUnavailable, MalformedResponse, Message, parse_json_object
from integrations.amazon.models import CatalogEntry
from recommendations.models import GiftContext, ScoredCandidate, SearchIntent
from recommendations.ranker import (
    DEFAULT_WEIGHTS,
    RankingContext,
    ScoringWeights,
    clamp_score,
    rank_candidates,
    sort_by_relevance,
    to_scored,
)

logger = logging.getLogger(__name__)

DEFAULT_AI_SCORE = 50.0
DEFAULT_AI_REASON = "Good match for your search"

_AGE_PATTERNS = {
    "child": re.compile(r"\b(?:child|kid|toddler|baby|infant|little|young)\b"),
    "teen": re.compile(r"\b(?:teen|teenager|adolescent|13|14|15|16|17|18|years?\s+old)\b"),
}

# Checked in order; the first matching interest decides the category.
_INTEREST_PATTERNS = (
    ("books", re.compile(r"\b(?:book|reading|novel|literature|story|library|bookworm)\b")),
    ("tech", re.compile(r"\b(?:tech|technology|gadget|electronic|computer|phone|laptop)\b")),
    ("fashion", re.compile(r"\b(?:fashion|clothes|clothing|style|dress|shirt|jewelry)\b")),
    ("gaming", re.compile(r"\b(?:game|gaming|video\s+game|console|nintendo|playstation|xbox)\b")),
    ("art", re.compile(r"\b(?:art|creative|painting|drawing|craft|music|instrument)\b")),
)


def _age_group(query: str) -> str:
    for group, pattern in _AGE_PATTERNS.items():
        if pattern.search(query):
            return group
    return "adult"


def smart_fallback_analysis(query: str) -> SearchIntent:
    """Pattern-based intent used whenever the model cannot be asked."""
    lowered = query.lower()
    group = _age_group(lowered)

    interest = next((name for name, pattern in _INTEREST_PATTERNS if pattern.search(lowered)), None)
    if interest == "books":
        subcategory = {"teen": "young adult books", "child": "children books"}.get(group, "adult books")
        return SearchIntent(category="books", subcategory=subcategory, keywords=["books", "reading", subcategory])
    if interest == "tech":
        subcategory = "teen tech" if group == "teen" else "electronics"
        return SearchIntent(category="electronics", subcategory=subcategory, keywords=["electronics", "technology", "gadgets"])
    if interest == "fashion":
        subcategory = "teen fashion" if group == "teen" else "clothing"
        return SearchIntent(category="fashion", subcategory=subcategory, keywords=["clothing", "fashion", "style"])
    if interest == "gaming":
        return SearchIntent(category="gaming", subcategory="video games", keywords=["games", "gaming", "video games"])
    if interest == "art":
        return SearchIntent(
            category="arts and crafts",
            subcategory="creative supplies",
            keywords=["art supplies", "creative", "craft"],
        )
    return SearchIntent(keywords=[query])


class _Enhancement(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    index: int
    relevance_score: Optional[float] = None
    match_reason: Optional[str] = None


class _RankingPayload(BaseModel):
    rankings: List[int] = Field(..., min_length=1)
    enhanced: List[_Enhancement] = Field(default_factory=list)


class SearchIntentService:
    def __init__(
        self,
        llm: Optional[LLMClient],
        weights: ScoringWeights = DEFAULT_WEIGHTS,
        model: Optional[str] = None,
    ):
        self.llm = llm
        self.weights = weights
        self.model = model

    async def analyze_search_intent(self, query: str) -> SearchIntent:
        try:
            return await self._ask_intent(query)
        except LLMError as e:
            logger.warning(f"Search intent analysis unavailable ({e}); using pattern fallback")
        except Exception:
            logger.exception("Unexpected error analysing search intent; using pattern fallback")
        return smart_fallback_analysis(query)

    async def _ask_intent(self, query: str) -> SearchIntent:
        if self.llm is None:
            raise LLMUnavailable("No LLM client configured")

        response = await self.llm.generate_text(
            messages=[Message(role="user", content=registry.render("search_intent", query=query))],
            model=self.model,
            system_prompt=registry.get_prompt("search_intent_system"),
            max_tokens=200,
            temperature=0.3,
            json_mode=True,
        )
        data = parse_json_object(response.content)
        try:
            intent = SearchIntent.model_validate(data)
        except ValidationError as e:
            raise MalformedResponse(f"Search intent has unexpected shape: {e.error_count()} errors") from e
        if not intent.keywords:
            intent = intent.model_copy(update={"keywords": [query]})
        return intent

    async def enhance_product_matching(
        self,
        products: Sequence[CatalogEntry],
        intent: SearchIntent,
        context: Optional[GiftContext] = None,
        top_n: Optional[int] = None,
    ) -> List[ScoredCandidate]:
        """
        Re-rank products with the model; fall back to deterministic scoring.
        Both paths report scores on the same 0-100 scale.
        """
        if not products:
            return []

        try:
            ranked = await self._ask_rankings(products, intent)
        except LLMError as e:
            logger.warning(f"AI product ranking unavailable ({e}); using keyword scoring")
        except Exception:
            logger.exception("Unexpected error ranking products; using keyword scoring")
        else:
            return ranked[:top_n] if top_n is not None else ranked

        ctx = RankingContext.from_intent(intent, context)
        return rank_candidates(products, ctx, top_n=top_n, weights=self.weights)

    async def _ask_rankings(self, products: Sequence[CatalogEntry], intent: SearchIntent) -> List[ScoredCandidate]:
        if self.llm is None:
            raise LLMUnavailable("No LLM client configured")

        listing = "\n".join(f"{i}: {p.title} - {p.description}" for i, p in enumerate(products))
        prompt = registry.render(
            "rank_products",
            keywords=" ".join(intent.keywords),
            category=intent.category,
            subcategory=intent.subcategory,
            features=", ".join(intent.features) or "none",
            products=listing,
        )
        response = await self.llm.generate_text(
            messages=[Message(role="user", content=prompt)],
            model=self.model,
            system_prompt=registry.get_prompt("rank_products_system"),
            max_tokens=500,
            temperature=0.2,
            json_mode=True,
        )
        data = parse_json_object(response.content)
        try:
            payload = _RankingPayload.model_validate(data)
        except ValidationError as e:
            raise MalformedResponse(f"Ranking payload has unexpected shape: {e.error_count()} errors") from e

        enhancements = {item.index: item for item in payload.enhanced}
        ranked: List[ScoredCandidate] = []
        seen: set[int] = set()
        for index in payload.rankings:
            if index in seen or not 0 <= index < len(products):
                continue
            seen.add(index)
            enhancement = enhancements.get(index)
            score = enhancement.relevance_score if enhancement and enhancement.relevance_score is not None else DEFAULT_AI_SCORE
            reason = enhancement.match_reason if enhancement and enhancement.match_reason else DEFAULT_AI_REASON
            ranked.append(to_scored(products[index], clamp_score(score, self.weights), reason, ai_ranked=True))

        if not ranked:
            raise MalformedResponse("Ranking referenced no known products")
        # Model order only breaks ties between equal scores.
        return sort_by_relevance(ranked)
