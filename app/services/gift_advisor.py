import logging
import time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from app.prompts import registry
from app.services.llm.interface import LLMClient, LLMError, LLMUnavailable, MalformedResponse, Message, parse_json_object
from integrations.affiliates import AffiliateConfig, affiliate_url_for_hint
from integrations.amazon.catalog import ProductCatalog
from integrations.amazon.models import CatalogEntry
from recommendations.age_segment import get_age_segment
from recommendations.models import GiftRequest, GiftSuggestion

logger = logging.getLogger(__name__)

SUGGESTION_COUNT = 3
GENERIC_TAG = "gift"


class _LLMSuggestion(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title: str = Field(..., min_length=1)
    description: str = ""
    category: str = "Gift"
    estimated_price: str = "N/A"
    reasoning: str = ""
    search_term: Optional[str] = None
    affiliate_hint: str = "Amazon"


class _LLMSuggestionsPayload(BaseModel):
    suggestions: List[_LLMSuggestion] = Field(..., min_length=1)


def _timestamp_ms() -> int:
    return int(time.time() * 1000)


class GiftAdvisor:
    """
    Turns a structured gift profile into exactly three gift suggestions.
    The language model is asked first; any failure degrades to the static catalog.
    """

    def __init__(
        self,
        llm: Optional[LLMClient],
        catalog: ProductCatalog,
        affiliate: AffiliateConfig,
        ruleset: Dict[str, Any],
        model: Optional[str] = None,
    ):
        self.llm = llm
        self.catalog = catalog
        self.affiliate = affiliate
        self.ruleset = ruleset
        self.model = model

    async def generate_smart_gift_suggestions(self, request: GiftRequest) -> List[GiftSuggestion]:
        try:
            suggestions = await self._ask_llm(request)
        except LLMError as e:
            logger.warning(f"AI gift suggestions unavailable ({e}); using catalog fallback")
            return self.fallback_suggestions(request)
        except Exception:
            logger.exception("Unexpected error generating AI gift suggestions; using catalog fallback")
            return self.fallback_suggestions(request)

        logger.info(f"Generated {len(suggestions)} AI gift suggestions for {request.recipient}")
        return suggestions

    async def recommend(self, request: GiftRequest) -> List[GiftSuggestion]:
        suggestions = await self.generate_smart_gift_suggestions(request)
        return [self.enrich(suggestion) for suggestion in suggestions]

    def _build_prompt(self, request: GiftRequest) -> str:
        age_line = ""
        if request.age is not None:
            segment = get_age_segment(request.age, self.ruleset)
            age_line = f"- Age: {request.age} years old ({segment})"
        budget_line = f"- Budget: Under ${request.budget:g}" if request.budget else "- Budget: Flexible"
        return registry.render(
            "gift_suggestions",
            recipient=request.recipient,
            relationship=request.effective_relationship,
            occasion=request.occasion,
            age_line=age_line,
            interests=", ".join(request.interests) or "not specified",
            budget_line=budget_line,
        )

    async def _ask_llm(self, request: GiftRequest) -> List[GiftSuggestion]:
        if self.llm is None:
            raise LLMUnavailable("No LLM client configured")

        response = await self.llm.generate_text(
            messages=[Message(role="user", content=self._build_prompt(request))],
            model=self.model,
            system_prompt=registry.get_prompt("gift_consultant_system"),
            max_tokens=1500,
            temperature=0.7,
            json_mode=True,
        )
        data = parse_json_object(response.content)
        try:
            payload = _LLMSuggestionsPayload.model_validate(data)
        except ValidationError as e:
            raise MalformedResponse(f"Suggestions payload has unexpected shape: {e.error_count()} errors") from e

        stamp = _timestamp_ms()
        return [
            GiftSuggestion(
                id=f"ai_gift_{stamp}_{index}",
                title=item.title,
                description=item.description,
                category=item.category,
                estimated_price=item.estimated_price,
                reasoning=item.reasoning,
                search_term=item.search_term or item.title,
                affiliate_hint=item.affiliate_hint,
            )
            for index, item in enumerate(payload.suggestions[:SUGGESTION_COUNT])
        ]

    def fallback_suggestions(self, request: GiftRequest) -> List[GiftSuggestion]:
        """Catalog-only suggestions: per-interest lookups padded from the generic gift shelf."""
        picked: List[tuple[CatalogEntry, str]] = []
        seen: set[str] = set()

        for interest in request.interests:
            for entry in self.catalog.search(interest.lower(), [interest]):
                if entry.id not in seen:
                    picked.append((entry, f"Popular pick for someone who loves {interest.lower()}"))
                    seen.add(entry.id)

        for entry in self.catalog.lookup_by_tag(GENERIC_TAG):
            if len(picked) >= SUGGESTION_COUNT:
                break
            if entry.id not in seen:
                picked.append((entry, f"A well-loved {request.occasion} gift for your {request.effective_relationship}"))
                seen.add(entry.id)

        estimated = f"Under ${request.budget:g}" if request.budget else "$25-75"
        stamp = _timestamp_ms()
        suggestions = [
            GiftSuggestion(
                id=f"fallback_{stamp}_{index}",
                title=entry.title,
                description=entry.description,
                category=entry.category,
                estimated_price=estimated,
                reasoning=reasoning,
                search_term=entry.title,
                affiliate_hint=entry.source,
                price=entry.price,
                image_url=entry.image_url,
                affiliate_url=entry.affiliate_link,
                source=entry.source,
            )
            for index, (entry, reasoning) in enumerate(picked[:SUGGESTION_COUNT])
        ]
        logger.info(f"Built {len(suggestions)} fallback gift suggestions for {request.recipient}")
        return suggestions

    def enrich(self, suggestion: GiftSuggestion) -> GiftSuggestion:
        """Attach price, image and affiliate link from the catalog when the search term matches."""
        if suggestion.affiliate_url:
            return suggestion

        matches = self.catalog.search(suggestion.search_term)
        if matches:
            product = matches[0]
            return suggestion.model_copy(
                update={
                    "price": product.price,
                    "image_url": product.image_url,
                    "affiliate_url": product.affiliate_link,
                    "source": product.source,
                }
            )

        return suggestion.model_copy(
            update={
                "price": suggestion.estimated_price,
                "affiliate_url": affiliate_url_for_hint(suggestion.affiliate_hint, suggestion.search_term, self.affiliate),
                "source": suggestion.affiliate_hint,
            }
        )
