from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from integrations.amazon.models import CatalogEntry


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GiftContext(CamelModel):
    recipient_relationship: str = "friend"
    age: Optional[int] = None
    occasion: str = "birthday"
    interests: list[str] = Field(default_factory=list)
    budget: Optional[float] = None


class SearchIntent(CamelModel):
    category: str = "general"
    subcategory: str = "general"
    keywords: list[str] = Field(default_factory=list)
    price_range: Optional[str] = None
    brand: Optional[str] = None
    features: list[str] = Field(default_factory=list)


class ScoredCandidate(CatalogEntry):
    relevance_score: float
    match_reason: Optional[str] = None
    ai_ranked: bool = False


class PersonalizedRecommendation(ScoredCandidate):
    reasoning: str = ""
    features: list[str] = Field(default_factory=list)
    availability: str = "InStock"
    estimated_delivery: str = ""


class GiftRequest(CamelModel):
    recipient: str = Field(..., min_length=1)
    occasion: str = Field(..., min_length=1)
    age: Optional[int] = Field(None, ge=0, le=150)
    interests: list[str]
    budget: Optional[float] = Field(None, gt=0)
    relationship: Optional[str] = None
    location: Optional[str] = None

    @property
    def effective_relationship(self) -> str:
        return self.relationship or self.recipient


class GiftSuggestion(CamelModel):
    id: str
    title: str
    description: str = ""
    category: str = "Gift"
    estimated_price: str = "N/A"
    reasoning: str = ""
    search_term: str
    affiliate_hint: str = "Amazon"
    price: Optional[str] = None
    image_url: Optional[str] = None
    affiliate_url: Optional[str] = None
    source: Optional[str] = None
