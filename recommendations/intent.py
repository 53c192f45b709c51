from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Optional

from .age_segment import age_segment_names
from .models import GiftContext, SearchIntent
from .query_rules_loader import default_ruleset

logger = logging.getLogger(__name__)

_AGE_PATTERN = re.compile(r"(\d+)\s*year")
_BUDGET_PATTERN = re.compile(
    r"(?:under|below|less than|up to|max(?:imum)?)\s*\$?\s*(\d+(?:\.\d+)?)|\$\s*(\d+(?:\.\d+)?)"
)


def _mentions(text: str, keyword: str) -> bool:
    # Anchored at a word start: "son" must not match "person".
    return re.search(rf"\b{re.escape(keyword.lower())}", text) is not None


def _first_mentioned(text: str, keywords: Iterable[Any], default: str) -> str:
    for keyword in keywords:
        if isinstance(keyword, str) and keyword and _mentions(text, keyword):
            return keyword.lower()
    return default


def _extract_age(text: str) -> Optional[int]:
    match = _AGE_PATTERN.search(text)
    return int(match.group(1)) if match else None


def _extract_budget(text: str) -> Optional[float]:
    match = _BUDGET_PATTERN.search(text)
    if not match:
        return None
    value = float(match.group(1) or match.group(2))
    return value if value > 0 else None


def analyze_gift_intent(query: str, ruleset: Optional[dict[str, Any]] = None) -> GiftContext:
    ruleset = ruleset or default_ruleset()
    text = (query or "").lower()
    defaults = ruleset.get("defaults") or {}

    relationship = _first_mentioned(text, ruleset.get("relationships", []), defaults.get("relationship", "friend"))
    occasion = _first_mentioned(text, ruleset.get("occasions", []), defaults.get("occasion", "birthday"))

    interests: list[str] = []
    for category, keywords in (ruleset.get("interests_map") or {}).items():
        if not isinstance(category, str):
            continue
        candidates = [category, *(keywords or [])]
        if any(isinstance(kw, str) and kw and _mentions(text, kw) for kw in candidates):
            interests.append(category)

    age_tokens = age_segment_names(ruleset)
    interests = [interest for interest in interests if interest not in age_tokens]

    context = GiftContext(
        recipient_relationship=relationship,
        age=_extract_age(text),
        occasion=occasion,
        interests=interests,
        budget=_extract_budget(text),
    )
    logger.info("Gift intent for %r: %s", query, context.model_dump())
    return context


def interest_keywords(interest: str, ruleset: dict[str, Any], limit: Optional[int] = None) -> list[str]:
    keywords = (ruleset.get("interests_map") or {}).get(interest) or [interest]
    normalized = [kw.strip().lower() for kw in keywords if isinstance(kw, str) and kw.strip()]
    return normalized[:limit] if limit else normalized


def context_to_search_intent(context: GiftContext, ruleset: Optional[dict[str, Any]] = None) -> SearchIntent:
    """Project a gift context onto the category/keyword shape consumed by the ranker."""
    ruleset = ruleset or default_ruleset()
    per_interest = int((ruleset.get("limits") or {}).get("keywords_per_interest", 2))

    keywords: list[str] = []
    for interest in context.interests:
        for keyword in [interest.lower(), *interest_keywords(interest, ruleset, per_interest)]:
            if keyword not in keywords:
                keywords.append(keyword)

    category = context.interests[0].lower() if context.interests else "general"
    return SearchIntent(category=category, subcategory=category, keywords=keywords)
