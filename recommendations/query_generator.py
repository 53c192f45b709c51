from __future__ import annotations

import logging
from typing import Any, Optional

from .intent import interest_keywords
from .models import GiftContext
from .query_rules_loader import default_ruleset

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUERIES = 5


def _normalize_query(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    normalized = " ".join(value.split()).lower()
    return normalized or None


def _format_budget(budget: float) -> str:
    return str(int(budget)) if float(budget).is_integer() else f"{budget:.2f}"


def build_smart_search_queries(context: GiftContext, ruleset: Optional[dict[str, Any]] = None) -> list[str]:
    ruleset = ruleset or default_ruleset()
    limits = ruleset.get("limits", {})
    max_total = int(limits.get("max_queries_total", DEFAULT_MAX_QUERIES)) or DEFAULT_MAX_QUERIES
    per_interest = int(limits.get("keywords_per_interest", 2)) or 2

    relationship = context.recipient_relationship
    occasion = context.occasion

    raw: list[str] = []
    for interest in context.interests:
        for keyword in interest_keywords(interest, ruleset, per_interest):
            raw.append(f"{keyword} gift for {relationship}")
            raw.append(f"{keyword} {occasion} gift")
            if context.budget:
                raw.append(f"{keyword} under {_format_budget(context.budget)}")

    if not context.interests:
        raw.append(f"{occasion} gift for {relationship}")
        raw.append(f"{relationship} {occasion} gift ideas")

    seen: set[str] = set()
    queries: list[str] = []
    for query in raw:
        normalized = _normalize_query(query)
        if not normalized or normalized in seen:
            continue
        queries.append(normalized)
        seen.add(normalized)
        if len(queries) >= max_total:
            break

    logger.info("Built %d search queries: %s", len(queries), queries)
    return queries
