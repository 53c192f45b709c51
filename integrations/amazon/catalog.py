from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional, Protocol, Sequence

import yaml

from integrations.affiliates import AffiliateConfig, amazon_product_url

from .models import CatalogEntry

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parents[2] / "config" / "amazon_catalog.yaml"
MAX_SEARCH_RESULTS = 5


class ProductCatalog(Protocol):
    def tags(self) -> list[str]: ...

    def lookup_by_tag(self, tag: str) -> list[CatalogEntry]: ...

    def search(self, query: str, interests: Sequence[str] = ()) -> list[CatalogEntry]: ...


def _parse_triggers(raw: Any, section: str) -> list[tuple[str, tuple[str, ...]]]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError(f"Catalog triggers.{section} must be a list")
    triggers: list[tuple[str, tuple[str, ...]]] = []
    for item in raw:
        if not isinstance(item, dict) or not isinstance(item.get("tag"), str):
            raise ValueError(f"Catalog trigger in {section} is missing a tag")
        needles = tuple(str(needle).lower() for needle in item.get("needles") or [])
        triggers.append((item["tag"], needles))
    return triggers


class StaticProductCatalog:
    """Read-only, in-memory product table keyed by category tag."""

    def __init__(
        self,
        entries: dict[str, list[CatalogEntry]],
        *,
        query_triggers: Sequence[tuple[str, Sequence[str]]] = (),
        interest_triggers: Sequence[tuple[str, Sequence[str]]] = (),
        max_results: int = MAX_SEARCH_RESULTS,
    ) -> None:
        self._entries = {tag: tuple(items) for tag, items in entries.items()}
        self._query_triggers = tuple((tag, tuple(needles)) for tag, needles in query_triggers)
        self._interest_triggers = tuple((tag, tuple(needles)) for tag, needles in interest_triggers)
        self.max_results = max_results

    @classmethod
    def from_mapping(cls, data: dict[str, Any], affiliate: AffiliateConfig) -> "StaticProductCatalog":
        categories = data.get("categories")
        if not isinstance(categories, dict):
            raise ValueError("Catalog must define a categories mapping")

        source = data.get("source") or "Amazon"
        entries: dict[str, list[CatalogEntry]] = {}
        for tag, items in categories.items():
            parsed: list[CatalogEntry] = []
            for item in items or []:
                asin = item["asin"]
                parsed.append(
                    CatalogEntry(
                        id=asin,
                        title=item["title"],
                        price=item["price"],
                        image_url=item["image_url"],
                        rating=item["rating"],
                        review_count=item["review_count"],
                        description=item.get("description", ""),
                        category=item["category"],
                        is_prime_eligible=bool(item.get("is_prime_eligible", False)),
                        affiliate_link=amazon_product_url(asin, affiliate),
                        source=source,
                    )
                )
            entries[str(tag)] = parsed

        triggers = data.get("triggers") or {}
        return cls(
            entries,
            query_triggers=_parse_triggers(triggers.get("query"), "query"),
            interest_triggers=_parse_triggers(triggers.get("interest"), "interest"),
        )

    def tags(self) -> list[str]:
        return list(self._entries)

    def lookup_by_tag(self, tag: str) -> list[CatalogEntry]:
        return list(self._entries.get(tag, ()))

    def search(self, query: str, interests: Sequence[str] = ()) -> list[CatalogEntry]:
        query_lower = (query or "").lower()
        matched: list[CatalogEntry] = []

        for tag, needles in self._query_triggers:
            if any(needle in query_lower for needle in needles):
                matched.extend(self.lookup_by_tag(tag))

        for interest in interests:
            if not isinstance(interest, str):
                continue
            interest_lower = interest.lower()
            for tag, needles in self._interest_triggers:
                if any(needle in interest_lower for needle in needles):
                    matched.extend(self.lookup_by_tag(tag))

        unique: dict[str, CatalogEntry] = {}
        for entry in matched:
            if entry.id not in unique:
                unique[entry.id] = entry
        return list(unique.values())[: self.max_results]


def load_catalog(path: str | Path, affiliate: Optional[AffiliateConfig] = None) -> StaticProductCatalog:
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except FileNotFoundError as exc:
        raise ValueError(f"Catalog file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ValueError(f"Catalog YAML is invalid: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError("Catalog must be a mapping at top level")

    try:
        catalog = StaticProductCatalog.from_mapping(data, affiliate or AffiliateConfig())
    except (KeyError, TypeError) as exc:
        raise ValueError(f"Catalog entry is incomplete: {exc}") from exc

    logger.info("Loaded product catalog from %s with %d tags", path, len(catalog.tags()))
    return catalog


@lru_cache()
def default_catalog() -> StaticProductCatalog:
    return load_catalog(DEFAULT_CATALOG_PATH)
