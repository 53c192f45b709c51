from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_PRICE_PATTERN = re.compile(r"(\d+(?:\.\d+)?)")


def parse_price(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    match = _PRICE_PATTERN.search(value.replace(",", ""))
    if not match:
        return None
    return float(match.group(1))


class CatalogEntry(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    title: str
    price: str
    image_url: str
    rating: float
    review_count: int
    description: str
    category: str
    is_prime_eligible: bool
    affiliate_link: str
    source: str = "Amazon"

    @property
    def price_value(self) -> Optional[float]:
        return parse_price(self.price)
