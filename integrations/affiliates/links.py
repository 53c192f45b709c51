from __future__ import annotations

from typing import Optional
from urllib.parse import quote, urlencode

from pydantic import BaseModel


class AffiliateConfig(BaseModel):
    amazon_associate_id: str = "ocassia-20"
    amazon_base_url: str = "https://www.amazon.com"
    opentable_partner_id: str = "ocassia"
    opentable_base_url: str = "https://www.opentable.com"
    expedia_partner_id: str = "ocassia"
    expedia_base_url: str = "https://www.expedia.com"


def amazon_product_url(asin: str, config: AffiliateConfig) -> str:
    params = urlencode(
        {
            "tag": config.amazon_associate_id,
            "linkCode": "as2",
            "camp": "1789",
            "creative": "9325",
        }
    )
    return f"{config.amazon_base_url}/dp/{quote(asin)}?{params}"


def amazon_search_url(term: str, config: AffiliateConfig) -> str:
    params = urlencode({"k": term, "tag": config.amazon_associate_id})
    return f"{config.amazon_base_url}/s?{params}"


def opentable_url(restaurant_name: str, config: AffiliateConfig, location: Optional[str] = None) -> str:
    params = {"term": restaurant_name}
    if location:
        params["location"] = location
    params["ref"] = config.opentable_partner_id
    return f"{config.opentable_base_url}/s/?{urlencode(params)}"


def expedia_url(destination: str, config: AffiliateConfig, path: str = "Hotel-Search") -> str:
    params = urlencode({"destination": destination, "SEMCID": config.expedia_partner_id})
    return f"{config.expedia_base_url}/{path.strip('/')}?{params}"


def affiliate_url_for_hint(hint: Optional[str], term: str, config: AffiliateConfig) -> str:
    """Pick a partner link from a free-form retailer hint such as "OpenTable" or "Amazon/Target"."""
    normalized = (hint or "").lower()
    if "opentable" in normalized or "restaurant" in normalized:
        return opentable_url(term, config)
    if "expedia" in normalized or "travel" in normalized:
        return expedia_url(term, config)
    return amazon_search_url(term, config)
