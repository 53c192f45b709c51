"""Affiliate partner link generators."""

from .links import (
    AffiliateConfig,
    affiliate_url_for_hint,
    amazon_product_url,
    amazon_search_url,
    expedia_url,
    opentable_url,
)

__all__ = [
    "AffiliateConfig",
    "affiliate_url_for_hint",
    "amazon_product_url",
    "amazon_search_url",
    "expedia_url",
    "opentable_url",
]
