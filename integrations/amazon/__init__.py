"""Static Amazon product catalog integration."""

from .catalog import ProductCatalog, StaticProductCatalog, default_catalog, load_catalog
from .models import CatalogEntry, parse_price
from .search import search_real_amazon_products

__all__ = [
    "CatalogEntry",
    "ProductCatalog",
    "StaticProductCatalog",
    "default_catalog",
    "load_catalog",
    "parse_price",
    "search_real_amazon_products",
]
