from __future__ import annotations

import logging
from typing import Optional, Sequence

from .catalog import ProductCatalog, default_catalog
from .models import CatalogEntry

logger = logging.getLogger(__name__)


def search_real_amazon_products(
    query: str,
    interests: Sequence[str] = (),
    catalog: Optional[ProductCatalog] = None,
) -> list[CatalogEntry]:
    catalog = catalog or default_catalog()
    products = catalog.search(query, interests)
    logger.info(
        "Catalog search query=%r interests=%s returned %d products",
        query,
        list(interests),
        len(products),
    )
    return products
