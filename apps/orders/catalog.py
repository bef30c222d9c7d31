"""
Catalog snapshot used to label fallback orders while the API is unreachable.
"""

import logging
from dataclasses import dataclass, field

from django.conf import settings
from django.core.cache import cache

from apps.api_client.services import OrchidAPIClient, OrchidAPIError, is_fallback_error

from .schemas import Product, product_from_api, product_to_cache

logger = logging.getLogger(__name__)

CATALOG_CACHE_KEY = 'orchid_catalog_snapshot'
CATALOG_STALE_KEY = 'orchid_catalog_snapshot_stale'


@dataclass
class CatalogSnapshot:
    products: dict[int, Product] = field(default_factory=dict)

    @classmethod
    def from_products(cls, products: list[Product]) -> 'CatalogSnapshot':
        return cls(products={product.id: product for product in products})

    def resolve(self, product_id: int) -> Product | None:
        try:
            return self.products.get(int(product_id))
        except (TypeError, ValueError):
            return None

    def __len__(self) -> int:
        return len(self.products)


def load_catalog_snapshot(api: OrchidAPIClient) -> CatalogSnapshot:
    """
    Fetch the orchid catalog, cached for ORCHID_CATALOG_CACHE_SECONDS.

    When the API cannot be reached the last known snapshot is served, or an
    empty one; any other API error propagates.
    """
    cached = cache.get(CATALOG_CACHE_KEY)
    if cached is not None:
        return CatalogSnapshot.from_products([product_from_api(row) for row in cached])

    try:
        rows = api.get_all_orchids() or []
    except OrchidAPIError as e:
        if not is_fallback_error(e):
            raise
        stale = cache.get(CATALOG_STALE_KEY) or []
        logger.warning(f"⚠️ [Catalog] API unavailable, using {len(stale)} cached products: {e}")
        return CatalogSnapshot.from_products([product_from_api(row) for row in stale])

    products = [product_from_api(row) for row in rows]
    serialized = [product_to_cache(product) for product in products]
    cache.set(CATALOG_CACHE_KEY, serialized, settings.ORCHID_CATALOG_CACHE_SECONDS)
    cache.set(CATALOG_STALE_KEY, serialized, None)
    logger.info(f"✅ [Catalog] Loaded {len(products)} orchids")
    return CatalogSnapshot.from_products(products)
