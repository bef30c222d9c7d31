"""
Local fallback order store.

Orders that could not reach the remote API live here until an explicit
convert. Every mutation is a whole-collection read-modify-write through the
store's get()/put() pair; business logic never touches the cache directly.
"""

import copy
import logging
from typing import Any, Protocol

from django.core.cache import caches
from django.core.exceptions import ValidationError

from .schemas import Order, order_from_store, order_to_store

logger = logging.getLogger(__name__)


class FallbackOrderStore(Protocol):
    def get(self) -> list[dict[str, Any]]: ...

    def put(self, records: list[dict[str, Any]]) -> None: ...


class CacheFallbackOrderStore:
    """
    Fallback store backed by the ``fallback_orders`` cache alias.

    One collection is shared by every session and account, so logout and
    session expiry leave unsynced orders in place and admins see the same
    records customers created. Each record carries its accountId.
    """

    CACHE_ALIAS = 'fallback_orders'
    CACHE_KEY = 'orchid_fallback_orders_v1'

    def __init__(self, cache=None):
        self.cache = cache if cache is not None else caches[self.CACHE_ALIAS]

    def get(self) -> list[dict[str, Any]]:
        records = self.cache.get(self.CACHE_KEY) or []
        if not isinstance(records, list):
            logger.warning("⚠️ [Fallback Store] Discarding malformed fallback record set")
            return []
        return copy.deepcopy(records)

    def put(self, records: list[dict[str, Any]]) -> None:
        self.cache.set(self.CACHE_KEY, copy.deepcopy(records), timeout=None)
        logger.debug(f"💾 [Fallback Store] Saved {len(records)} fallback orders")


class InMemoryFallbackOrderStore:
    """Process-local store for tests and scripts"""

    def __init__(self, records: list[dict[str, Any]] | None = None):
        self._records = copy.deepcopy(records or [])

    def get(self) -> list[dict[str, Any]]:
        return copy.deepcopy(self._records)

    def put(self, records: list[dict[str, Any]]) -> None:
        self._records = copy.deepcopy(records)


def load_orders(store: FallbackOrderStore) -> list[Order]:
    orders = []
    for record in store.get():
        try:
            orders.append(order_from_store(record))
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            logger.warning(f"⚠️ [Fallback Store] Skipping unreadable record: {e}")
    return orders


def append_order(store: FallbackOrderStore, order: Order) -> None:
    records = store.get()
    records.append(order_to_store(order))
    store.put(records)


def replace_order(store: FallbackOrderStore, order: Order) -> bool:
    """Swap the record with the same id; False when it is not stored"""
    records = store.get()
    for index, record in enumerate(records):
        if str(record.get('id')) == str(order.id):
            records[index] = order_to_store(order)
            store.put(records)
            return True
    return False


def remove_order(store: FallbackOrderStore, order_id: int) -> bool:
    records = store.get()
    remaining = [record for record in records if str(record.get('id')) != str(order_id)]
    if len(remaining) == len(records):
        return False
    store.put(remaining)
    return True
