"""
Order Merge View - one order listing drawn from the Orchid API and the local
fallback store. Authoritative orders come first, local orders after them;
each tier keeps its own arrival order.
"""

import logging
from collections.abc import Iterable

from apps.api_client.services import OrchidAPIClient, OrchidAPIError, SessionExpired, is_fallback_error

from .exceptions import OrderNotFound
from .fallback import FallbackOrderStore, load_orders
from .schemas import Order, OrderStatus, detail_from_api, order_from_api

logger = logging.getLogger(__name__)

ALL_TAB = 'all'
STATUS_TABS = (ALL_TAB,) + tuple(status.value for status in OrderStatus)


class OrderMergeView:
    def __init__(self, api: OrchidAPIClient, store: FallbackOrderStore):
        self.api = api
        self.store = store

    def _authoritative_for_account(self, account_id: int | str) -> list[Order]:
        # 404 from the listing endpoint means "no orders yet"
        try:
            rows = self.api.get_orders_by_account(account_id)
        except OrchidAPIError as e:
            if not is_fallback_error(e):
                raise
            logger.warning(f"⚠️ [Merge] No remote orders for account {account_id}: {e}")
            return []
        return [order_from_api(row) for row in rows or []]

    def _fallback_for_account(self, account_id: int | str) -> list[Order]:
        return [order for order in load_orders(self.store) if str(order.account_id) == str(account_id)]

    def list_by_account(self, account_id: int | str) -> list[Order]:
        authoritative = self._authoritative_for_account(account_id)
        local = self._fallback_for_account(account_id)
        logger.debug(f"📋 [Merge] Account {account_id}: {len(authoritative)} remote + {len(local)} local orders")
        return authoritative + local

    def find_by_id(self, account_id: int | str, order_id: int | str) -> Order:
        """Look an order up among the account's orders, enriching its line items when possible"""
        for order in self.list_by_account(account_id):
            if str(order.id) == str(order_id).strip():
                return self._enrich(order)
        raise OrderNotFound(order_id)

    def _enrich(self, order: Order) -> Order:
        if order.is_local_fallback:
            return order
        try:
            rows = self.api.get_order_details(order.id)
        except SessionExpired:
            raise
        except OrchidAPIError as e:
            logger.info(f"ℹ️ [Merge] Keeping listed line items for order {order.id}: {e}")
            return order
        if rows:
            order.details = [detail_from_api(row) for row in rows]
        return order

    # ===============================================================================
    # ADMIN VIEW
    # ===============================================================================

    def list_all(self) -> list[Order]:
        try:
            rows = self.api.get_all_orders()
        except OrchidAPIError as e:
            if not is_fallback_error(e):
                raise
            logger.warning(f"⚠️ [Merge] Admin order listing unavailable: {e}")
            rows = []
        return [order_from_api(row) for row in rows or []] + load_orders(self.store)

    def find_any(self, order_id: int | str) -> Order:
        for order in self.list_all():
            if str(order.id) == str(order_id).strip():
                return order
        raise OrderNotFound(order_id)


def filter_by_status(orders: Iterable[Order], tab: str | None) -> list[Order]:
    """Orders for a history tab ('all' or one of the statuses)"""
    orders = list(orders)
    if not tab or tab == ALL_TAB:
        return orders
    status = OrderStatus.parse(tab)
    return [order for order in orders if order.status is status]


def status_counts(orders: Iterable[Order]) -> dict[str, int]:
    counts = dict.fromkeys(STATUS_TABS, 0)
    for order in orders:
        counts[ALL_TAB] += 1
        counts[order.status.value] += 1
    return counts
