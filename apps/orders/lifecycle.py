"""
Order status lifecycle.

Only cancel() is gated: it fires from pending or processing. The free-form
status change used by the admin dropdown accepts any status.
"""

import logging

from .exceptions import InvalidTransition
from .gateway import GatewayResult, ResilientOrderGateway
from .merge import OrderMergeView
from .schemas import Order, OrderStatus

logger = logging.getLogger(__name__)


class OrderLifecycleController:
    def __init__(self, gateway: ResilientOrderGateway, merge_view: OrderMergeView):
        self.gateway = gateway
        self.merge_view = merge_view

    def locate(self, order_id: int | str, account_id: int | str | None = None) -> Order:
        if account_id is None:
            return self.merge_view.find_any(order_id)
        return self.merge_view.find_by_id(account_id, order_id)

    def change_status(self, order: Order, new_status: OrderStatus | str) -> GatewayResult:
        status = OrderStatus.parse(new_status)
        return self.gateway.update_status(order, status)

    @staticmethod
    def ensure_cancellable(order: Order) -> None:
        if not order.status.is_cancellable:
            raise InvalidTransition(order.id, order.status.value, OrderStatus.CANCELLED.value)

    def cancel(self, order: Order) -> GatewayResult:
        """Cancel a pending or processing order; raises before any API call otherwise"""
        self.ensure_cancellable(order)
        logger.info(f"🛑 [Lifecycle] Cancelling order {order.id} ({order.status.value})")
        return self.change_status(order, OrderStatus.CANCELLED)
