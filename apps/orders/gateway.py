"""
Resilient Order Gateway for the Orchid Portal

Remote-first persistence of orders and status changes. When the Orchid API
cannot be reached, or refuses the endpoint (403/404), the operation is
recovered locally and reported as degraded; every other API error propagates
untouched.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.utils import timezone
from django.utils.translation import gettext as _

from apps.api_client.services import OrchidAPIClient, OrchidAPIError, RemoteRejected, is_fallback_error

from .catalog import CatalogSnapshot, load_catalog_snapshot
from .composer import OrderComposer
from .exceptions import InvalidTransition, OrderNotFound, OrderValidationError
from .fallback import FallbackOrderStore, append_order, remove_order, replace_order
from .schemas import (
    FALLBACK_ID_THRESHOLD,
    Order,
    OrderDetail,
    OrderRequest,
    OrderStatus,
    order_from_api,
    request_to_api_payload,
)

logger = logging.getLogger(__name__)


@dataclass
class GatewayResult:
    """An order plus whether remote reconciliation is still pending"""

    order: Order
    degraded: bool = False


class ResilientOrderGateway:
    def __init__(
        self,
        api: OrchidAPIClient,
        store: FallbackOrderStore,
        catalog_loader: Callable[[], CatalogSnapshot] | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.api = api
        self.store = store
        self.catalog_loader = catalog_loader or (lambda: load_catalog_snapshot(api))
        self.clock = clock

    # ===============================================================================
    # CREATION
    # ===============================================================================

    def submit(self, order_request: OrderRequest, account_name: str | None = None) -> GatewayResult:
        """Create the order remotely, or locally when the API is out of reach"""
        try:
            order = self._create_remote(order_request)
        except OrchidAPIError as e:
            if not is_fallback_error(e):
                logger.error(f"🔥 [Gateway] Order creation rejected for account {order_request.account_id}: {e}")
                raise
            logger.warning(
                f"⚠️ [Gateway] Order API unavailable ({type(e).__name__}), storing order locally "
                f"for account {order_request.account_id}"
            )
            order = self._store_fallback(order_request, account_name)
            return GatewayResult(order=order, degraded=True)

        logger.info(f"📦 [Gateway] Order {order.id} created for account {order_request.account_id}")
        return GatewayResult(order=order)

    def convert(self, local_order: Order) -> GatewayResult:
        """
        Re-submit a local fallback order to the API and retire the local copy.

        No fallback here: any API failure leaves the fallback store untouched
        and propagates to the caller.
        """
        if not local_order.is_local_fallback:
            raise OrderValidationError(_("Only locally stored orders can be converted"))

        order_request = OrderComposer.build_request(local_order.account_id, local_order.line_items())
        order = self._create_remote(order_request)

        if local_order.status is not OrderStatus.PENDING:
            order = self._carry_status(order, local_order.status)

        remove_order(self.store, local_order.id)
        logger.info(f"🔁 [Gateway] Local order {local_order.id} converted to order {order.id}")
        return GatewayResult(order=order)

    def _create_remote(self, order_request: OrderRequest) -> Order:
        data = self.api.create_order(request_to_api_payload(order_request))
        try:
            order = order_from_api(data)
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            raise RemoteRejected(f"Malformed order returned by API: {e}", response_data=data) from e

        if order.is_local_fallback:
            raise RemoteRejected(
                f"API assigned order id {order.id} inside the local fallback id range",
                response_data=data,
            )
        return order

    def _carry_status(self, order: Order, status: OrderStatus) -> Order:
        """Best effort: a status changed while the order was local follows it to the API"""
        try:
            data = self.api.update_order_status(order.id, status.value)
        except OrchidAPIError as e:
            logger.warning(f"⚠️ [Gateway] Could not carry status '{status.value}' to order {order.id}: {e}")
            return order
        return order_from_api(data) if isinstance(data, dict) and data.get('id') else order.with_status(status)

    def _next_fallback_id(self) -> int:
        """Millisecond timestamp, bumped past any id already held locally"""
        candidate = max(int(self.clock() * 1000), FALLBACK_ID_THRESHOLD)
        taken = {str(record.get('id')) for record in self.store.get()}
        while str(candidate) in taken:
            candidate += 1
        return candidate

    def _load_catalog(self) -> CatalogSnapshot:
        try:
            return self.catalog_loader()
        except OrchidAPIError as e:
            logger.warning(f"⚠️ [Gateway] Catalog unavailable for local order labels: {e}")
            return CatalogSnapshot()

    def _store_fallback(self, order_request: OrderRequest, account_name: str | None) -> Order:
        order_id = self._next_fallback_id()
        catalog = self._load_catalog()

        details = []
        for item in order_request.items:
            product = catalog.resolve(item.product_id)
            details.append(OrderDetail(
                product_id=item.product_id,
                unit_price=item.unit_price,
                quantity=item.quantity,
                product_name=product.name if product else item.product_name,
                image_url=product.image_url if product else item.image_url,
                order_id=order_id,
            ))

        order = Order(
            id=order_id,
            account_id=order_request.account_id,
            account_name=account_name,
            order_date=timezone.localdate().isoformat(),
            status=OrderStatus.PENDING,
            total_amount=order_request.total,
            details=details,
        )
        append_order(self.store, order)
        logger.info(f"💾 [Gateway] Local order {order_id} stored ({len(details)} items, total {order.total_amount})")
        return order

    # ===============================================================================
    # STATUS MUTATION
    # ===============================================================================

    def update_status(self, order: Order, status: OrderStatus) -> GatewayResult:
        """Route a status change to the tier holding the order"""
        updated = order.with_status(status)

        if order.is_local_fallback:
            if not replace_order(self.store, updated):
                raise OrderNotFound(order.id)
            logger.info(f"💾 [Gateway] Local order {order.id}: {order.status.value} → {status.value}")
            return GatewayResult(order=updated)

        try:
            data = self.api.update_order_status(order.id, status.value)
        except OrchidAPIError as e:
            if not is_fallback_error(e):
                logger.error(f"🔥 [Gateway] Status change rejected for order {order.id}: {e}")
                raise
            logger.warning(
                f"⚠️ [Gateway] Order API unavailable, status '{status.value}' for order {order.id} "
                f"applied locally only"
            )
            return GatewayResult(order=updated, degraded=True)

        if isinstance(data, dict) and data.get('id'):
            updated = order_from_api(data)
            if not updated.details:
                updated.details = list(order.details)

        logger.info(f"✅ [Gateway] Order {order.id}: {order.status.value} → {updated.status.value}")
        return GatewayResult(order=updated)

    def cancel(self, order: Order) -> GatewayResult:
        if not order.status.is_cancellable:
            raise InvalidTransition(order.id, order.status.value, OrderStatus.CANCELLED.value)
        return self.update_status(order, OrderStatus.CANCELLED)
