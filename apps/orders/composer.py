"""
Order Composer for the Orchid Portal
Turns cart or buy-now selections into a validated OrderRequest.
Pure functions: no API calls, no session access.
"""

import logging
from collections.abc import Iterable
from typing import Any

from django.utils.translation import gettext as _

from .exceptions import OrderValidationError
from .schemas import SHIPPING_FEE, CostBreakdown, LineItem, OrderRequest, Product

logger = logging.getLogger(__name__)

# A selection is a (product, quantity) pair; cart line items are accepted too
Selection = tuple[Product, int]


class OrderComposer:
    """Builds order requests and display cost breakdowns"""

    shipping_fee = SHIPPING_FEE

    @staticmethod
    def to_line_item(selection: Any) -> LineItem:
        """Normalize a (product, quantity) pair or a LineItem into a LineItem"""
        if isinstance(selection, LineItem):
            return selection

        product, quantity = selection
        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            raise OrderValidationError(_("Invalid quantity"))

        return LineItem(
            product_id=product.id,
            unit_price=product.price,
            quantity=quantity,
            product_name=product.name,
            image_url=product.image_url,
        )

    @classmethod
    def build_request(cls, account_id: int, selections: Iterable[Any]) -> OrderRequest:
        """
        Validate selections and compute totals.

        Raises:
            OrderValidationError: empty selection, quantity below 1 or
                unit price not strictly positive
        """
        items = tuple(cls.to_line_item(selection) for selection in selections)

        if not items:
            raise OrderValidationError(_("Cannot place an order without items"))

        for item in items:
            if item.quantity < 1:
                raise OrderValidationError(
                    _("Quantity for product %(product)s must be at least 1") % {"product": item.product_id}
                )
            if item.unit_price <= 0:
                raise OrderValidationError(
                    _("Price for product %(product)s must be greater than zero") % {"product": item.product_id}
                )

        subtotal = sum(item.subtotal for item in items)
        total = subtotal + cls.shipping_fee

        logger.debug(f"🧮 [Composer] Built request for account {account_id}: {len(items)} items, total {total}")
        return OrderRequest(
            account_id=int(account_id),
            items=items,
            subtotal=subtotal,
            shipping_fee=cls.shipping_fee,
            total=total,
        )

    @classmethod
    def cost_breakdown(cls, selections: Iterable[Any]) -> CostBreakdown:
        """Display-level totals; never raises, an empty selection costs nothing"""
        items = [cls.to_line_item(selection) for selection in selections]
        subtotal = sum(item.subtotal for item in items)
        shipping_fee = cls.shipping_fee if items else 0
        return CostBreakdown(
            subtotal=subtotal,
            shipping_fee=shipping_fee,
            total=subtotal + shipping_fee,
            item_count=sum(item.quantity for item in items),
        )
