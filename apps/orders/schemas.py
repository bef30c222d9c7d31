"""
Portal Order Schemas - canonical order data structures
Pure Python dataclasses for orders, line items and products.
NO DATABASE MODELS - API-only communication plus the cache-backed fallback store.

The remote API and the cart API name the same product fields differently
(orchidId/orchidName/orchidUrl/price vs. productId/unitPrice). Those names are
mapped ONLY by the adapter functions at the bottom of this module.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from django.core.exceptions import ValidationError
from django.utils.translation import gettext as _

# Remote ids stay below this value; local fallback ids are millisecond
# timestamps and always exceed it.
FALLBACK_ID_THRESHOLD = 1_000_000

# Fixed shipping fee, integer currency amount (no minor units)
SHIPPING_FEE = 50_000


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: Any) -> OrderStatus:
        """Accept any case/whitespace variant of a status value"""
        if isinstance(value, cls):
            return value
        normalized = str(value or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            raise ValidationError(_("Unknown order status: %(status)s") % {"status": value})

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_cancellable(self) -> bool:
        return self in CANCELLABLE_STATUSES


CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PROCESSING})
TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

# Forward progression shown on the detail page progress bar
STATUS_PROGRESSION = (
    OrderStatus.PENDING,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)


def status_progress(status: OrderStatus) -> int:
    """Percentage of the forward progression reached (cancelled = 0)"""
    if status not in STATUS_PROGRESSION:
        return 0
    return (STATUS_PROGRESSION.index(status) + 1) * 100 // len(STATUS_PROGRESSION)


class Provenance(str, Enum):
    AUTHORITATIVE = "authoritative"
    LOCAL_FALLBACK = "local_fallback"


def provenance_for_id(order_id: int) -> Provenance:
    if int(order_id) >= FALLBACK_ID_THRESHOLD:
        return Provenance.LOCAL_FALLBACK
    return Provenance.AUTHORITATIVE


@dataclass(frozen=True)
class Product:
    """Catalog product (orchid) as needed by the order flow"""

    id: int
    name: str
    price: int
    image_url: str | None = None


@dataclass(frozen=True)
class LineItem:
    """Canonical line item; identity and unit price are fixed at add-time"""

    product_id: int
    unit_price: int
    quantity: int
    product_name: str | None = None
    image_url: str | None = None

    @property
    def subtotal(self) -> int:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class OrderRequest:
    """Validated submission payload built by the OrderComposer"""

    account_id: int
    items: tuple[LineItem, ...]
    subtotal: int
    shipping_fee: int
    total: int


@dataclass(frozen=True)
class CostBreakdown:
    subtotal: int
    shipping_fee: int
    total: int
    item_count: int


@dataclass
class OrderDetail:
    """Order line item as stored remotely or in the fallback store"""

    product_id: int
    unit_price: int
    quantity: int
    id: int | None = None
    product_name: str | None = None
    image_url: str | None = None
    order_id: int | None = None

    @property
    def subtotal(self) -> int:
        return self.unit_price * self.quantity

    def as_line_item(self) -> LineItem:
        return LineItem(
            product_id=self.product_id,
            unit_price=self.unit_price,
            quantity=self.quantity,
            product_name=self.product_name,
            image_url=self.image_url,
        )


@dataclass
class Order:
    """Persisted order from either storage tier"""

    id: int
    account_id: int
    order_date: str
    status: OrderStatus
    total_amount: int
    details: list[OrderDetail] = field(default_factory=list)
    account_name: str | None = None

    @property
    def provenance(self) -> Provenance:
        return provenance_for_id(self.id)

    @property
    def is_local_fallback(self) -> bool:
        return self.provenance is Provenance.LOCAL_FALLBACK

    @property
    def items_subtotal(self) -> int:
        return sum(detail.subtotal for detail in self.details)

    def with_status(self, status: OrderStatus) -> Order:
        return replace(self, status=status, details=list(self.details))

    def line_items(self) -> list[LineItem]:
        return [detail.as_line_item() for detail in self.details]


# ===============================================================================
# BOUNDARY ADAPTERS
# ===============================================================================

def _int_or_none(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _amount(value: Any) -> int:
    """Remote amounts arrive as doubles; the portal works in whole units"""
    if value is None or value == "":
        return 0
    return int(round(float(value)))


def product_from_api(data: dict[str, Any]) -> Product:
    return Product(
        id=int(data["orchidId"]),
        name=data.get("orchidName") or "",
        price=_amount(data.get("price")),
        image_url=data.get("orchidUrl"),
    )


def product_to_cache(product: Product) -> dict[str, Any]:
    return {
        "orchidId": product.id,
        "orchidName": product.name,
        "price": product.price,
        "orchidUrl": product.image_url,
    }


def line_item_from_cart_api(data: dict[str, Any]) -> LineItem:
    """Remote cart item (CartItemDTO) → canonical line item"""
    return LineItem(
        product_id=int(data["orchidId"]),
        unit_price=_amount(data.get("price")),
        quantity=int(data.get("quantity") or 0),
        product_name=data.get("orchidName"),
        image_url=data.get("orchidUrl"),
    )


def request_to_api_payload(order_request: OrderRequest) -> dict[str, Any]:
    """OrderRequest → remote create-order body ({items: [...]})"""
    return {
        "items": [
            {
                "orchidId": item.product_id,
                "orchidName": item.product_name,
                "price": item.unit_price,
                "quantity": item.quantity,
                "subtotal": item.subtotal,
                "orchidUrl": item.image_url,
            }
            for item in order_request.items
        ]
    }


def detail_from_api(data: dict[str, Any]) -> OrderDetail:
    return OrderDetail(
        id=_int_or_none(data.get("id")),
        product_id=int(data.get("orchidId") or 0),
        unit_price=_amount(data.get("price")),
        quantity=int(data.get("quantity") or 0),
        product_name=data.get("orchidName"),
        image_url=data.get("orchidUrl"),
        order_id=_int_or_none(data.get("orderId")),
    )


def detail_to_api(detail: OrderDetail) -> dict[str, Any]:
    return {
        "id": detail.id,
        "orchidId": detail.product_id,
        "orchidName": detail.product_name,
        "orchidUrl": detail.image_url,
        "price": detail.unit_price,
        "quantity": detail.quantity,
        "orderId": detail.order_id,
        "subtotal": detail.subtotal,
    }


def order_from_api(data: dict[str, Any]) -> Order:
    """Remote OrderDTO (or a stored fallback record) → Order"""
    return Order(
        id=int(data["id"]),
        account_id=int(data.get("accountId") or 0),
        account_name=data.get("accountName"),
        order_date=str(data.get("orderDate") or ""),
        status=OrderStatus.parse(data.get("orderStatus") or OrderStatus.PENDING),
        total_amount=_amount(data.get("totalAmount")),
        details=[detail_from_api(d) for d in data.get("orderDetails") or []],
    )


def order_to_api(order: Order) -> dict[str, Any]:
    """Order → JSON-serialisable OrderDTO shape (fallback store and views)"""
    return {
        "id": order.id,
        "accountId": order.account_id,
        "accountName": order.account_name,
        "orderDate": order.order_date,
        "orderStatus": order.status.value,
        "totalAmount": order.total_amount,
        "orderDetails": [detail_to_api(d) for d in order.details],
    }


# The fallback store keeps records in the same OrderDTO shape as the remote API
order_to_store = order_to_api
order_from_store = order_from_api


def order_to_view(order: Order) -> dict[str, Any]:
    """OrderDTO shape plus the provenance classification for display"""
    data = order_to_api(order)
    data["provenance"] = order.provenance.value
    data["is_local_fallback"] = order.is_local_fallback
    data["status_progress"] = status_progress(order.status)
    return data
