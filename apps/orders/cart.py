"""
Session cart for the Orchid Portal.
Product identity and unit price are captured when an item is added and are
not re-fetched at checkout.
"""

import logging
from typing import Any

from django.core.exceptions import ValidationError
from django.utils import timezone
from django.utils.translation import gettext as _

from .schemas import Product
from .validators import OrderInputValidator

logger = logging.getLogger(__name__)


class OrchidCartSession:
    """Session-based cart, one per browser session"""

    SESSION_KEY = 'orchid_portal_cart_v1'
    MAX_QUANTITY = OrderInputValidator.MAX_QUANTITY

    def __init__(self, session):
        self.session = session
        self._load_cart()

    def _load_cart(self) -> None:
        cart_data = self.session.get(self.SESSION_KEY) or {}
        self.cart = cart_data if isinstance(cart_data, dict) else {}
        if not isinstance(self.cart.get('items'), list):
            self.cart = self._create_empty_cart()

    def _create_empty_cart(self) -> dict[str, Any]:
        now = timezone.now().isoformat()
        return {'items': [], 'created_at': now, 'updated_at': now}

    def _save_cart(self) -> None:
        self.cart['updated_at'] = timezone.now().isoformat()
        self.session[self.SESSION_KEY] = self.cart
        self.session.modified = True
        logger.debug(f"💾 [Cart] Cart saved with {len(self.cart['items'])} items")

    def _find_item_index(self, product_id: int) -> int:
        for index, item in enumerate(self.cart['items']):
            if int(item['product_id']) == int(product_id):
                return index
        return -1

    def add_item(self, product: Product, quantity: int = 1) -> None:
        """Add a product; adding an existing product accumulates its quantity"""
        quantity = OrderInputValidator.validate_quantity(quantity)

        existing_index = self._find_item_index(product.id)
        if existing_index >= 0:
            item = self.cart['items'][existing_index]
            item['quantity'] = OrderInputValidator.validate_quantity(item['quantity'] + quantity)
            logger.info(f"🔄 [Cart] Updated existing item: {product.id}")
        else:
            self.cart['items'].append({
                'product_id': product.id,
                'product_name': product.name,
                'unit_price': product.price,
                'image_url': product.image_url,
                'quantity': quantity,
                'added_at': timezone.now().isoformat(),
            })
            logger.info(f"➕ [Cart] Added new item: {product.id}")

        self._save_cart()

    def update_item_quantity(self, product_id: int, quantity: int) -> None:
        quantity = OrderInputValidator.validate_quantity(quantity)

        item_index = self._find_item_index(product_id)
        if item_index < 0:
            raise ValidationError(_("Product not found in cart"))

        self.cart['items'][item_index]['quantity'] = quantity
        self._save_cart()
        logger.info(f"🔄 [Cart] Updated quantity for {product_id}: {quantity}")

    def remove_item(self, product_id: int) -> None:
        item_index = self._find_item_index(product_id)
        if item_index < 0:
            raise ValidationError(_("Product not found in cart"))

        removed_item = self.cart['items'].pop(item_index)
        self._save_cart()
        logger.info(f"🗑️ [Cart] Removed item: {removed_item['product_name']}")

    def clear(self) -> None:
        old_item_count = len(self.cart['items'])
        self.cart = self._create_empty_cart()
        self._save_cart()
        logger.info(f"🧹 [Cart] Cart cleared ({old_item_count} items removed)")

    def get_items(self) -> list[dict[str, Any]]:
        return list(self.cart['items'])

    def get_item_count(self) -> int:
        return len(self.cart['items'])

    def get_total_quantity(self) -> int:
        return sum(item['quantity'] for item in self.cart['items'])

    def has_items(self) -> bool:
        return self.get_item_count() > 0

    def selections(self) -> list[tuple[Product, int]]:
        """(product, quantity) pairs in insertion order, for the OrderComposer"""
        return [
            (
                Product(
                    id=int(item['product_id']),
                    name=item.get('product_name') or '',
                    price=int(item['unit_price']),
                    image_url=item.get('image_url'),
                ),
                int(item['quantity']),
            )
            for item in self.cart['items']
        ]
