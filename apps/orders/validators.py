"""
Order Input Validators for the Orchid Portal
Validation for cart quantities, checkout form fields and ids from the URL.
"""

import logging
import re
from typing import Any

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.utils.translation import gettext as _

logger = logging.getLogger(__name__)


class OrderInputValidator:
    """Centralized validation for order inputs"""

    MAX_QUANTITY = 99

    # Decorative payment selection; no payment gateway is called
    ALLOWED_PAYMENT_METHODS = {'visa', 'mastercard', 'momo', 'zalopay'}

    CHECKOUT_REQUIRED_FIELDS = ('full_name', 'email', 'phone', 'address', 'city')

    PHONE_PATTERN = re.compile(r'^\+?[0-9][0-9 .\-]{6,19}$')

    @staticmethod
    def validate_quantity(quantity: Any) -> int:
        try:
            qty = int(quantity)
        except (ValueError, TypeError):
            raise ValidationError(_("Invalid quantity"))
        if qty < 1:
            raise ValidationError(_("Quantity must be at least 1"))
        if qty > OrderInputValidator.MAX_QUANTITY:
            raise ValidationError(
                _("Quantity cannot exceed %(max)s") % {'max': OrderInputValidator.MAX_QUANTITY}
            )
        return qty

    @staticmethod
    def validate_product_id(product_id: Any) -> int:
        try:
            value = int(product_id)
        except (ValueError, TypeError):
            raise ValidationError(_("Invalid product identifier"))
        if value < 1:
            raise ValidationError(_("Invalid product identifier"))
        return value

    @staticmethod
    def validate_payment_method(method: str) -> str:
        method = (method or '').strip().lower()
        if method not in OrderInputValidator.ALLOWED_PAYMENT_METHODS:
            raise ValidationError(_("Please choose a payment method"))
        return method

    @staticmethod
    def validate_note(note: str) -> str:
        if not note:
            return ''
        note = note.strip()
        if len(note) > 500:
            raise ValidationError(_("Note cannot exceed 500 characters"))
        return note

    @classmethod
    def validate_checkout_form(cls, data: dict[str, Any]) -> dict[str, str]:
        """
        Validate the checkout form (contact, shipping, payment, note).

        Returns the cleaned fields; raises ValidationError with one message
        per invalid field.
        """
        cleaned: dict[str, str] = {}
        errors: dict[str, str] = {}

        for field_name in cls.CHECKOUT_REQUIRED_FIELDS:
            value = str(data.get(field_name) or '').strip()
            if not value:
                errors[field_name] = _("This field is required")
            elif len(value) > 200:
                errors[field_name] = _("Value is too long")
            cleaned[field_name] = value

        if cleaned.get('email') and 'email' not in errors:
            try:
                validate_email(cleaned['email'])
            except ValidationError:
                errors['email'] = _("Enter a valid email address")

        if cleaned.get('phone') and 'phone' not in errors and not cls.PHONE_PATTERN.match(cleaned['phone']):
            errors['phone'] = _("Enter a valid phone number")

        try:
            cleaned['payment_method'] = cls.validate_payment_method(data.get('payment_method', ''))
        except ValidationError as e:
            errors['payment_method'] = e.messages[0]

        try:
            cleaned['note'] = cls.validate_note(data.get('note', ''))
        except ValidationError as e:
            errors['note'] = e.messages[0]

        if errors:
            logger.info(f"⚠️ [Orders] Checkout form rejected: {sorted(errors)}")
            raise ValidationError(errors)

        return cleaned
