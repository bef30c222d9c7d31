"""
Order flow errors.

Transport-level failures are classified in apps.api_client.services; this
module holds the domain errors raised before any I/O happens.
"""

from django.core.exceptions import ValidationError

from apps.api_client.services import RemoteRejected, SessionExpired

__all__ = [
    'InvalidTransition',
    'OrderNotFound',
    'OrderValidationError',
    'RemoteRejected',
    'SessionExpired',
]


class OrderValidationError(ValidationError):
    """Malformed or empty order request"""


class InvalidTransition(Exception):
    """Status change refused by the order state machine"""

    def __init__(self, order_id: int, current_status: str, target_status: str):
        self.order_id = order_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(
            f"Order {order_id} cannot move from '{current_status}' to '{target_status}'"
        )


class OrderNotFound(Exception):
    """Order id absent from both the remote and the local fallback tier"""

    def __init__(self, order_id: int | str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")
