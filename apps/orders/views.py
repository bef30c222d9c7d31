"""
Order Views for the Orchid Portal
Cart, checkout, order history, order detail with cancellation, and order
administration. JSON endpoints over the resilient order layer.
"""

import logging
from typing import Any

from django.core.exceptions import PermissionDenied, ValidationError
from django.http import Http404
from django.utils.decorators import method_decorator
from django.utils.translation import gettext as _
from django.utils.translation import gettext_lazy
from django.views.decorators.csrf import csrf_protect
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api_client.services import OrchidAPIError, is_fallback_error
from apps.common.decorators import require_admin, require_authentication

from .cart import OrchidCartSession
from .catalog import load_catalog_snapshot
from .composer import OrderComposer
from .exceptions import InvalidTransition, OrderNotFound, RemoteRejected, SessionExpired
from .fallback import remove_order
from .gateway import GatewayResult
from .merge import ALL_TAB, filter_by_status, status_counts
from .schemas import CostBreakdown, Order, Product, order_to_view
from .services import OrderServices
from .validators import OrderInputValidator

logger = logging.getLogger(__name__)

HTTP_SERVER_ERROR = 500

DEGRADED_ORDER_MESSAGE = gettext_lazy(
    "Your order was saved on this device and will be synchronised when the store is reachable again."
)
DEGRADED_STATUS_MESSAGE = gettext_lazy(
    "The status was changed locally; the store could not be reached to confirm it."
)


def breakdown_to_view(breakdown: CostBreakdown) -> dict[str, int]:
    return {
        'subtotal': breakdown.subtotal,
        'shipping_fee': breakdown.shipping_fee,
        'total': breakdown.total,
        'item_count': breakdown.item_count,
    }


def result_to_view(result: GatewayResult, success_message: str, degraded_message: str) -> dict[str, Any]:
    return {
        'order': order_to_view(result.order),
        'degraded': result.degraded,
        'message': degraded_message if result.degraded else success_message,
    }


def is_truthy(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


@method_decorator(csrf_protect, name='dispatch')
class OrderAPIView(APIView):
    """Base view: maps order-layer errors onto JSON responses"""

    def get_services(self, request) -> OrderServices:
        return OrderServices.for_request(request)

    def get_account_id(self, request) -> int:
        return int(request.session['account_id'])

    def handle_exception(self, exc: Exception) -> Response:
        if isinstance(exc, SessionExpired):
            # PortalAuthenticationMiddleware performs the global logout
            raise exc

        if isinstance(exc, ValidationError):
            errors = exc.message_dict if hasattr(exc, 'error_dict') else {'__all__': exc.messages}
            return Response(
                {'error': exc.messages[0] if exc.messages else _('Invalid request'), 'errors': errors},
                status=status.HTTP_400_BAD_REQUEST,
            )

        if isinstance(exc, InvalidTransition):
            return Response({
                'error': _("Only pending or processing orders can be cancelled."),
                'current_status': exc.current_status,
            }, status=status.HTTP_409_CONFLICT)

        if isinstance(exc, OrderNotFound):
            return Response({
                'error': _('Order not found'),
                'redirect': '/orders/my-orders/',
            }, status=status.HTTP_404_NOT_FOUND)

        if isinstance(exc, RemoteRejected):
            remote_status = exc.status_code or status.HTTP_502_BAD_GATEWAY
            if remote_status >= HTTP_SERVER_ERROR:
                remote_status = status.HTTP_502_BAD_GATEWAY
            return Response(
                {'error': exc.remote_message or _('The store could not complete the request.')},
                status=remote_status,
            )

        if isinstance(exc, OrchidAPIError):
            logger.error(f"🔥 [Orders] Orchid API failure: {exc}")
            return Response(
                {'error': _('The store is temporarily unavailable. Please try again.')},
                status=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        if isinstance(exc, (APIException, Http404, PermissionDenied)):
            return super().handle_exception(exc)

        logger.exception(f"🔥 [Orders] Unexpected error: {exc}")
        return Response(
            {'error': _('An unexpected error occurred. Please try again.')},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


# ===============================================================================
# CART 🛒
# ===============================================================================

def cart_to_view(cart: OrchidCartSession) -> dict[str, Any]:
    items = [
        {**item, 'subtotal': item['unit_price'] * item['quantity']}
        for item in cart.get_items()
    ]
    return {
        'items': items,
        'item_count': cart.get_item_count(),
        'total_quantity': cart.get_total_quantity(),
        'breakdown': breakdown_to_view(OrderComposer.cost_breakdown(cart.selections())),
    }


@method_decorator(require_authentication, name='dispatch')
class CartView(OrderAPIView):
    def get(self, request) -> Response:
        return Response(cart_to_view(OrchidCartSession(request.session)))


def resolve_product(services: OrderServices, product_id: Any) -> Product:
    product_id = OrderInputValidator.validate_product_id(product_id)
    product = load_catalog_snapshot(services.api).resolve(product_id)
    if product is None:
        raise ValidationError(_("Product is not available"))
    return product


@method_decorator(require_authentication, name='dispatch')
class CartAddView(OrderAPIView):
    def post(self, request) -> Response:
        product = resolve_product(self.get_services(request), request.data.get('product_id'))
        cart = OrchidCartSession(request.session)
        cart.add_item(product, request.data.get('quantity', 1))
        return Response({
            **cart_to_view(cart),
            'message': _('%(name)s added to cart') % {'name': product.name},
        })


@method_decorator(require_authentication, name='dispatch')
class CartUpdateView(OrderAPIView):
    def post(self, request) -> Response:
        product_id = OrderInputValidator.validate_product_id(request.data.get('product_id'))
        cart = OrchidCartSession(request.session)
        cart.update_item_quantity(product_id, request.data.get('quantity'))
        return Response(cart_to_view(cart))


@method_decorator(require_authentication, name='dispatch')
class CartRemoveView(OrderAPIView):
    def post(self, request) -> Response:
        product_id = OrderInputValidator.validate_product_id(request.data.get('product_id'))
        cart = OrchidCartSession(request.session)
        cart.remove_item(product_id)
        return Response(cart_to_view(cart))


# ===============================================================================
# CHECKOUT 💳
# ===============================================================================

@method_decorator(require_authentication, name='dispatch')
class CheckoutView(OrderAPIView):
    """
    GET: cost breakdown of the cart.
    POST: validate the checkout form, compose and submit the order.

    A POST carrying an `items` list ([{product_id, quantity}]) is a buy-now
    checkout and leaves the cart alone.
    """

    def get(self, request) -> Response:
        services = self.get_services(request)
        cart = OrchidCartSession(request.session)
        return Response({
            'breakdown': breakdown_to_view(services.composer.cost_breakdown(cart.selections())),
            'payment_methods': sorted(OrderInputValidator.ALLOWED_PAYMENT_METHODS),
        })

    def _buy_now_selections(self, services: OrderServices, items: Any) -> list[tuple[Product, int]]:
        if not isinstance(items, list):
            raise ValidationError(_("Invalid item list"))
        selections = []
        for entry in items:
            if not isinstance(entry, dict):
                raise ValidationError(_("Invalid item list"))
            product = resolve_product(services, entry.get('product_id'))
            selections.append((product, OrderInputValidator.validate_quantity(entry.get('quantity', 1))))
        return selections

    def post(self, request) -> Response:
        services = self.get_services(request)
        form = OrderInputValidator.validate_checkout_form(request.data)

        buy_now = 'items' in request.data
        cart = OrchidCartSession(request.session)
        if buy_now:
            selections = self._buy_now_selections(services, request.data.get('items'))
        else:
            selections = cart.selections()

        order_request = services.composer.build_request(self.get_account_id(request), selections)
        result = services.gateway.submit(order_request, account_name=request.session.get('account_name'))

        if not buy_now:
            cart.clear()

        logger.info(
            f"📦 [Orders] Checkout by account {order_request.account_id}: order {result.order.id} "
            f"(degraded={result.degraded})"
        )
        payload = result_to_view(result, _('Thank you! Your order has been placed.'), DEGRADED_ORDER_MESSAGE)
        payload['payment_method'] = form['payment_method']
        payload['shipping'] = {
            key: form[key] for key in ('full_name', 'email', 'phone', 'address', 'city', 'note')
        }
        return Response(payload, status=status.HTTP_201_CREATED)


# ===============================================================================
# ORDER HISTORY AND DETAIL 📋
# ===============================================================================

@method_decorator(require_authentication, name='dispatch')
class MyOrdersView(OrderAPIView):
    def get(self, request) -> Response:
        services = self.get_services(request)
        tab = request.query_params.get('status', ALL_TAB) or ALL_TAB

        orders = services.merge_view.list_by_account(self.get_account_id(request))
        return Response({
            'status': tab,
            'counts': status_counts(orders),
            'orders': [order_to_view(order) for order in filter_by_status(orders, tab)],
        })


@method_decorator(require_authentication, name='dispatch')
class OrderDetailView(OrderAPIView):
    def get(self, request, order_id: int) -> Response:
        services = self.get_services(request)
        order = services.merge_view.find_by_id(self.get_account_id(request), order_id)
        return Response({
            'order': order_to_view(order),
            'can_cancel': order.status.is_cancellable,
        })


@method_decorator(require_authentication, name='dispatch')
class OrderCancelView(OrderAPIView):
    """GET asks for confirmation; POST with confirm=true cancels"""

    def get(self, request, order_id: int) -> Response:
        services = self.get_services(request)
        order = services.lifecycle.locate(order_id, self.get_account_id(request))
        services.lifecycle.ensure_cancellable(order)
        return Response({
            'confirm_required': True,
            'order': order_to_view(order),
            'message': _('Are you sure you want to cancel order #%(id)s?') % {'id': order.id},
        })

    def post(self, request, order_id: int) -> Response:
        services = self.get_services(request)
        order = services.lifecycle.locate(order_id, self.get_account_id(request))
        services.lifecycle.ensure_cancellable(order)

        if not is_truthy(request.data.get('confirm', False)):
            return Response({
                'confirm_required': True,
                'order': order_to_view(order),
                'error': _('Please confirm the cancellation.'),
            }, status=status.HTTP_400_BAD_REQUEST)

        result = services.lifecycle.cancel(order)
        return Response(result_to_view(result, _('Your order has been cancelled.'), DEGRADED_STATUS_MESSAGE))


def convert_to_view(services: OrderServices, order: Order) -> Response:
    """Re-submit a local order with the caller's token"""
    try:
        result = services.gateway.convert(order)
    except OrchidAPIError as e:
        if not is_fallback_error(e):
            raise
        logger.warning(f"⚠️ [Orders] Convert of local order {order.id} postponed: {e}")
        return Response(
            {'error': _('The store is still unreachable; the order stays saved locally.')},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return Response({
        'order': order_to_view(result.order),
        'converted_from': order.id,
        'message': _('Order synchronised with the store.'),
    })


@method_decorator(require_authentication, name='dispatch')
class OrderConvertView(OrderAPIView):
    def post(self, request, order_id: int) -> Response:
        services = self.get_services(request)
        order = services.lifecycle.locate(order_id, self.get_account_id(request))
        return convert_to_view(services, order)


# ===============================================================================
# ORDER ADMINISTRATION 🛠️
# ===============================================================================

@method_decorator(require_admin, name='dispatch')
class AdminOrderListView(OrderAPIView):
    def get(self, request) -> Response:
        services = self.get_services(request)
        tab = request.query_params.get('status', ALL_TAB) or ALL_TAB

        orders = services.merge_view.list_all()
        return Response({
            'status': tab,
            'counts': status_counts(orders),
            'orders': [order_to_view(order) for order in filter_by_status(orders, tab)],
        })


@method_decorator(require_admin, name='dispatch')
class AdminOrderStatusView(OrderAPIView):
    """Free-form status change from the admin dropdown (not gated)"""

    def post(self, request, order_id: int) -> Response:
        services = self.get_services(request)
        order = services.lifecycle.locate(order_id)
        result = services.lifecycle.change_status(order, request.data.get('status', ''))
        return Response(result_to_view(result, _('Order status updated.'), DEGRADED_STATUS_MESSAGE))


@method_decorator(require_admin, name='dispatch')
class AdminOrderConvertView(OrderAPIView):
    """Admins may only synchronise their own local orders"""

    def post(self, request, order_id: int) -> Response:
        services = self.get_services(request)
        order = services.lifecycle.locate(order_id)
        if str(order.account_id) != str(self.get_account_id(request)):
            return Response({
                'error': _('Only the account that placed this order can synchronise it.'),
                'account_id': order.account_id,
            }, status=status.HTTP_409_CONFLICT)
        return convert_to_view(services, order)


@method_decorator(require_admin, name='dispatch')
class AdminOrderDeleteView(OrderAPIView):
    def post(self, request, order_id: int) -> Response:
        services = self.get_services(request)
        order = services.lifecycle.locate(order_id)

        if order.is_local_fallback:
            remove_order(services.store, order.id)
        else:
            services.api.delete_order(order.id)

        logger.info(f"🗑️ [Orders] Order {order.id} deleted by account {request.session.get('account_id')}")
        return Response({'deleted': order.id, 'message': _('Order deleted.')})
