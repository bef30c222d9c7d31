"""
Test suite for ResilientOrderGateway
Remote-first creation, local fallback, conversion and status routing.
"""

from unittest.mock import Mock

from django.test import SimpleTestCase

from apps.api_client.services import (
    AuthorizationDenied,
    RemoteRejected,
    SessionExpired,
    TransportUnreachable,
)
from apps.orders.catalog import CatalogSnapshot
from apps.orders.exceptions import InvalidTransition, OrderNotFound, OrderValidationError
from apps.orders.fallback import InMemoryFallbackOrderStore, load_orders
from apps.orders.gateway import ResilientOrderGateway
from apps.orders.schemas import FALLBACK_ID_THRESHOLD, OrderStatus, order_to_store
from tests.factories import (
    FALLBACK_ORDER_ID,
    make_order,
    make_order_dict,
    make_order_request,
    make_product,
)


class GatewayTestMixin:
    def setUp(self):
        self.api = Mock()
        self.store = InMemoryFallbackOrderStore()
        self.catalog = CatalogSnapshot.from_products([make_product(7, name='Phalaenopsis Catalog')])
        self.gateway = ResilientOrderGateway(
            self.api,
            self.store,
            catalog_loader=lambda: self.catalog,
            clock=lambda: FALLBACK_ORDER_ID / 1000,
        )


class TestGatewaySubmit(GatewayTestMixin, SimpleTestCase):
    """submit() creates remotely and falls back only for reachability failures"""

    def test_remote_success_returns_authoritative_order(self):
        self.api.create_order.return_value = make_order_dict(order_id=101)

        result = self.gateway.submit(make_order_request())

        self.assertFalse(result.degraded)
        self.assertEqual(result.order.id, 101)
        self.assertFalse(result.order.is_local_fallback)
        self.assertEqual(self.store.get(), [])

    def test_remote_payload_shape(self):
        self.api.create_order.return_value = make_order_dict()

        self.gateway.submit(make_order_request(quantity=3, price=2000))

        payload = self.api.create_order.call_args.args[0]
        self.assertEqual(payload['items'][0]['orchidId'], 7)
        self.assertEqual(payload['items'][0]['quantity'], 3)
        self.assertEqual(payload['items'][0]['price'], 2000)
        self.assertEqual(payload['items'][0]['subtotal'], 6000)

    def test_unreachable_api_stores_local_order(self):
        self.api.create_order.side_effect = TransportUnreachable("Orchid API unavailable")

        result = self.gateway.submit(make_order_request(quantity=2, price=1000), account_name='Lan')

        self.assertTrue(result.degraded)
        order = result.order
        self.assertEqual(order.id, FALLBACK_ORDER_ID)
        self.assertGreaterEqual(order.id, FALLBACK_ID_THRESHOLD)
        self.assertTrue(order.is_local_fallback)
        self.assertEqual(order.status, OrderStatus.PENDING)
        self.assertEqual(order.total_amount, 2 * 1000 + 50_000)
        self.assertEqual(order.account_id, 5)
        self.assertEqual(order.account_name, 'Lan')
        self.assertEqual(len(order.details), 1)
        self.assertEqual(order.details[0].product_name, 'Phalaenopsis Catalog')
        self.assertEqual(order.details[0].order_id, FALLBACK_ORDER_ID)

        stored = load_orders(self.store)
        self.assertEqual([o.id for o in stored], [FALLBACK_ORDER_ID])

    def test_forbidden_and_not_found_fall_back(self):
        for error in (AuthorizationDenied("forbidden", 403), AuthorizationDenied("missing", 404)):
            self.api.create_order.side_effect = error
            result = self.gateway.submit(make_order_request())
            self.assertTrue(result.degraded)

        self.assertEqual(len(self.store.get()), 2)

    def test_rejected_order_is_not_stored(self):
        self.api.create_order.side_effect = RemoteRejected("out of stock", 400, {'message': 'out of stock'})

        with self.assertRaises(RemoteRejected):
            self.gateway.submit(make_order_request())

        self.assertEqual(self.store.get(), [])

    def test_server_error_is_not_stored(self):
        self.api.create_order.side_effect = RemoteRejected("boom", 500)

        with self.assertRaises(RemoteRejected):
            self.gateway.submit(make_order_request())

        self.assertEqual(self.store.get(), [])

    def test_expired_session_propagates(self):
        self.api.create_order.side_effect = SessionExpired("expired", 401)

        with self.assertRaises(SessionExpired):
            self.gateway.submit(make_order_request())

        self.assertEqual(self.store.get(), [])

    def test_fallback_ids_are_unique_within_same_millisecond(self):
        self.api.create_order.side_effect = TransportUnreachable("down")

        first = self.gateway.submit(make_order_request()).order
        second = self.gateway.submit(make_order_request()).order

        self.assertNotEqual(first.id, second.id)
        self.assertEqual(second.id, first.id + 1)

    def test_fallback_id_never_below_threshold(self):
        self.api.create_order.side_effect = TransportUnreachable("down")
        self.gateway.clock = lambda: 0.5

        order = self.gateway.submit(make_order_request()).order

        self.assertEqual(order.id, FALLBACK_ID_THRESHOLD)

    def test_catalog_outage_keeps_line_item_labels(self):
        self.api.create_order.side_effect = TransportUnreachable("down")
        self.gateway.catalog_loader = Mock(side_effect=TransportUnreachable("down"))

        order = self.gateway.submit(make_order_request()).order

        self.assertEqual(order.details[0].product_name, 'Phalaenopsis White')

    def test_remote_id_inside_fallback_range_rejected(self):
        self.api.create_order.return_value = make_order_dict(order_id=FALLBACK_ID_THRESHOLD + 5)

        with self.assertRaises(RemoteRejected):
            self.gateway.submit(make_order_request())

    def test_malformed_remote_response_rejected(self):
        self.api.create_order.return_value = {'message': 'ok'}

        with self.assertRaises(RemoteRejected):
            self.gateway.submit(make_order_request())


class TestGatewayConvert(GatewayTestMixin, SimpleTestCase):
    """convert() re-submits a local order and retires it only on success"""

    def setUp(self):
        super().setUp()
        self.local_order = make_order(order_id=FALLBACK_ORDER_ID)
        self.store.put([order_to_store(self.local_order)])

    def test_successful_convert_removes_local_copy(self):
        self.api.create_order.return_value = make_order_dict(order_id=202)

        result = self.gateway.convert(self.local_order)

        self.assertFalse(result.degraded)
        self.assertEqual(result.order.id, 202)
        self.assertFalse(result.order.is_local_fallback)
        self.assertEqual(result.order.total_amount, self.local_order.total_amount)
        self.assertEqual(
            [(i.product_id, i.unit_price, i.quantity) for i in result.order.line_items()],
            [(i.product_id, i.unit_price, i.quantity) for i in self.local_order.line_items()],
        )
        self.assertEqual(self.store.get(), [])
        payload = self.api.create_order.call_args.args[0]
        self.assertEqual(payload['items'][0]['quantity'], 2)
        self.api.update_order_status.assert_not_called()

    def test_failed_convert_leaves_store_untouched(self):
        before = self.store.get()
        for error in (TransportUnreachable("down"), AuthorizationDenied("no", 403), RemoteRejected("bad", 400)):
            self.api.create_order.side_effect = error
            with self.assertRaises(type(error)):
                self.gateway.convert(self.local_order)
            self.assertEqual(self.store.get(), before)

    def test_authoritative_order_cannot_be_converted(self):
        with self.assertRaises(OrderValidationError):
            self.gateway.convert(make_order(order_id=101))

        self.api.create_order.assert_not_called()

    def test_non_pending_status_follows_the_order(self):
        processing = self.local_order.with_status(OrderStatus.PROCESSING)
        self.api.create_order.return_value = make_order_dict(order_id=202)
        self.api.update_order_status.return_value = make_order_dict(order_id=202, status='processing')

        result = self.gateway.convert(processing)

        self.api.update_order_status.assert_called_once_with(202, 'processing')
        self.assertEqual(result.order.status, OrderStatus.PROCESSING)

    def test_status_carry_failure_keeps_converted_order(self):
        processing = self.local_order.with_status(OrderStatus.PROCESSING)
        self.api.create_order.return_value = make_order_dict(order_id=202)
        self.api.update_order_status.side_effect = TransportUnreachable("down")

        result = self.gateway.convert(processing)

        self.assertEqual(result.order.id, 202)
        self.assertEqual(result.order.status, OrderStatus.PENDING)
        self.assertEqual(self.store.get(), [])


class TestGatewayStatusUpdates(GatewayTestMixin, SimpleTestCase):
    """update_status() routes by provenance"""

    def test_local_order_updated_in_store_without_api_call(self):
        local_order = make_order(order_id=FALLBACK_ORDER_ID)
        self.store.put([order_to_store(local_order)])

        result = self.gateway.update_status(local_order, OrderStatus.SHIPPED)

        self.assertFalse(result.degraded)
        self.assertEqual(result.order.status, OrderStatus.SHIPPED)
        self.assertEqual(load_orders(self.store)[0].status, OrderStatus.SHIPPED)
        self.api.update_order_status.assert_not_called()

    def test_missing_local_order_raises_not_found(self):
        with self.assertRaises(OrderNotFound):
            self.gateway.update_status(make_order(order_id=FALLBACK_ORDER_ID), OrderStatus.SHIPPED)

    def test_remote_order_updated_through_api(self):
        self.api.update_order_status.return_value = make_order_dict(order_id=101, status='shipped', orderDetails=[])

        result = self.gateway.update_status(make_order(order_id=101), OrderStatus.SHIPPED)

        self.api.update_order_status.assert_called_once_with(101, 'shipped')
        self.assertFalse(result.degraded)
        self.assertEqual(result.order.status, OrderStatus.SHIPPED)
        self.assertEqual(len(result.order.details), 1)

    def test_remote_outage_degrades_without_persisting(self):
        self.api.update_order_status.side_effect = TransportUnreachable("down")

        result = self.gateway.update_status(make_order(order_id=101), OrderStatus.SHIPPED)

        self.assertTrue(result.degraded)
        self.assertEqual(result.order.status, OrderStatus.SHIPPED)
        self.assertEqual(self.store.get(), [])

    def test_remote_rejection_propagates(self):
        self.api.update_order_status.side_effect = RemoteRejected("bad", 400)

        with self.assertRaises(RemoteRejected):
            self.gateway.update_status(make_order(order_id=101), OrderStatus.SHIPPED)

    def test_cancel_gated_before_io(self):
        shipped = make_order(order_id=101, status=OrderStatus.SHIPPED)

        with self.assertRaises(InvalidTransition):
            self.gateway.cancel(shipped)

        self.api.update_order_status.assert_not_called()
