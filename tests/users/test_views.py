"""
Test suite for portal account views
Login session handling, logout and the global logout on token expiry.
"""

from unittest.mock import patch

from django.test import Client, SimpleTestCase, override_settings

from apps.api_client.services import RemoteRejected, SessionExpired, TransportUnreachable
from apps.orders.fallback import CacheFallbackOrderStore, append_order, load_orders
from tests.factories import FALLBACK_ORDER_ID, make_order

LOGIN_RESPONSE = {
    'code': 200,
    'message': 'Login successful',
    'result': {
        'token': 'jwt-token',
        'accountId': 5,
        'accountName': 'Lan Nguyen',
        'email': 'lan@example.vn',
        'roleId': 3,
        'roleName': 'Customer',
    },
}


@override_settings(SESSION_ENGINE='django.contrib.sessions.backends.cache')
class TestLoginView(SimpleTestCase):
    def setUp(self):
        self.client = Client()

    @patch('apps.users.views.OrchidAPIClient.login')
    def test_login_stores_token_in_session(self, mock_login):
        mock_login.return_value = LOGIN_RESPONSE

        response = self.client.post(
            '/login/', {'email': 'lan@example.vn', 'password': 'secret1'}, content_type='application/json',
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['account']['account_id'], 5)
        session = self.client.session
        self.assertEqual(session['token'], 'jwt-token')
        self.assertEqual(session['account_id'], 5)
        self.assertEqual(session['role_id'], 3)
        mock_login.assert_called_once_with('lan@example.vn', 'secret1')
        self.assertTrue(response.json()['csrf_token'])

    @patch('apps.users.views.OrchidAPIClient.login')
    def test_bad_credentials(self, mock_login):
        mock_login.side_effect = RemoteRejected("failed", 400, {'message': 'Invalid email or password'})

        response = self.client.post(
            '/login/', {'email': 'lan@example.vn', 'password': 'wrong'}, content_type='application/json',
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error'], 'Invalid email or password')
        self.assertNotIn('token', self.client.session)

    @patch('apps.users.views.OrchidAPIClient.login')
    def test_api_unreachable(self, mock_login):
        mock_login.side_effect = TransportUnreachable("down")

        response = self.client.post(
            '/login/', {'email': 'lan@example.vn', 'password': 'secret1'}, content_type='application/json',
        )

        self.assertEqual(response.status_code, 503)

    def test_invalid_form(self):
        response = self.client.post('/login/', {'email': 'nope'}, content_type='application/json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('password', response.json()['errors'])


@override_settings(SESSION_ENGINE='django.contrib.sessions.backends.cache')
class TestLogoutAndExpiry(SimpleTestCase):
    def setUp(self):
        self.client = Client()
        session = self.client.session
        session['token'] = 'jwt-token'
        session['account_id'] = 5
        session['account_name'] = 'Lan Nguyen'
        session['role_id'] = 3
        session.save()

    @patch('apps.users.views.OrchidAPIClient.logout')
    def test_logout_flushes_session_even_if_remote_fails(self, mock_logout):
        mock_logout.side_effect = TransportUnreachable("down")

        response = self.client.post('/logout/', content_type='application/json')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['redirect'], '/login/')
        self.assertNotIn('token', self.client.session)

    @patch('apps.users.views.OrchidAPIClient.logout')
    def test_logout_keeps_unsynced_fallback_orders(self, mock_logout):
        append_order(CacheFallbackOrderStore(), make_order(order_id=FALLBACK_ORDER_ID, account_id=5))

        response = self.client.post('/logout/', content_type='application/json')

        self.assertEqual(response.status_code, 200)
        self.assertNotIn('token', self.client.session)
        self.assertEqual([o.id for o in load_orders(CacheFallbackOrderStore())], [FALLBACK_ORDER_ID])

    @patch('apps.users.views.OrchidAPIClient.get_profile')
    def test_expired_token_keeps_unsynced_fallback_orders(self, mock_profile):
        mock_profile.side_effect = SessionExpired("expired", 401)
        append_order(CacheFallbackOrderStore(), make_order(order_id=FALLBACK_ORDER_ID, account_id=5))

        response = self.client.get('/profile/', HTTP_ACCEPT='application/json')

        self.assertEqual(response.status_code, 401)
        self.assertNotIn('token', self.client.session)
        self.assertEqual([o.id for o in load_orders(CacheFallbackOrderStore())], [FALLBACK_ORDER_ID])

    @patch('apps.users.views.OrchidAPIClient.get_profile')
    def test_expired_token_forces_login_redirect(self, mock_profile):
        mock_profile.side_effect = SessionExpired("expired", 401)

        response = self.client.get('/profile/')

        self.assertEqual(response.status_code, 302)
        self.assertIn('/login/', response.url)
        self.assertNotIn('token', self.client.session)

    @patch('apps.users.views.OrchidAPIClient.get_profile')
    def test_profile(self, mock_profile):
        mock_profile.return_value = {'result': {'accountName': 'Lan Nguyen'}}

        data = self.client.get('/profile/').json()

        self.assertEqual(data['account']['account_name'], 'Lan Nguyen')
        self.assertFalse(data['account']['permissions']['can_manage_orders'])
        self.assertEqual(data['profile'], {'accountName': 'Lan Nguyen'})


@override_settings(SESSION_ENGINE='django.contrib.sessions.backends.cache')
class TestPasswordReset(SimpleTestCase):
    @patch('apps.users.views.OrchidAPIClient.forgot_password')
    def test_same_answer_for_unknown_account(self, mock_forgot):
        mock_forgot.side_effect = RemoteRejected("failed", 400, {'message': 'No account'})

        response = Client().post('/password-reset/', {'email': 'ghost@example.vn'}, content_type='application/json')

        self.assertEqual(response.status_code, 200)

    @patch('apps.users.views.OrchidAPIClient.reset_password')
    def test_expired_reset_token_does_not_log_out(self, mock_reset):
        mock_reset.side_effect = RemoteRejected("failed", 401, {'message': 'Token expired'})

        response = Client().post('/password-reset/confirm/', {
            'token': 'abc',
            'new_password': 'secret1',
            'confirm_password': 'secret1',
        }, content_type='application/json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Token expired')

    def test_mismatched_passwords(self):
        response = Client().post('/password-reset/confirm/', {
            'token': 'abc',
            'new_password': 'secret1',
            'confirm_password': 'secret2',
        }, content_type='application/json')

        self.assertEqual(response.status_code, 400)
        self.assertIn('confirm_password', response.json()['errors'])


@override_settings(SESSION_ENGINE='django.contrib.sessions.backends.cache')
class TestCsrfEnforcement(SimpleTestCase):
    def setUp(self):
        self.client = Client(enforce_csrf_checks=True)

    @patch('apps.users.views.OrchidAPIClient.login')
    def test_login_without_token_forbidden(self, mock_login):
        response = self.client.post(
            '/login/', {'email': 'lan@example.vn', 'password': 'secret1'}, content_type='application/json',
        )

        self.assertEqual(response.status_code, 403)
        mock_login.assert_not_called()

    @patch('apps.users.views.OrchidAPIClient.login')
    def test_login_with_token_from_login_page(self, mock_login):
        mock_login.return_value = LOGIN_RESPONSE
        csrf_token = self.client.get('/login/').json()['csrf_token']

        response = self.client.post(
            '/login/', {'email': 'lan@example.vn', 'password': 'secret1'},
            content_type='application/json', HTTP_X_CSRFTOKEN=csrf_token,
        )

        self.assertEqual(response.status_code, 200)
        self.assertNotEqual(response.json()['csrf_token'], csrf_token)

    def test_logout_without_token_forbidden(self):
        session = self.client.session
        session['token'] = 'jwt-token'
        session['account_id'] = 5
        session.save()

        response = self.client.post('/logout/', content_type='application/json')

        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.client.session['token'], 'jwt-token')
