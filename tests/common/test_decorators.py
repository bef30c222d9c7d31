from django.contrib.sessions.backends.cache import SessionStore
from django.http import HttpResponse
from django.test import RequestFactory, SimpleTestCase

from apps.common.decorators import require_admin, require_authentication


@require_authentication
def customer_view(request):
    return HttpResponse('ok')


@require_admin
def admin_view(request):
    return HttpResponse('ok')


class AccessDecoratorTests(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def _request(self, path='/orders/my-orders/', json=False, **session_data):
        headers = {'HTTP_ACCEPT': 'application/json'} if json else {}
        request = self.factory.get(path, **headers)
        request.session = SessionStore()
        request.session.update(session_data)
        return request

    def test_anonymous_redirected_with_next(self):
        response = customer_view(self._request())

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.url, '/login/?next=/orders/my-orders/')

    def test_anonymous_json_gets_401(self):
        response = customer_view(self._request(json=True))

        self.assertEqual(response.status_code, 401)

    def test_token_without_account_is_anonymous(self):
        response = customer_view(self._request(json=True, token='tok'))

        self.assertEqual(response.status_code, 401)

    def test_authenticated_passes(self):
        response = customer_view(self._request(token='tok', account_id=5))

        self.assertEqual(response.status_code, 200)

    def test_customer_refused_admin_view(self):
        response = admin_view(self._request(token='tok', account_id=5, role_id=3))

        self.assertEqual(response.status_code, 403)

    def test_admin_and_superadmin_allowed(self):
        for role_id in (1, 2):
            response = admin_view(self._request(token='tok', account_id=5, role_id=role_id))
            self.assertEqual(response.status_code, 200)
