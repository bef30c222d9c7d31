"""
Orchid API Client (Portal → Orchid REST API)

Transport guidelines:
- Every request carries the session's bearer token when one is available
  ('Authorization: Bearer <token>') and a JSON body/Accept header.
- Failures are classified exactly once, here, into the portal error taxonomy
  (TransportUnreachable, AuthorizationDenied, SessionExpired, RemoteRejected).
  Callers decide between "fall back" and "hard fail" with is_fallback_error()
  and never re-parse error text.
- Endpoint methods return the decoded JSON as-is (camelCase wire format);
  mapping into portal types happens in apps.orders.schemas.
"""

# ===============================================================================
# ORCHID API CLIENT SERVICE - PORTAL TO REMOTE API COMMUNICATION 🔗
# ===============================================================================

from __future__ import annotations

import logging
import urllib.parse
from typing import Any

import requests
from django.conf import settings
from django.http import HttpRequest

# HTTP status code constants
HTTP_OK = 200
HTTP_MULTIPLE_CHOICES = 300
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_NOT_FOUND = 404

# 401 on these endpoints means "bad reset token", not "session expired"
PASSWORD_RECOVERY_ENDPOINTS = ('/accounts/forgot-password', '/accounts/reset-password')

logger = logging.getLogger(__name__)


class OrchidAPIError(Exception):
    """Exception raised when Orchid API calls fail"""
    def __init__(self, message: str, status_code: int | None = None, response_data: Any = None):
        self.message = message
        self.status_code = status_code
        self.response_data = response_data
        super().__init__(message)

    @property
    def remote_message(self) -> str | None:
        """The remote error's own message field, when the server sent one"""
        if isinstance(self.response_data, dict):
            message = self.response_data.get('message') or self.response_data.get('error')
            if message:
                return str(message)
        return None


class TransportUnreachable(OrchidAPIError):
    """Network, CORS, timeout or connection failure - the remote was never reached"""


class AuthorizationDenied(OrchidAPIError):
    """Remote explicitly refused the endpoint (403 Forbidden / 404 Not Found)"""


class SessionExpired(OrchidAPIError):
    """Bearer token rejected (401) outside of password recovery"""


class RemoteRejected(OrchidAPIError):
    """Business-rule or server error reported by the remote system"""


def is_fallback_error(exc: BaseException) -> bool:
    """True when the failure class is recovered by the local fallback path"""
    return isinstance(exc, (TransportUnreachable, AuthorizationDenied))


def classify_error_response(status_code: int, endpoint: str, error_data: Any) -> OrchidAPIError:
    """Map a non-2xx response onto the error taxonomy"""
    probe = OrchidAPIError('', status_code, error_data)
    detail = probe.remote_message or 'Unknown error'
    message = f"API request failed: {detail}"

    if status_code in (HTTP_FORBIDDEN, HTTP_NOT_FOUND):
        return AuthorizationDenied(message, status_code=status_code, response_data=error_data)
    if status_code == HTTP_UNAUTHORIZED and not endpoint.startswith(PASSWORD_RECOVERY_ENDPOINTS):
        return SessionExpired(message, status_code=status_code, response_data=error_data)
    return RemoteRejected(message, status_code=status_code, response_data=error_data)


class OrchidAPIClient:
    """
    Centralized API client for communication with the Orchid REST API.

    Handles:
    - Bearer token authentication
    - Error classification at the transport boundary
    - Request logging
    """

    def __init__(self, token: str | None = None, base_url: str | None = None,
                 timeout: int | None = None) -> None:
        self.base_url = base_url or settings.ORCHID_API_BASE_URL
        self.timeout = timeout or settings.ORCHID_API_TIMEOUT
        self.token = token

    @classmethod
    def for_request(cls, request: HttpRequest) -> OrchidAPIClient:
        """Client bound to the bearer token stored in the portal session"""
        return cls(token=request.session.get('token'))

    def with_token(self, token: str | None) -> OrchidAPIClient:
        return OrchidAPIClient(token=token, base_url=self.base_url, timeout=self.timeout)

    # ---- Small helpers to keep _make_request flat ----
    def _build_url(self, endpoint: str) -> str:
        return f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"

    def _build_headers(self) -> dict[str, str]:
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
        }
        if self.token:
            headers['Authorization'] = f"Bearer {self.token}"
        return headers

    def _handle_api_response(self, response: requests.Response, endpoint: str) -> Any:
        if HTTP_OK <= response.status_code < HTTP_MULTIPLE_CHOICES:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError:
                return {'success': True}

        try:
            error_data = response.json()
        except ValueError:
            error_data = {'error': 'Invalid response format'}

        raise classify_error_response(response.status_code, endpoint, error_data)

    def _make_request(self, method: str, endpoint: str, data: Any = None,
                      params: dict | None = None) -> Any:
        """Make an authenticated request to the Orchid API"""
        url = self._build_url(endpoint)

        try:
            response = requests.request(
                method=method,
                url=url,
                headers=self._build_headers(),
                json=data,
                params=params if params else None,
                timeout=self.timeout,
            )

            logger.debug(f"🌐 [API Client] {method} {url} -> {response.status_code}")

        except requests.exceptions.ConnectionError as e:
            logger.error(f"🔥 [API Client] Connection failed to Orchid API: {url}")
            raise TransportUnreachable("Orchid API unavailable") from e
        except requests.exceptions.Timeout as e:
            logger.error(f"🔥 [API Client] Timeout connecting to Orchid API: {url}")
            raise TransportUnreachable("Orchid API timeout") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"🔥 [API Client] Request error: {e}")
            raise TransportUnreachable(f"Request failed: {e!s}") from e

        return self._handle_api_response(response, endpoint)

    # ===============================================================================
    # GENERIC HTTP METHODS
    # ===============================================================================

    def get(self, endpoint: str, params: dict | None = None) -> Any:
        """Generic GET request"""
        return self._make_request('GET', endpoint, params=params)

    def post(self, endpoint: str, data: Any = None, params: dict | None = None) -> Any:
        """Generic POST request"""
        return self._make_request('POST', endpoint, data=data, params=params)

    def put(self, endpoint: str, data: Any = None, params: dict | None = None) -> Any:
        """Generic PUT request"""
        return self._make_request('PUT', endpoint, data=data, params=params)

    def patch(self, endpoint: str, data: Any = None, params: dict | None = None) -> Any:
        """Generic PATCH request"""
        return self._make_request('PATCH', endpoint, data=data, params=params)

    def delete(self, endpoint: str) -> Any:
        """Generic DELETE request"""
        return self._make_request('DELETE', endpoint)

    # ===============================================================================
    # AUTHENTICATION API ENDPOINTS
    # ===============================================================================

    def register(self, account_name: str, email: str, password: str, confirm_password: str) -> dict[str, Any]:
        return self.post('/accounts/register', data={
            'accountName': account_name,
            'email': email,
            'password': password,
            'confirmPassword': confirm_password,
        })

    def login(self, email: str, password: str) -> dict[str, Any]:
        """Returns the {code, message, result} envelope; result holds token and account"""
        return self.post('/accounts/login', data={'email': email, 'password': password})

    def get_profile(self) -> dict[str, Any]:
        return self.get('/accounts/profile')

    def update_profile(self, account_name: str) -> dict[str, Any]:
        return self.put('/accounts/profile', data={'accountName': account_name})

    def forgot_password(self, email: str) -> dict[str, Any]:
        return self.post('/accounts/forgot-password', data={'email': email})

    def reset_password(self, token: str, new_password: str, confirm_password: str) -> dict[str, Any]:
        return self.post('/accounts/reset-password', data={
            'token': token,
            'newPassword': new_password,
            'confirmPassword': confirm_password,
        })

    def logout(self) -> dict[str, Any] | None:
        return self.post('/accounts/logout')

    # ===============================================================================
    # CATALOG API ENDPOINTS 🌸
    # ===============================================================================

    def get_all_orchids(self) -> list[dict[str, Any]]:
        return self.get('/api/orchids/orchids') or []

    def get_orchids_by_category(self, category_id: int) -> list[dict[str, Any]]:
        return self.get(f'/api/orchids/category/{category_id}') or []

    def search_orchids(self, name: str) -> list[dict[str, Any]]:
        return self.get('/api/orchids/search', params={'name': name}) or []

    def get_orchids_by_price_range(self, min_price: int, max_price: int) -> list[dict[str, Any]]:
        return self.get('/api/orchids/price-range', params={'minPrice': min_price, 'maxPrice': max_price}) or []

    def get_orchids_by_natural_type(self, is_natural: bool) -> list[dict[str, Any]]:
        return self.get(f"/api/orchids/natural/{'true' if is_natural else 'false'}") or []

    def get_category_by_name(self, name: str) -> dict[str, Any] | None:
        try:
            return self.get(f'/api/categories/name/{urllib.parse.quote(name)}')
        except AuthorizationDenied as e:
            if e.status_code == HTTP_NOT_FOUND:
                return None
            raise

    # ===============================================================================
    # ORDER API ENDPOINTS 📦
    # ===============================================================================

    def create_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create an order from {items: [...]} for the authenticated account"""
        return self.post('/api/orders', data=payload)

    def get_orders_by_account(self, account_id: int | str) -> list[dict[str, Any]]:
        return self.get(f'/api/orders/account/{account_id}') or []

    def get_orders_by_status(self, status: str) -> list[dict[str, Any]]:
        return self.get(f'/api/orders/status/{status}') or []

    def get_orders_by_date_range(self, start_date: str, end_date: str) -> list[dict[str, Any]]:
        return self.get('/api/orders/date-range', params={'startDate': start_date, 'endDate': end_date}) or []

    def update_order_status(self, order_id: int, status: str) -> dict[str, Any]:
        # Backend reads the new value from the 'orderStatus' query parameter
        return self.patch(f'/api/orders/{order_id}/status', params={'orderStatus': status})

    def get_order_total(self, order_id: int) -> int:
        return self.get(f'/api/orders/{order_id}/total')

    def get_order_details(self, order_id: int) -> list[dict[str, Any]]:
        try:
            return self.get(f'/api/orders/{order_id}/details') or []
        except AuthorizationDenied as e:
            if e.status_code == HTTP_NOT_FOUND:
                logger.info(f"ℹ️ [API Client] No detail endpoint data for order {order_id}")
                return []
            raise

    def get_order_detail_by_id(self, order_detail_id: int) -> dict[str, Any] | None:
        try:
            return self.get(f'/api/orders/details/{order_detail_id}')
        except AuthorizationDenied as e:
            if e.status_code == HTTP_NOT_FOUND:
                return None
            raise

    # ===============================================================================
    # SHOPPING CART API ENDPOINTS 🛒
    # ===============================================================================

    def get_cart(self) -> dict[str, Any]:
        return self.get('/api/cart')

    def add_to_cart(self, orchid_id: int, quantity: int) -> dict[str, Any]:
        return self.post('/api/cart/add', params={'orchidId': orchid_id, 'quantity': quantity})

    def update_cart_item(self, orchid_id: int, quantity: int) -> dict[str, Any]:
        return self.put('/api/cart/update', params={'orchidId': orchid_id, 'quantity': quantity})

    def remove_from_cart(self, orchid_id: int) -> dict[str, Any]:
        return self.delete(f'/api/cart/remove/{orchid_id}')

    def clear_cart(self) -> None:
        self.delete('/api/cart/clear')

    # ===============================================================================
    # ADMIN API ENDPOINTS 🛠️
    # ===============================================================================

    def get_all_categories(self) -> list[dict[str, Any]]:
        return self.get('/api/admin/categories') or []

    def get_category(self, category_id: int) -> dict[str, Any]:
        return self.get(f'/api/admin/categories/{category_id}')

    def create_category(self, category: dict[str, Any]) -> dict[str, Any]:
        return self.post('/api/admin/categories', data=category)

    def update_category(self, category_id: int, category: dict[str, Any]) -> dict[str, Any]:
        return self.put(f'/api/admin/categories/{category_id}', data=category)

    def delete_category(self, category_id: int) -> None:
        self.delete(f'/api/admin/categories/{category_id}')

    def get_all_orchids_admin(self) -> list[dict[str, Any]]:
        return self.get('/api/admin/orchids') or []

    def get_orchid(self, orchid_id: int) -> dict[str, Any]:
        return self.get(f'/api/admin/orchids/{orchid_id}')

    def create_orchid(self, orchid: dict[str, Any]) -> dict[str, Any]:
        return self.post('/api/admin/orchids', data=orchid)

    def update_orchid(self, orchid_id: int, orchid: dict[str, Any]) -> dict[str, Any]:
        return self.put(f'/api/admin/orchids/{orchid_id}', data=orchid)

    def delete_orchid(self, orchid_id: int) -> None:
        self.delete(f'/api/admin/orchids/{orchid_id}')

    def get_all_orders(self) -> list[dict[str, Any]]:
        return self.get('/api/admin/orders') or []

    def get_order(self, order_id: int) -> dict[str, Any]:
        return self.get(f'/api/admin/orders/{order_id}')

    def update_order(self, order_id: int, order: dict[str, Any]) -> dict[str, Any]:
        return self.put(f'/api/admin/orders/{order_id}', data=order)

    def delete_order(self, order_id: int) -> None:
        self.delete(f'/api/admin/orders/{order_id}')

    def get_all_accounts(self) -> list[dict[str, Any]]:
        return self.get('/api/admin/accounts') or []

    def get_account(self, account_id: int | str) -> dict[str, Any]:
        return self.get(f'/api/admin/accounts/{account_id}')

    def create_account(self, account: dict[str, Any]) -> dict[str, Any]:
        return self.post('/api/admin/accounts', data=account)

    def update_account(self, account_id: int | str, account: dict[str, Any]) -> dict[str, Any]:
        return self.put(f'/api/admin/accounts/{account_id}', data=account)

    def delete_account(self, account_id: int | str) -> None:
        self.delete(f'/api/admin/accounts/{account_id}')


# Singleton instance (anonymous; bind a token with with_token/for_request)
api_client = OrchidAPIClient()
