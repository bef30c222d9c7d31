"""
Portal Authentication Middleware
Session gate in front of every non-public URL, plus the global logout when the
Orchid API rejects the session token.
"""

import logging

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import redirect
from django.utils.http import urlencode
from django.utils.translation import gettext as _

from apps.api_client.services import SessionExpired
from apps.common.decorators import wants_json

logger = logging.getLogger(__name__)


class PortalAuthenticationMiddleware:
    """
    - Public URLs pass through untouched.
    - Everything else needs a session holding the API token and account id;
      the account, role and token are attached to the request for views.
    - A SessionExpired escaping a view (401 from the API) flushes the session
      and sends the user to the login page.
    """

    PUBLIC_URLS = [
        '/login/',
        '/logout/',
        '/register/',
        '/password-reset/',
        '/static/',
        '/status/',
        '/favicon.ico',
    ]

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        if self.is_public_url(request.path):
            return self.get_response(request)

        token = request.session.get('token')
        account_id = request.session.get('account_id')
        if not token or not account_id:
            logger.debug("🔒 [Auth] No API token in session, redirecting to login")
            return self.login_required_response(request)

        request.account_id = account_id
        request.role_id = request.session.get('role_id')
        request.api_token = token
        request.is_authenticated = True

        return self.get_response(request)

    def process_exception(self, request: HttpRequest, exception: Exception) -> HttpResponse | None:
        if not isinstance(exception, SessionExpired):
            return None

        logger.warning(
            f"⏰ [Auth] Orchid API rejected the session token of account "
            f"{request.session.get('account_id', 'unknown')}, forcing logout"
        )
        request.session.flush()
        return self.login_required_response(request)

    def is_public_url(self, path: str) -> bool:
        return any(path.startswith(public_url) for public_url in self.PUBLIC_URLS)

    def login_required_response(self, request: HttpRequest) -> HttpResponse:
        if wants_json(request):
            return JsonResponse(
                {'error': _('Your session has expired. Please log in again.'), 'redirect': '/login/'},
                status=401,
            )
        return self.redirect_to_login(request)

    def redirect_to_login(self, request: HttpRequest) -> HttpResponse:
        """Redirect to login preserving the originally requested URL."""
        login_url = '/login/'
        if request.path and request.path != '/':
            params = urlencode({'next': request.get_full_path()})
            login_url = f'{login_url}?{params}'
        return redirect(login_url)
