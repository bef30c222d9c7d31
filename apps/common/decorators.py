"""
Access Control Decorators for the Orchid Portal
Session authentication and role checks for views.
"""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import redirect
from django.utils.translation import gettext as _

from apps.users.permissions import get_role_id, is_admin_or_higher

logger = logging.getLogger(__name__)


def wants_json(request: HttpRequest) -> bool:
    accept = request.headers.get('Accept', '')
    return 'application/json' in accept or request.content_type == 'application/json'


def require_authentication(view_func: Callable) -> Callable:
    """🔒 Require a portal session holding an API token and account id"""
    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        if not request.session.get('token') or not request.session.get('account_id'):
            if wants_json(request):
                return JsonResponse({'error': _('Authentication required')}, status=401)
            return redirect(f'/login/?next={request.path}')

        return view_func(request, *args, **kwargs)
    return wrapper


def require_admin(view_func: Callable) -> Callable:
    """🔒 Require the admin or superadmin role"""
    @wraps(view_func)
    def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
        if not request.session.get('token') or not request.session.get('account_id'):
            if wants_json(request):
                return JsonResponse({'error': _('Authentication required')}, status=401)
            return redirect(f'/login/?next={request.path}')

        role_id = get_role_id(request)
        if not is_admin_or_higher(role_id):
            logger.warning(
                f"🚨 [Security] Insufficient permissions: account {request.session.get('account_id')} "
                f"with role {role_id} requested {request.path}"
            )
            return JsonResponse({'error': _('Insufficient permissions')}, status=403)

        return view_func(request, *args, **kwargs)
    return wrapper
