"""
Portal Account Views
Login, logout, registration, profile and password recovery against the
Orchid API. The API token and account identity live in the Django session.
"""

import logging
from typing import Any

from django.middleware.csrf import get_token, rotate_token
from django.utils.decorators import method_decorator
from django.utils.translation import gettext as _
from django.views.decorators.csrf import csrf_protect
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.api_client.services import (
    AuthorizationDenied,
    OrchidAPIClient,
    OrchidAPIError,
    RemoteRejected,
    SessionExpired,
    TransportUnreachable,
)
from apps.common.decorators import require_authentication

from .forms import LoginForm, PasswordResetConfirmForm, PasswordResetRequestForm, ProfileForm, RegistrationForm
from .permissions import get_role_name, get_user_permissions

logger = logging.getLogger(__name__)

SESSION_ACCOUNT_KEYS = ('token', 'account_id', 'account_name', 'email', 'role_id', 'role_name')


def unwrap_result(response: Any) -> dict[str, Any]:
    """Auth endpoints answer {code, message, result}; older ones return the payload directly"""
    if isinstance(response, dict) and isinstance(response.get('result'), dict):
        return response['result']
    return response if isinstance(response, dict) else {}


def form_errors_response(form) -> Response:
    return Response(
        {'error': _('Please correct the errors below.'), 'errors': form.errors.get_json_data()},
        status=status.HTTP_400_BAD_REQUEST,
    )


def unavailable_response() -> Response:
    return Response(
        {'error': _('Authentication service is temporarily unavailable. Please try again later.')},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


def account_to_view(session) -> dict[str, Any]:
    role_id = session.get('role_id')
    permissions = get_user_permissions(role_id)
    return {
        'account_id': session.get('account_id'),
        'account_name': session.get('account_name'),
        'email': session.get('email'),
        'role_id': role_id,
        'role_name': session.get('role_name') or get_role_name(role_id),
        'permissions': {
            'can_edit_roles': permissions.can_edit_roles,
            'can_manage_accounts': permissions.can_manage_accounts,
            'can_manage_orchids': permissions.can_manage_orchids,
            'can_manage_orders': permissions.can_manage_orders,
            'can_delete_accounts': permissions.can_delete_accounts,
        },
    }


@method_decorator(csrf_protect, name='dispatch')
class LoginView(APIView):
    def get(self, request) -> Response:
        """Hand a JSON client the CSRF token it must echo in X-CSRFToken"""
        return Response({'csrf_token': get_token(request)})

    def post(self, request) -> Response:
        form = LoginForm(request.data)
        if not form.is_valid():
            return form_errors_response(form)

        email = form.cleaned_data['email']
        try:
            account = unwrap_result(OrchidAPIClient().login(email, form.cleaned_data['password']))
        except (RemoteRejected, SessionExpired, AuthorizationDenied) as e:
            logger.warning(f"⚠️ [Auth] Login refused for {email}: {e}")
            return Response(
                {'error': e.remote_message or _('Invalid email address or password. Please try again.')},
                status=status.HTTP_401_UNAUTHORIZED,
            )
        except TransportUnreachable as e:
            logger.error(f"🔥 [Auth] Orchid API unreachable during login: {e}")
            return unavailable_response()

        if not account.get('token'):
            logger.error(f"🔥 [Auth] Login response for {email} carried no token")
            return unavailable_response()

        # Prevent session fixation
        request.session.cycle_key()
        request.session['token'] = account['token']
        request.session['account_id'] = account.get('accountId')
        request.session['account_name'] = account.get('accountName')
        request.session['email'] = account.get('email') or email
        request.session['role_id'] = account.get('roleId')
        request.session['role_name'] = account.get('roleName')
        rotate_token(request)

        logger.info(f"✅ [Auth] Account {account.get('accountId')} logged in")
        return Response({
            'account': account_to_view(request.session),
            'csrf_token': get_token(request),
            'message': _('Welcome back, %(name)s!') % {'name': account.get('accountName') or email},
        })


@method_decorator(csrf_protect, name='dispatch')
class LogoutView(APIView):
    def post(self, request) -> Response:
        account_name = request.session.get('account_name')
        token = request.session.get('token')

        if token:
            try:
                OrchidAPIClient(token=token).logout()
            except OrchidAPIError as e:
                # The local session is cleared regardless
                logger.info(f"ℹ️ [Auth] Remote logout failed: {e}")

        request.session.flush()
        logger.info(f"✅ [Auth] Account {account_name or 'unknown'} logged out")
        if account_name:
            message = _('Goodbye, %(name)s! You have been logged out.') % {'name': account_name}
        else:
            message = _('You have been logged out.')
        return Response({'message': message, 'redirect': '/login/'})


@method_decorator(csrf_protect, name='dispatch')
class RegisterView(APIView):
    def post(self, request) -> Response:
        form = RegistrationForm(request.data)
        if not form.is_valid():
            return form_errors_response(form)

        data = form.cleaned_data
        try:
            account = unwrap_result(OrchidAPIClient().register(
                data['account_name'], data['email'], data['password'], data['confirm_password'],
            ))
        except RemoteRejected as e:
            return Response(
                {'error': e.remote_message or _('Registration failed. Please try again.')},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except OrchidAPIError as e:
            logger.error(f"🔥 [Auth] Registration unavailable: {e}")
            return unavailable_response()

        logger.info(f"✅ [Auth] Account registered: {account.get('accountId')}")
        return Response({
            'account_id': account.get('accountId'),
            'message': _('Registration successful. You can now log in.'),
        }, status=status.HTTP_201_CREATED)


@method_decorator(csrf_protect, name='dispatch')
@method_decorator(require_authentication, name='dispatch')
class ProfileView(APIView):
    def get(self, request) -> Response:
        profile = {}
        try:
            profile = unwrap_result(OrchidAPIClient.for_request(request).get_profile())
        except SessionExpired:
            raise
        except OrchidAPIError as e:
            logger.debug(f"Could not load profile from Orchid API: {e}")
        return Response({'account': account_to_view(request.session), 'profile': profile})

    def post(self, request) -> Response:
        form = ProfileForm(request.data)
        if not form.is_valid():
            return form_errors_response(form)

        account_name = form.cleaned_data['account_name']
        try:
            OrchidAPIClient.for_request(request).update_profile(account_name)
        except RemoteRejected as e:
            return Response(
                {'error': e.remote_message or _('Profile could not be updated.')},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except (TransportUnreachable, AuthorizationDenied) as e:
            logger.error(f"🔥 [Auth] Profile update unavailable: {e}")
            return unavailable_response()

        request.session['account_name'] = account_name
        logger.info(f"✅ [Auth] Profile updated for account {request.session.get('account_id')}")
        return Response({'account': account_to_view(request.session), 'message': _('Profile updated.')})


@method_decorator(csrf_protect, name='dispatch')
class PasswordResetView(APIView):
    def post(self, request) -> Response:
        form = PasswordResetRequestForm(request.data)
        if not form.is_valid():
            return form_errors_response(form)

        email = form.cleaned_data['email']
        try:
            OrchidAPIClient().forgot_password(email)
        except (RemoteRejected, AuthorizationDenied) as e:
            # Same answer whether or not the account exists
            logger.info(f"ℹ️ [Auth] Reset request for {email} not accepted: {e}")
        except TransportUnreachable as e:
            logger.error(f"🔥 [Auth] Password reset unavailable: {e}")
            return unavailable_response()

        return Response({
            'message': _('If an account with that email exists, you will receive password reset instructions.'),
        })


@method_decorator(csrf_protect, name='dispatch')
class PasswordResetConfirmView(APIView):
    def post(self, request) -> Response:
        form = PasswordResetConfirmForm(request.data)
        if not form.is_valid():
            return form_errors_response(form)

        data = form.cleaned_data
        try:
            OrchidAPIClient().reset_password(data['token'], data['new_password'], data['confirm_password'])
        except RemoteRejected as e:
            return Response(
                {'error': e.remote_message or _('The reset link is invalid or has expired.')},
                status=status.HTTP_400_BAD_REQUEST,
            )
        except OrchidAPIError as e:
            logger.error(f"🔥 [Auth] Password reset confirmation unavailable: {e}")
            return unavailable_response()

        logger.info("✅ [Auth] Password reset completed")
        return Response({'message': _('Your password has been reset. Please log in.'), 'redirect': '/login/'})
