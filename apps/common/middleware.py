"""
Common middleware for the Orchid Portal
"""

import uuid
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from .logging import current_request_id


class RequestIDMiddleware:
    """Add unique request ID for tracing"""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = str(uuid.uuid4())
        request.META["REQUEST_ID"] = request_id
        token = current_request_id.set(request_id)

        try:
            response = self.get_response(request)
        finally:
            current_request_id.reset(token)

        response["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware:
    """Add basic security headers"""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        response = self.get_response(request)

        response["X-Content-Type-Options"] = "nosniff"
        response["X-Frame-Options"] = "DENY"
        response["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response["X-Service"] = "orchid-portal"

        return response
