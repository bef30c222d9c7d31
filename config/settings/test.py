"""
Test settings for the Orchid Portal
Fast, isolated testing environment. The Orchid API is always mocked.
"""

from .base import *

# ===============================================================================
# TEST FLAGS
# ===============================================================================

DEBUG = False
SECRET_KEY = "test-only-orchid-portal-key"
ALLOWED_HOSTS = ["testserver", "localhost"]

# Unroutable host: an unmocked call fails fast as TransportUnreachable
ORCHID_API_BASE_URL = "http://orchid-api.invalid"
ORCHID_API_TIMEOUT = 2

SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "orchid-portal-test-cache",
    },
    "fallback_orders": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "orchid-portal-test-fallback-orders",
        "TIMEOUT": None,
    },
}

LOGGING["loggers"]["apps"]["level"] = "WARNING"
