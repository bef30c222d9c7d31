"""
Django settings for the Orchid Portal - storefront layer over the Orchid REST API.
"""

import os
from pathlib import Path
from typing import Any

# ===============================================================================
# CORE DJANGO SETTINGS
# ===============================================================================

BASE_DIR = Path(__file__).resolve().parent.parent.parent

DJANGO_APPS: list[str] = [
    "django.contrib.contenttypes",
    "django.contrib.sessions",  # Session framework (cache-only)
]

THIRD_PARTY_APPS: list[str] = [
    "rest_framework",
]

LOCAL_APPS: list[str] = [
    "apps.common",  # Middleware, access decorators, log formatting
    "apps.api_client",  # Orchid REST API transport
    "apps.users",  # Login/profile against the Orchid API, roles
    "apps.orders",  # Cart, checkout, resilient order layer
]

INSTALLED_APPS: list[str] = DJANGO_APPS + THIRD_PARTY_APPS + LOCAL_APPS

MIDDLEWARE: list[str] = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",  # Cache-only sessions
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",  # CSRF protection
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    "apps.common.middleware.RequestIDMiddleware",
    "apps.common.middleware.SecurityHeadersMiddleware",
    "apps.users.middleware.PortalAuthenticationMiddleware",
]

ROOT_URLCONF = "config.urls"

WSGI_APPLICATION = "config.wsgi.application"

# ===============================================================================
# STORAGE - NO DATABASE, CACHE-BACKED SESSIONS
# ===============================================================================

# The portal keeps no business data; every order lives in the Orchid API or
# in the fallback order store.
DATABASES: dict[str, dict[str, Any]] = {}

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "orchid-portal-cache",
    },
    # Unsynced fallback orders: shared by every worker, survives logout and restarts
    "fallback_orders": {
        "BACKEND": "django.core.cache.backends.filebased.FileBasedCache",
        "LOCATION": os.environ.get("ORCHID_FALLBACK_STORE_DIR", str(BASE_DIR / "var" / "fallback_orders")),
        "TIMEOUT": None,
    },
}

SESSION_ENGINE = "django.contrib.sessions.backends.cache"

# ===============================================================================
# ORCHID API CONFIGURATION
# ===============================================================================

ORCHID_API_BASE_URL = os.environ.get("ORCHID_API_BASE_URL", "http://localhost:8080")
ORCHID_API_TIMEOUT = int(os.environ.get("ORCHID_API_TIMEOUT", "30"))
ORCHID_CATALOG_CACHE_SECONDS = int(os.environ.get("ORCHID_CATALOG_CACHE_SECONDS", "300"))

# ===============================================================================
# DJANGO REST FRAMEWORK
# ===============================================================================

# Authentication is the portal session, enforced by middleware and decorators;
# CSRF is enforced per view with csrf_protect
REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": [
        "rest_framework.renderers.JSONRenderer",
    ],
    "DEFAULT_PARSER_CLASSES": [
        "rest_framework.parsers.JSONParser",
    ],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": [],
    "UNAUTHENTICATED_USER": None,
}

# ===============================================================================
# INTERNATIONALIZATION
# ===============================================================================

LANGUAGE_CODE = "en"
TIME_ZONE = "Asia/Ho_Chi_Minh"
USE_I18N = True
USE_TZ = True

# ===============================================================================
# SECURITY SETTINGS
# ===============================================================================

# 🔒 SECURITY: No fallback secrets in base config - must be set in environment
SECRET_KEY = os.environ.get("SECRET_KEY")

DEBUG = os.environ.get("DEBUG", "True").lower() == "true"

ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

# ===============================================================================
# SESSION CONFIGURATION 🔐
# ===============================================================================

SESSION_COOKIE_AGE = 24 * 60 * 60  # 24 hours
SESSION_SAVE_EVERY_REQUEST = False  # Only save when modified
SESSION_COOKIE_NAME = "orchid_portal_session"

SESSION_COOKIE_SECURE = not DEBUG
SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = "Lax"
CSRF_COOKIE_SECURE = not DEBUG
CSRF_COOKIE_HTTPONLY = False  # JSON clients echo it in X-CSRFToken
CSRF_COOKIE_SAMESITE = "Lax"

SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "strict-origin-when-cross-origin"
X_FRAME_OPTIONS = "DENY"

# ===============================================================================
# LOGGING CONFIGURATION
# ===============================================================================

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "request_id": {
            "()": "apps.common.logging.RequestIDFilter",
        },
    },
    "formatters": {
        "verbose": {
            "format": "{levelname} {asctime} {module} {request_id} {message}",
            "style": "{",
        },
        "simple": {
            "format": "{levelname} {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
            "filters": ["request_id"],
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "INFO",
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": os.environ.get("DJANGO_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "apps": {
            "handlers": ["console"],
            "level": "DEBUG" if DEBUG else "INFO",
            "propagate": False,
        },
    },
}
