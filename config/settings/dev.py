"""
Development settings for the Orchid Portal
"""

import os

from .base import *

DEBUG = True

# Local development only
SECRET_KEY = os.environ.get("SECRET_KEY", "dev-only-orchid-portal-key")

ALLOWED_HOSTS = ["*"]

SESSION_COOKIE_SECURE = False
CSRF_COOKIE_SECURE = False

LOGGING["loggers"]["apps"]["level"] = "DEBUG"
