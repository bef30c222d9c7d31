"""
API Client app configuration for the Orchid Storefront Portal
"""

from django.apps import AppConfig


class ApiClientConfig(AppConfig):
    """Configuration for the Orchid REST API client"""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.api_client"
    verbose_name = "Orchid API Client"
