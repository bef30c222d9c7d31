"""
Users App Configuration for the Orchid Portal
Session authentication against the Orchid API and role permissions.
"""

from django.apps import AppConfig


class UsersConfig(AppConfig):
    name = "apps.users"
    verbose_name = "Portal Users"
