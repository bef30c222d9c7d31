"""
Orders App Configuration for the Orchid Portal
Handles the session cart, checkout, order history and order administration.
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    """Configuration for the orders application"""

    name = "apps.orders"
    verbose_name = "Orders"
