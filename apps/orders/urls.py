"""
URL Configuration for Orders App - Orchid Portal
Cart, checkout, order history and order administration routes.
"""

from django.urls import path

from . import views

app_name = "orders"

urlpatterns = [
    # Cart
    path("cart/", views.CartView.as_view(), name="cart"),
    path("cart/add/", views.CartAddView.as_view(), name="cart_add"),
    path("cart/update/", views.CartUpdateView.as_view(), name="cart_update"),
    path("cart/remove/", views.CartRemoveView.as_view(), name="cart_remove"),
    # Checkout and order history
    path("checkout/", views.CheckoutView.as_view(), name="checkout"),
    path("my-orders/", views.MyOrdersView.as_view(), name="my_orders"),
    path("<int:order_id>/", views.OrderDetailView.as_view(), name="detail"),
    path("<int:order_id>/cancel/", views.OrderCancelView.as_view(), name="cancel"),
    path("<int:order_id>/convert/", views.OrderConvertView.as_view(), name="convert"),
    # Administration
    path("admin/", views.AdminOrderListView.as_view(), name="admin_list"),
    path("admin/<int:order_id>/status/", views.AdminOrderStatusView.as_view(), name="admin_status"),
    path("admin/<int:order_id>/convert/", views.AdminOrderConvertView.as_view(), name="admin_convert"),
    path("admin/<int:order_id>/delete/", views.AdminOrderDeleteView.as_view(), name="admin_delete"),
]
