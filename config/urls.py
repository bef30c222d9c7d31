"""
URL configuration for the Orchid Portal
Storefront endpoints only - all data comes from the Orchid API.
"""

from django.http import JsonResponse
from django.urls import include, path


# Portal status endpoint
def portal_status(request):
    return JsonResponse({'status': 'healthy', 'service': 'orchid-portal'})


urlpatterns = [
    # Authentication - login/logout/profile/password recovery
    path('', include('apps.users.urls')),

    # Cart, checkout, order history and administration
    path('orders/', include('apps.orders.urls')),

    path('status/', portal_status, name='portal_status'),
]
