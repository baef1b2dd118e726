from django.contrib import admin
from django.urls import path, include

from .views import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path("health/", health_check),  # Health check endpoint

    # Authentication endpoints (register + simplejwt token/refresh)
    path('api/auth/', include('accounts.urls')),

    # Device push tokens
    path('api/push-tokens/', include('accounts.push_token_urls')),

    # Item requests + category taxonomy
    path('api/requests/', include('item_requests.urls')),

    # Seller profile, availability and recommendations
    path('api/sellers/', include('sellers.urls')),

    # Seller responses to requests
    path('api/responses/', include('seller_responses.urls')),
]
