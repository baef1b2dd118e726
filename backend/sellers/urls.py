from django.urls import path
from .views import (
    SellerProfileView,
    SellerAvailabilityView,
    SellerRecommendationsView,
)

urlpatterns = [
    path("profile/", SellerProfileView.as_view(), name="seller-profile"),
    path("profile/availability/", SellerAvailabilityView.as_view(), name="seller-availability"),
    path("recommendations/<int:request_id>/", SellerRecommendationsView.as_view(), name="seller-recommendations"),
]
