from django.urls import path

from .views import (
    category_list,
    sub_category_list,
    ItemRequestCreateView,
    MyRequestsView,
    ItemRequestDetailView,
    CompleteRequestView,
    CancelRequestView,
)

urlpatterns = [
    # Taxonomy
    path("categories/", category_list, name="category-list"),
    path("categories/<str:category_id>/subcategories/", sub_category_list, name="sub-category-list"),

    # Requests
    path("", ItemRequestCreateView.as_view(), name="request-create"),
    path("mine/", MyRequestsView.as_view(), name="my-requests"),
    path("<int:request_id>/", ItemRequestDetailView.as_view(), name="request-detail"),
    path("<int:request_id>/complete/", CompleteRequestView.as_view(), name="request-complete"),
    path("<int:request_id>/cancel/", CancelRequestView.as_view(), name="request-cancel"),
]
