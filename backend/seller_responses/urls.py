from django.urls import path

from .views import (
    ResponseCreateView,
    RequestResponsesView,
    MyResponsesView,
    ResponseDetailView,
    ResponseStatusView,
)

urlpatterns = [
    path("", ResponseCreateView.as_view(), name="response-create"),
    path("mine/", MyResponsesView.as_view(), name="my-responses"),
    path("request/<int:request_id>/", RequestResponsesView.as_view(), name="request-responses"),
    path("<int:response_id>/", ResponseDetailView.as_view(), name="response-detail"),
    path("<int:response_id>/status/", ResponseStatusView.as_view(), name="response-status"),
]
