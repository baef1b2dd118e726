from django.urls import path

from .views import PushTokenRegisterView, PushTokenUnregisterView, PushTokenStatusView

urlpatterns = [
    path('register/', PushTokenRegisterView.as_view(), name='push-token-register'),
    path('unregister/', PushTokenUnregisterView.as_view(), name='push-token-unregister'),
    path('status/', PushTokenStatusView.as_view(), name='push-token-status'),
]
