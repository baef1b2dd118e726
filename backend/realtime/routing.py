"""WebSocket URL routing for the realtime app."""

from django.urls import re_path

from .consumers.marketplace_consumer import MarketplaceConsumer

websocket_urlpatterns = [
    # URL: ws://localhost:8000/ws/notifications/?token=<access>
    re_path(
        r"ws/notifications/$",
        MarketplaceConsumer.as_asgi(),
        name="notifications-ws"
    ),
]
