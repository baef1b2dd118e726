"""
Notification service.

This module handles:
    - Typed payloads for each notification kind
    - Concurrent fan-out to matched sellers over session + push channels
    - Response notifications to request authors and sellers
"""

from .payloads import (
    NewRequestNotification,
    RequestCreatedConfirmation,
    NewResponseNotification,
    ResponseStatusNotification,
    SessionNotification,
    PushMessage,
    urgency_for,
)
from .fanout import NotificationFanout, DispatchResult
from .responses import Delivery, ResponseNotifier

__all__ = [
    "NewRequestNotification",
    "RequestCreatedConfirmation",
    "NewResponseNotification",
    "ResponseStatusNotification",
    "SessionNotification",
    "PushMessage",
    "urgency_for",
    "NotificationFanout",
    "DispatchResult",
    "Delivery",
    "ResponseNotifier",
]
