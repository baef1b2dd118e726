"""
Services package - Business logic layer.

This package contains all business logic services that operate on Django models
but are decoupled from the HTTP/WebSocket layer.

Modules:
    - matching: Seller lookup and ranking for a request
    - notifications: Typed payloads, seller fan-out and response notifications
    - request_lifecycle: Request creation, background matching pipeline
    - container: Composition root wiring the pipeline and notifier from settings
"""

# Expose commonly used functions at package level
from .matching import (
    SellerMatcher,
    SellerStore,
    rank_candidates,
)
from .notifications import NotificationFanout
from .request_lifecycle import (
    create_item_request,
    get_request_for_viewer,
    complete_request,
    cancel_request,
    expire_overdue_requests,
    MatchingPipeline,
    RequestNotFoundError,
    RequestNotEditableError,
    SellerProfileExistsError,
    SellerProfileNotFoundError,
)

__all__ = [
    # Matching
    "SellerMatcher",
    "SellerStore",
    "rank_candidates",
    # Notifications
    "NotificationFanout",
    # Request lifecycle
    "create_item_request",
    "get_request_for_viewer",
    "complete_request",
    "cancel_request",
    "expire_overdue_requests",
    "MatchingPipeline",
    # Exceptions
    "RequestNotFoundError",
    "RequestNotEditableError",
    "SellerProfileExistsError",
    "SellerProfileNotFoundError",
]
