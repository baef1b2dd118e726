"""
Item request lifecycle service.

This module handles:
    - Creating requests and queueing seller matching
    - The background matching pipeline
    - Completing, cancelling and expiring requests
"""

from .lifecycle import (
    create_item_request,
    enqueue_matching,
    get_request_for_viewer,
    complete_request,
    cancel_request,
    expire_overdue_requests,
)
from .pipeline import MatchingPipeline, PipelineOutcome
from .exceptions import (
    RequestNotFoundError,
    RequestNotEditableError,
    SellerProfileExistsError,
    SellerProfileNotFoundError,
    ResponseNotFoundError,
    ResponseForbiddenError,
    ResponseNotAllowedError,
)

__all__ = [
    # Lifecycle operations
    "create_item_request",
    "enqueue_matching",
    "get_request_for_viewer",
    "complete_request",
    "cancel_request",
    "expire_overdue_requests",
    # Pipeline
    "MatchingPipeline",
    "PipelineOutcome",
    # Exceptions
    "RequestNotFoundError",
    "RequestNotEditableError",
    "SellerProfileExistsError",
    "SellerProfileNotFoundError",
    "ResponseNotFoundError",
    "ResponseForbiddenError",
    "ResponseNotAllowedError",
]
