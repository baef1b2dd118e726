"""
Item request lifecycle operations.

Creation is the only synchronous phase: the request is saved and the
matching job is queued once the transaction commits. Matching and
notification never affect the creation result.
"""

import logging
from typing import Any, Dict, Optional

from django.db import transaction
from django.utils import timezone

from item_requests.models import ItemRequest
from .exceptions import RequestNotFoundError, RequestNotEditableError

logger = logging.getLogger(__name__)


def enqueue_matching(request_id: int) -> bool:
    """
    Queue the matching job. Failures are logged and swallowed: the saved
    request stands regardless.
    """
    from item_requests.tasks import notify_matching_sellers_task

    try:
        notify_matching_sellers_task.delay(request_id)
    except Exception:
        logger.exception("Could not enqueue matching for request %s", request_id)
        return False
    return True


def create_item_request(author, validated_data: Dict[str, Any]) -> ItemRequest:
    """
    Persist a new request and schedule seller matching after commit.

    Args:
        author: User creating the request
        validated_data: ItemRequest field values, already validated

    Returns:
        The saved ItemRequest
    """
    with transaction.atomic():
        item_request = ItemRequest.objects.create(user=author, **validated_data)
        transaction.on_commit(lambda: enqueue_matching(item_request.id))

    logger.info(
        "Request %s created by user %s (%s/%s)",
        item_request.id, author.id, item_request.category, item_request.sub_category
    )
    return item_request


def get_request_for_viewer(request_id: int, viewer) -> ItemRequest:
    """Fetch a request; views by anyone but the author are counted."""
    try:
        item_request = ItemRequest.objects.select_related("user").get(id=request_id)
    except ItemRequest.DoesNotExist:
        raise RequestNotFoundError("Request not found")

    if item_request.user_id != viewer.id:
        item_request.increment_view()
        item_request.refresh_from_db(fields=["view_count"])

    return item_request


def _get_owned_request(author, request_id: int) -> ItemRequest:
    try:
        return ItemRequest.objects.select_for_update().get(id=request_id, user=author)
    except ItemRequest.DoesNotExist:
        raise RequestNotFoundError("Request not found")


def _close_responses(item_request) -> int:
    from seller_responses.services import close_pending_responses
    return close_pending_responses(item_request)


@transaction.atomic
def complete_request(author, request_id: int) -> ItemRequest:
    item_request = _get_owned_request(author, request_id)
    if item_request.status != "active":
        raise RequestNotEditableError(f"Cannot complete a {item_request.status} request")

    item_request.status = "completed"
    item_request.save(update_fields=["status", "updated_at"])
    _close_responses(item_request)
    logger.info("Request %s completed", item_request.id)
    return item_request


@transaction.atomic
def cancel_request(author, request_id: int, reason: Optional[str] = None) -> ItemRequest:
    item_request = _get_owned_request(author, request_id)
    if item_request.status != "active":
        raise RequestNotEditableError(f"Cannot cancel a {item_request.status} request")

    item_request.status = "cancelled"
    item_request.save(update_fields=["status", "updated_at"])
    _close_responses(item_request)
    logger.info("Request %s cancelled (%s)", item_request.id, reason or "no reason given")
    return item_request


def expire_overdue_requests(dry_run: bool = False) -> int:
    """Mark active requests past their expiry date as expired."""
    overdue = ItemRequest.objects.filter(status="active", expires_at__lte=timezone.now())
    if dry_run:
        return overdue.count()
    return overdue.update(status="expired", updated_at=timezone.now())
