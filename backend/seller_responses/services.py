"""
Seller response operations.

Creating a response bumps the request's response_count and the seller's
responded_requests in the same transaction. Notifications are queued after
commit and never affect the result of the operation.
"""

import logging
from typing import Any, Dict, Optional

from django.db import transaction
from django.utils import timezone

from item_requests.models import ItemRequest
from seller_responses.models import SellerResponse
from sellers.models import Seller
from services.request_lifecycle.exceptions import (
    RequestNotFoundError,
    RequestNotEditableError,
    ResponseForbiddenError,
    ResponseNotAllowedError,
    ResponseNotFoundError,
    SellerProfileNotFoundError,
)

logger = logging.getLogger(__name__)

# Same statuses that are eligible for matching
RESPONDING_SELLER_STATUSES = ("active", "pending")


def enqueue_notification(task, *args) -> bool:
    """Queue a notification task; a broker failure is logged and swallowed."""
    try:
        task.delay(*args)
    except Exception:
        logger.exception("Could not enqueue %s%s", task.name, args)
        return False
    return True


def _queue_new_response(response_id: int):
    from seller_responses.tasks import notify_new_response_task
    transaction.on_commit(lambda: enqueue_notification(notify_new_response_task, response_id))


def _queue_status_change(response_id: int):
    from seller_responses.tasks import notify_response_status_task
    transaction.on_commit(lambda: enqueue_notification(notify_response_status_task, response_id))


@transaction.atomic
def create_response(user, request_id: int, validated_data: Dict[str, Any]) -> SellerResponse:
    """
    Answer an active request as a seller.

    The request row is locked so two responses from the same seller cannot
    both pass the duplicate check.
    """
    try:
        item_request = ItemRequest.objects.select_for_update().get(id=request_id)
    except ItemRequest.DoesNotExist:
        raise RequestNotFoundError("Request not found")

    if not item_request.is_active():
        raise RequestNotEditableError("This request no longer accepts responses")

    if item_request.user_id == user.id:
        raise ResponseNotAllowedError("You cannot respond to your own request")

    try:
        seller = Seller.objects.get(user=user, status__in=RESPONDING_SELLER_STATUSES)
    except Seller.DoesNotExist:
        raise SellerProfileNotFoundError("An active seller profile is required to respond")

    if SellerResponse.objects.filter(item_request=item_request, seller=seller).exists():
        raise ResponseNotAllowedError("You already responded to this request")

    response = SellerResponse.objects.create(
        item_request=item_request,
        seller=seller,
        seller_user=user,
        message=validated_data["message"].strip(),
        price=validated_data["price"],
        photos=[dict(photo) for photo in validated_data.get("photos", [])],
        response_time=SellerResponse.minutes_since(item_request.created_at),
    )
    item_request.increment_response()
    Seller.increment_stats(seller.id, responded_requests=1)
    seller.touch_activity()

    _queue_new_response(response.id)
    logger.info(
        "Response %s from seller %s on request %s (%s min)",
        response.id, seller.id, item_request.id, response.response_time
    )
    return response


def get_response_for_viewer(user, response_id: int) -> SellerResponse:
    """The request author and the responding seller can read a response."""
    try:
        response = (
            SellerResponse.objects
            .select_related("item_request", "seller", "seller__user")
            .get(id=response_id)
        )
    except SellerResponse.DoesNotExist:
        raise ResponseNotFoundError("Response not found")

    if user.id not in (response.item_request.user_id, response.seller_user_id):
        raise ResponseForbiddenError("You cannot view this response")
    return response


def list_request_responses(user, request_id: int):
    """Responses on the caller's own request, newest first. Marks them read."""
    try:
        item_request = ItemRequest.objects.get(id=request_id)
    except ItemRequest.DoesNotExist:
        raise RequestNotFoundError("Request not found")

    if item_request.user_id != user.id:
        raise ResponseForbiddenError("Only the request author can list its responses")

    marked = (
        SellerResponse.objects
        .filter(item_request=item_request, is_read=False)
        .update(is_read=True, read_at=timezone.now())
    )
    if marked:
        logger.debug("Marked %s responses read on request %s", marked, request_id)

    return (
        SellerResponse.objects
        .filter(item_request=item_request)
        .select_related("item_request", "seller", "seller__user")
    )


def list_seller_responses(user, status: Optional[str] = None):
    qs = SellerResponse.objects.filter(seller_user=user).select_related("item_request", "seller")
    if status:
        qs = qs.filter(status=status)
    return qs


@transaction.atomic
def update_response_status(
    user,
    response_id: int,
    status: str,
    feedback: Optional[Dict[str, Any]] = None,
) -> SellerResponse:
    """Accept or decline a pending response on the caller's request."""
    try:
        response = (
            SellerResponse.objects
            .select_for_update()
            .select_related("item_request")
            .get(id=response_id)
        )
    except SellerResponse.DoesNotExist:
        raise ResponseNotFoundError("Response not found")

    if response.item_request.user_id != user.id:
        raise ResponseForbiddenError("Only the request author can accept or decline a response")

    if response.status != "pending":
        raise ResponseNotAllowedError(f"Cannot change a {response.status} response")

    response.status = status
    update_fields = ["status", "updated_at"]
    if feedback:
        response.feedback_message = (feedback.get("message") or "").strip()
        response.feedback_rating = feedback.get("rating")
        response.feedback_at = timezone.now()
        update_fields += ["feedback_message", "feedback_rating", "feedback_at"]
    response.save(update_fields=update_fields)

    _queue_status_change(response.id)
    logger.info("Response %s %s by user %s", response.id, status, user.id)
    return response


@transaction.atomic
def withdraw_response(user, response_id: int) -> None:
    """The responding seller removes a response that is still pending."""
    try:
        response = SellerResponse.objects.select_for_update().get(id=response_id)
    except SellerResponse.DoesNotExist:
        raise ResponseNotFoundError("Response not found")

    if response.seller_user_id != user.id:
        raise ResponseForbiddenError("You can only withdraw your own responses")

    if response.status != "pending":
        raise ResponseNotAllowedError(f"Cannot withdraw a {response.status} response")

    item_request = response.item_request
    response.delete()
    item_request.decrement_response()
    logger.info("Response %s withdrawn by user %s", response_id, user.id)


def close_pending_responses(item_request) -> int:
    """
    Cancel the pending responses of a request that was completed or
    cancelled, and tell each seller in one batch after commit.

    Must run inside the transaction that closes the request.
    """
    pending = SellerResponse.objects.filter(item_request=item_request, status="pending")
    response_ids = list(pending.values_list("id", flat=True))
    if not response_ids:
        return 0

    SellerResponse.objects.filter(id__in=response_ids).update(status="cancelled", updated_at=timezone.now())

    from seller_responses.tasks import notify_responses_closed_task
    transaction.on_commit(lambda: enqueue_notification(notify_responses_closed_task, response_ids))
    logger.info("Closed %s pending responses on request %s", len(response_ids), item_request.id)
    return len(response_ids)
