"""Celery tasks delivering seller response notifications."""

import logging
from typing import List

from asgiref.sync import async_to_sync
from celery import shared_task

from accounts.services import push_token_for
from seller_responses.models import SellerResponse
from services.notifications import (
    Delivery,
    NewResponseNotification,
    ResponseStatusNotification,
)

logger = logging.getLogger(__name__)

_RELATED = (
    "item_request__user__device_token",
    "seller__user",
    "seller_user__device_token",
)


def _load(response_ids: List[int]):
    return list(SellerResponse.objects.select_related(*_RELATED).filter(id__in=response_ids))


def _seller_delivery(response) -> Delivery:
    return Delivery(
        user_id=response.seller_user_id,
        notification=ResponseStatusNotification.for_response(response),
        push_token=push_token_for(response.seller_user),
    )


@shared_task
def notify_new_response_task(response_id: int):
    """Tell the request author a seller answered."""
    from services.container import get_response_notifier

    responses = _load([response_id])
    if not responses:
        logger.warning("New response notification skipped: response %s not found", response_id)
        return {"response_id": response_id, "delivered": False}

    response = responses[0]
    author = response.item_request.user
    delivery = Delivery(
        user_id=author.id,
        notification=NewResponseNotification.for_response(response),
        push_token=push_token_for(author),
    )
    delivered = async_to_sync(get_response_notifier().deliver)(delivery)
    logger.info("Response %s: author %s notified=%s", response_id, author.id, delivered)
    return {"response_id": response_id, "delivered": delivered}


@shared_task
def notify_response_status_task(response_id: int):
    """Tell the seller their response was accepted or declined."""
    from services.container import get_response_notifier

    responses = _load([response_id])
    if not responses:
        logger.warning("Status notification skipped: response %s not found", response_id)
        return {"response_id": response_id, "delivered": False}

    response = responses[0]
    delivered = async_to_sync(get_response_notifier().deliver)(_seller_delivery(response))
    logger.info("Response %s (%s): seller notified=%s", response_id, response.status, delivered)
    return {"response_id": response_id, "delivered": delivered}


@shared_task
def notify_responses_closed_task(response_ids: List[int]):
    """Tell every seller whose pending response was closed with its request."""
    from services.container import get_response_notifier

    deliveries = [_seller_delivery(response) for response in _load(response_ids)]
    delivered = async_to_sync(get_response_notifier().deliver_many)(deliveries)
    logger.info("Closed responses: %s/%s sellers notified", delivered, len(response_ids))
    return {"response_ids": list(response_ids), "delivered_count": delivered}
