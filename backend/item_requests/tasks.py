"""Celery tasks for item request background processing."""

import logging

from asgiref.sync import async_to_sync
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task
def notify_matching_sellers_task(request_id: int):
    """
    Match, rank and notify sellers for a newly created request.

    Queued after the creating transaction commits. The pipeline never
    raises; its outcome is logged and returned as a plain dict.
    """
    from services.container import get_matching_pipeline

    outcome = async_to_sync(get_matching_pipeline().run)(request_id)
    if outcome.skipped:
        logger.info("Request %s: matching skipped (%s)", request_id, outcome.skipped)
    elif outcome.succeeded:
        logger.info(
            "Request %s: %s/%s sellers notified",
            request_id, outcome.notified_count, outcome.total_candidates
        )
    else:
        logger.warning("Request %s: matching failed (%s)", request_id, outcome.error)

    return {
        "request_id": outcome.request_id,
        "notified_count": outcome.notified_count,
        "total_candidates": outcome.total_candidates,
        "error": outcome.error,
        "skipped": outcome.skipped,
    }
