"""
Composition root for the matching pipeline and the response notifier.

Builds the session channel, push channel, store, matcher and fan-out once
per process from settings. Tests construct these pieces directly.
"""

import logging
from typing import Optional

from django.conf import settings

from realtime.channels import SessionChannel
from realtime.push import DEFAULT_EXPO_PUSH_URL, ExpoPushChannel
from services.matching import SellerMatcher, SellerStore
from services.notifications import NotificationFanout, ResponseNotifier
from services.request_lifecycle import MatchingPipeline

logger = logging.getLogger(__name__)

_pipeline: Optional[MatchingPipeline] = None
_response_notifier: Optional[ResponseNotifier] = None


def build_push_channel() -> ExpoPushChannel:
    matching = getattr(settings, "MATCHING", {})
    return ExpoPushChannel(
        endpoint=getattr(settings, "EXPO_PUSH_URL", DEFAULT_EXPO_PUSH_URL),
        access_token=getattr(settings, "EXPO_ACCESS_TOKEN", ""),
        enabled=getattr(settings, "PUSH_NOTIFICATIONS_ENABLED", True),
        timeout=matching.get("PUSH_TIMEOUT_SECONDS", 10.0),
    )


def build_matching_pipeline(channel_layer=None) -> MatchingPipeline:
    matching = getattr(settings, "MATCHING", {})

    store = SellerStore()
    fanout = NotificationFanout(
        session_channel=SessionChannel(channel_layer),
        push_channel=build_push_channel(),
        store=store,
        max_concurrency=matching.get("FANOUT_CONCURRENCY", 50),
    )
    matcher = SellerMatcher(
        store,
        eligible_statuses=matching.get("ELIGIBLE_STATUSES", ("active", "pending")),
    )
    return MatchingPipeline(matcher=matcher, fanout=fanout)


def build_response_notifier(channel_layer=None) -> ResponseNotifier:
    return ResponseNotifier(
        session_channel=SessionChannel(channel_layer),
        push_channel=build_push_channel(),
    )


def get_matching_pipeline() -> MatchingPipeline:
    """Process-wide pipeline, built on first use."""
    global _pipeline
    if _pipeline is None:
        _pipeline = build_matching_pipeline()
        logger.debug("Matching pipeline initialized")
    return _pipeline


def get_response_notifier() -> ResponseNotifier:
    global _response_notifier
    if _response_notifier is None:
        _response_notifier = build_response_notifier()
        logger.debug("Response notifier initialized")
    return _response_notifier


def reset_matching_pipeline() -> None:
    """Drop the cached pipeline and notifier (settings changed, test isolation)."""
    global _pipeline, _response_notifier
    _pipeline = None
    _response_notifier = None
