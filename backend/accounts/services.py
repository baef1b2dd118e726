"""Device token registration: one row per user, the only token source."""

import logging
from typing import Any, Dict, Optional

from django.core.exceptions import ObjectDoesNotExist

from .models import DeviceToken

logger = logging.getLogger(__name__)


def register_device_token(user, token: str, device_info: Optional[Dict[str, Any]] = None) -> DeviceToken:
    device_info = device_info or {}
    device, created = DeviceToken.objects.update_or_create(
        user=user,
        defaults={
            "token": token,
            "platform": device_info.get("platform", ""),
            "device_model": device_info.get("model", ""),
            "os_version": device_info.get("os_version", ""),
            "app_version": device_info.get("app_version", ""),
        },
    )
    logger.info("Push token %s for user %s", "registered" if created else "updated", user.id)
    return device


def unregister_device_token(user) -> bool:
    deleted, _ = DeviceToken.objects.filter(user=user).delete()
    if deleted:
        logger.info("Push token removed for user %s", user.id)
    return bool(deleted)


def get_device_token(user) -> Optional[DeviceToken]:
    return DeviceToken.objects.filter(user=user).first()


def push_token_for(user) -> Optional[str]:
    """Token of an already-loaded user; uses the cached relation when select_related."""
    try:
        return user.device_token.token or None
    except ObjectDoesNotExist:
        return None
