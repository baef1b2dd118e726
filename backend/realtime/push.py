"""
Push channel: device-token notifications through the Expo push service.

Delivery is fire-and-forget: a ticket with status "ok" only means Expo
accepted the message. Receipts are not polled.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx
from django.utils import timezone

logger = logging.getLogger(__name__)

DEFAULT_EXPO_PUSH_URL = "https://exp.host/--/api/v2/push/send"

# Expo rejects requests carrying more than 100 messages
PUSH_CHUNK_SIZE = 100

_BRACKET_TOKEN = re.compile(r"^Expo(nent)?PushToken\[.+\]$")
_UUID_TOKEN = re.compile(
    r"^[a-z\d]{8}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{12}$", re.IGNORECASE
)


@dataclass
class PushResult:
    """Outcome of one push submission."""
    success: bool
    ticket: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


@dataclass
class TicketSummary:
    success_count: int = 0
    error_count: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)


def analyze_tickets(tickets: Iterable[Dict[str, Any]]) -> TicketSummary:
    summary = TicketSummary()
    for ticket in tickets:
        if ticket.get("status") == "ok":
            summary.success_count += 1
        elif ticket.get("status") == "error":
            summary.error_count += 1
            summary.errors.append({
                "code": (ticket.get("details") or {}).get("error", "unknown"),
                "message": ticket.get("message", "Unknown error"),
            })
    return summary


class ExpoPushChannel:
    """
    Expo push client.

    Pass an httpx.AsyncClient to reuse a connection pool (or to mock the
    transport in tests); otherwise a short-lived client is opened per call.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        endpoint: str = DEFAULT_EXPO_PUSH_URL,
        access_token: str = "",
        enabled: bool = True,
        timeout: float = 10.0,
    ):
        self.http_client = http_client
        self.endpoint = endpoint
        self.access_token = access_token
        self.enabled = enabled
        self.timeout = timeout

    @staticmethod
    def validate_token(token: Optional[str]) -> bool:
        if not token or not isinstance(token, str):
            return False
        return bool(_BRACKET_TOKEN.match(token) or _UUID_TOKEN.match(token))

    def build_message(self, token: str, title: str, body: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return {
            "to": token,
            "sound": "default",
            "title": title,
            "body": body,
            "data": {**(data or {}), "timestamp": timezone.now().isoformat()},
            "priority": "high",
            "badge": 1,
        }

    async def send(self, token: str, title: str, body: str, data: Optional[Dict[str, Any]] = None) -> PushResult:
        """Send one notification. Never raises; failures come back as PushResult."""
        if not self.enabled:
            return PushResult(success=False, error="Push notifications are disabled")

        if not self.validate_token(token):
            logger.debug("Invalid push token %s...", (token or "")[:20])
            return PushResult(success=False, error="Invalid push token")

        try:
            tickets = await self._post([self.build_message(token, title, body, data)])
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Push send to %s... failed: %s", token[:20], e)
            return PushResult(success=False, error=str(e))

        summary = analyze_tickets(tickets)
        ticket = tickets[0] if tickets else None
        if summary.success_count > 0:
            logger.debug("Push accepted for %s...", token[:20])
            return PushResult(success=True, ticket=ticket)

        error = summary.errors[0]["message"] if summary.errors else "No ticket returned"
        logger.info("Push rejected for %s...: %s", token[:20], error)
        return PushResult(success=False, ticket=ticket, error=error)

    async def send_batch(self, notifications: Iterable[Tuple[str, Any]]) -> TicketSummary:
        """
        Send many notifications in chunks of PUSH_CHUNK_SIZE.

        ``notifications`` yields (token, message) pairs where message has
        ``title``, ``body`` and ``data`` attributes. Invalid tokens are
        skipped; a failing chunk is logged and does not stop the others.
        """
        summary = TicketSummary()
        if not self.enabled:
            return summary

        messages = []
        for token, message in notifications:
            if not self.validate_token(token):
                logger.debug("Skipping invalid push token %s...", (token or "")[:20])
                continue
            messages.append(self.build_message(token, message.title, message.body, message.data))

        for start in range(0, len(messages), PUSH_CHUNK_SIZE):
            chunk = messages[start:start + PUSH_CHUNK_SIZE]
            try:
                tickets = await self._post(chunk)
            except (httpx.HTTPError, ValueError) as e:
                logger.warning("Push chunk of %s messages failed: %s", len(chunk), e)
                summary.error_count += len(chunk)
                summary.errors.append({"code": "transport", "message": str(e)})
                continue

            chunk_summary = analyze_tickets(tickets)
            summary.success_count += chunk_summary.success_count
            summary.error_count += chunk_summary.error_count
            summary.errors.extend(chunk_summary.errors)

        logger.info("Push batch: %s/%s accepted", summary.success_count, len(messages))
        return summary

    async def _post(self, messages: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
        }
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"

        if self.http_client is not None:
            response = await self.http_client.post(self.endpoint, json=messages, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.endpoint, json=messages, headers=headers)

        response.raise_for_status()
        body = response.json()
        if body.get("errors"):
            raise ValueError(body["errors"][0].get("message", "Expo request error"))
        return body.get("data") or []
