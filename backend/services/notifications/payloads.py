"""
Typed notification payloads.

Each notification kind is its own frozen dataclass carrying a ``kind``
discriminator and an ``as_message()`` that produces the dict sent over the
session channel. NewRequestNotification is built once per request and then
personalized per seller.
"""

import math
import uuid
from dataclasses import asdict, dataclass, field, replace
from decimal import Decimal
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

from django.utils import timezone

DESCRIPTION_PREVIEW_LENGTH = 200
MAX_PREVIEW_PHOTOS = 3
RESPONSE_PREVIEW_LENGTH = 150
STATUS_PREVIEW_LENGTH = 100
MAX_RESPONSE_PREVIEW_PHOTOS = 2
ESTIMATED_RESPONSE_RATE = 0.3

URGENCY_BY_PRIORITY = {
    "urgent": "high",
    "high": "medium-high",
    "medium": "medium",
    "low": "low",
}


def urgency_for(priority: str) -> str:
    return URGENCY_BY_PRIORITY.get(priority, "medium")


def truncate_description(text: str, limit: int = DESCRIPTION_PREVIEW_LENGTH) -> str:
    text = text or ""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def format_price(price) -> str:
    return f"{Decimal(str(price)):.2f}"


def _new_id() -> str:
    return str(uuid.uuid4())


def _now_iso() -> str:
    return timezone.now().isoformat()


@dataclass(frozen=True)
class LocationSummary:
    city: str
    address: str
    distance: Optional[float] = None


@dataclass(frozen=True)
class AuthorSummary:
    first_name: str
    avatar: str = ""


@dataclass(frozen=True)
class RequestSummary:
    id: int
    title: str
    description: str
    category: str
    sub_category: str
    location: LocationSummary
    priority: str
    photos: Tuple[Dict[str, Any], ...]
    user: AuthorSummary
    created_at: str

    @classmethod
    def from_item_request(cls, item_request) -> "RequestSummary":
        author = item_request.user
        return cls(
            id=item_request.id,
            title=item_request.title,
            description=truncate_description(item_request.description),
            category=item_request.category,
            sub_category=item_request.sub_category,
            location=LocationSummary(city=item_request.city, address=item_request.address),
            priority=item_request.priority,
            photos=tuple((item_request.photos or [])[:MAX_PREVIEW_PHOTOS]),
            user=AuthorSummary(first_name=author.first_name, avatar=author.avatar or ""),
            created_at=item_request.created_at.isoformat() if item_request.created_at else "",
        )


@dataclass(frozen=True)
class PushMessage:
    """Title/body/data triple for the push channel."""
    title: str
    body: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class NewRequestNotification:
    """Sent to each matched seller's personal room."""
    kind: ClassVar[str] = "new_request"
    event_name: ClassVar[str] = "new_request_notification"

    request: RequestSummary
    urgency: str
    match_score: Optional[int] = None
    seller_id: Optional[int] = None
    id: str = field(default_factory=_new_id)
    timestamp: str = field(default_factory=_now_iso)

    @classmethod
    def for_request(cls, item_request) -> "NewRequestNotification":
        """Shared base; distance, score and seller are filled by personalize()."""
        return cls(
            request=RequestSummary.from_item_request(item_request),
            urgency=urgency_for(item_request.priority),
        )

    def personalize(self, candidate) -> "NewRequestNotification":
        location = replace(self.request.location, distance=candidate.distance_km)
        return replace(
            self,
            request=replace(self.request, location=location),
            match_score=candidate.score,
            seller_id=candidate.seller_id,
            id=_new_id(),
            timestamp=_now_iso(),
        )

    def as_message(self) -> Dict[str, Any]:
        request = asdict(self.request)
        request["photos"] = list(request["photos"])
        return {
            "type": self.kind,
            "request": request,
            "metadata": {
                "urgency": self.urgency,
                "match_score": self.match_score,
            },
            "seller": {"id": self.seller_id},
            "timestamp": self.timestamp,
            "id": self.id,
        }

    def push_message(self) -> PushMessage:
        city = self.request.location.city or "Unknown location"
        return PushMessage(
            title="New request!",
            body=f"{self.request.title} - {city}",
            data={
                "type": self.kind,
                "request": {
                    "id": self.request.id,
                    "title": self.request.title,
                    "category": self.request.category,
                    "sub_category": self.request.sub_category,
                    "city": self.request.location.city,
                },
                "screen": "RequestDetail",
                "params": {"request_id": self.request.id},
            },
        )


@dataclass(frozen=True)
class RequestCreatedConfirmation:
    """Sent to the request author once fan-out has settled."""
    kind: ClassVar[str] = "request_created"
    event_name: ClassVar[str] = "request_created_confirmation"

    request_id: int
    title: str
    status: str
    notified_sellers: int
    id: str = field(default_factory=_new_id)
    timestamp: str = field(default_factory=_now_iso)

    @classmethod
    def for_request(cls, item_request, notified_sellers: int) -> "RequestCreatedConfirmation":
        return cls(
            request_id=item_request.id,
            title=item_request.title,
            status=item_request.status,
            notified_sellers=notified_sellers,
        )

    @property
    def estimated_responses(self) -> int:
        return math.ceil(self.notified_sellers * ESTIMATED_RESPONSE_RATE)

    @property
    def message(self) -> str:
        if self.notified_sellers > 0:
            return f"Your request was sent to {self.notified_sellers} sellers in your area"
        return "Your request was published but no matching seller was found in your area"

    def as_message(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "request": {
                "id": self.request_id,
                "title": self.title,
                "status": self.status,
            },
            "stats": {
                "notified_sellers": self.notified_sellers,
                "estimated_responses": self.estimated_responses,
            },
            "message": self.message,
            "timestamp": self.timestamp,
            "id": self.id,
        }


@dataclass(frozen=True)
class SellerSummary:
    business_name: str
    first_name: str
    last_name: str
    avatar: str
    is_available: bool


@dataclass(frozen=True)
class NewResponseNotification:
    """Sent to the request author when a seller answers their request."""
    kind: ClassVar[str] = "new_response"
    event_name: ClassVar[str] = "new_response_notification"

    response_id: int
    message: str
    price: str
    photos: Tuple[Dict[str, Any], ...]
    status: str
    response_time: int
    created_at: str
    request_id: int
    request_title: str
    category: str
    sub_category: str
    seller: SellerSummary
    id: str = field(default_factory=_new_id)
    timestamp: str = field(default_factory=_now_iso)

    @classmethod
    def for_response(cls, response) -> "NewResponseNotification":
        item_request = response.item_request
        seller = response.seller
        return cls(
            response_id=response.id,
            message=truncate_description(response.message, RESPONSE_PREVIEW_LENGTH),
            price=format_price(response.price),
            photos=tuple((response.photos or [])[:MAX_RESPONSE_PREVIEW_PHOTOS]),
            status=response.status,
            response_time=response.response_time,
            created_at=response.created_at.isoformat() if response.created_at else "",
            request_id=item_request.id,
            request_title=item_request.title,
            category=item_request.category,
            sub_category=item_request.sub_category,
            seller=SellerSummary(
                business_name=seller.business_name,
                first_name=seller.user.first_name,
                last_name=seller.user.last_name,
                avatar=seller.user.avatar or "",
                is_available=seller.is_available,
            ),
        )

    def as_message(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "response": {
                "id": self.response_id,
                "message": self.message,
                "price": self.price,
                "photos": list(self.photos),
                "status": self.status,
                "response_time": self.response_time,
                "created_at": self.created_at,
            },
            "request": {
                "id": self.request_id,
                "title": self.request_title,
                "category": self.category,
                "sub_category": self.sub_category,
            },
            "seller": asdict(self.seller),
            "metadata": {"urgency": "normal"},
            "timestamp": self.timestamp,
            "id": self.id,
        }

    def push_message(self) -> PushMessage:
        return PushMessage(
            title="New response received!",
            body=f'{self.seller.business_name} answered your request "{self.request_title}" - {self.price}€',
            data={
                "type": self.kind,
                "response": {"id": self.response_id, "price": self.price},
                "request": {"id": self.request_id, "title": self.request_title},
                "screen": "RequestDetail",
                "params": {"request_id": self.request_id, "tab": "responses"},
            },
        )


@dataclass(frozen=True)
class ResponseStatusNotification:
    """
    Sent to the seller when the author accepts or declines their response,
    or when closing the request cancels it.
    """
    kind: ClassVar[str] = "response_status_changed"
    event_name: ClassVar[str] = "response_status_notification"

    response_id: int
    status: str
    price: str
    message: str
    request_id: int
    request_title: str
    client_first_name: str
    client_last_name: str
    feedback: Optional[Dict[str, Any]] = None
    id: str = field(default_factory=_new_id)
    timestamp: str = field(default_factory=_now_iso)

    @classmethod
    def for_response(cls, response) -> "ResponseStatusNotification":
        item_request = response.item_request
        author = item_request.user
        feedback = None
        if response.has_feedback:
            feedback = {
                "message": response.feedback_message,
                "rating": response.feedback_rating,
                "created_at": response.feedback_at.isoformat() if response.feedback_at else "",
            }
        return cls(
            response_id=response.id,
            status=response.status,
            price=format_price(response.price),
            message=truncate_description(response.message, STATUS_PREVIEW_LENGTH),
            request_id=item_request.id,
            request_title=item_request.title,
            client_first_name=author.first_name,
            client_last_name=author.last_name,
            feedback=feedback,
        )

    @property
    def is_accepted(self) -> bool:
        return self.status == "accepted"

    def as_message(self) -> Dict[str, Any]:
        return {
            "type": self.kind,
            "response": {
                "id": self.response_id,
                "status": self.status,
                "price": self.price,
                "message": self.message,
            },
            "request": {"id": self.request_id, "title": self.request_title},
            "client": {
                "first_name": self.client_first_name,
                "last_name": self.client_last_name,
            },
            "feedback": self.feedback,
            "metadata": {"is_accepted": self.is_accepted},
            "timestamp": self.timestamp,
            "id": self.id,
        }

    def push_message(self) -> PushMessage:
        if self.is_accepted:
            title = "Response accepted!"
            body = f"{self.client_first_name} accepted your offer of {self.price}€"
        elif self.status == "declined":
            title = "Response declined"
            body = f'{self.client_first_name} declined your offer for "{self.request_title}"'
        else:
            title = "Request closed"
            body = f'"{self.request_title}" is no longer open to responses'
        return PushMessage(
            title=title,
            body=body,
            data={
                "type": self.kind,
                "response": {"id": self.response_id, "status": self.status},
                "request": {"id": self.request_id, "title": self.request_title},
                "screen": "MyResponses",
                "params": {"response_id": self.response_id},
            },
        )


SessionNotification = Union[
    NewRequestNotification,
    RequestCreatedConfirmation,
    NewResponseNotification,
    ResponseStatusNotification,
]
