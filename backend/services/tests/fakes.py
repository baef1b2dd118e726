"""In-memory stand-ins for the session channel, push channel and store."""

import asyncio
from datetime import datetime, timezone as dt_timezone
from types import SimpleNamespace

from realtime.channels import user_room
from realtime.push import ExpoPushChannel, PushResult, TicketSummary


class FakeSessionChannel:
	def __init__(self, failing_rooms=(), raising_rooms=()):
		self.failing_rooms = set(failing_rooms)
		self.raising_rooms = set(raising_rooms)
		self.sent = []

	async def emit_to_room(self, room, event_name, payload):
		if room in self.raising_rooms:
			raise RuntimeError("layer exploded")
		self.sent.append((room, event_name, payload))
		return room not in self.failing_rooms

	async def emit_to_user(self, user_id, event_name, payload):
		return await self.emit_to_room(user_room(user_id), event_name, payload)

	def events_for(self, room):
		return [(event, payload) for r, event, payload in self.sent if r == room]


class FakePushChannel:
	validate_token = staticmethod(ExpoPushChannel.validate_token)

	def __init__(self, succeed=True):
		self.succeed = succeed
		self.sent = []
		self.batches = []

	async def send(self, token, title, body, data=None):
		self.sent.append((token, title, body, data))
		if self.succeed:
			return PushResult(success=True, ticket={"status": "ok", "id": "ticket"})
		return PushResult(success=False, error="DeviceNotRegistered")

	async def send_batch(self, notifications):
		batch = [(token, message) for token, message in notifications if self.validate_token(token)]
		self.batches.append(batch)
		if self.succeed:
			return TicketSummary(success_count=len(batch))
		return TicketSummary(error_count=len(batch))


class FakeStore:
	def __init__(self, fail=False):
		self.fail = fail
		self.increments = []

	async def increment_stats(self, seller_id, **increments):
		if self.fail:
			raise RuntimeError("stats store down")
		self.increments.append((seller_id, increments))
		return 1


def make_request_stub(request_id=7, author_id=99, priority="urgent"):
	author = SimpleNamespace(id=author_id, first_name="Alice", avatar="")
	return SimpleNamespace(
		id=request_id,
		user_id=author_id,
		user=author,
		title="Looking for an iPhone 13",
		description="Good condition, 128GB",
		category="electronique",
		sub_category="smartphones",
		city="Paris",
		address="10 place de la Concorde",
		priority=priority,
		photos=[],
		status="active",
		created_at=datetime(2026, 1, 1, tzinfo=dt_timezone.utc),
	)


async def wait_for(coro, timeout=2):
	return await asyncio.wait_for(coro, timeout)
