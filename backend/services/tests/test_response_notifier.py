from django.test import SimpleTestCase

from realtime.channels import user_room
from services.notifications import (
	Delivery,
	NewResponseNotification,
	ResponseNotifier,
	ResponseStatusNotification,
)
from services.notifications.payloads import SellerSummary
from .fakes import FakePushChannel, FakeSessionChannel, wait_for

VALID_TOKEN = "ExponentPushToken[xxxxxxxxxxxxxxxxxxxxxx]"


def new_response(response_id=1, price="45.00"):
	return NewResponseNotification(
		response_id=response_id,
		message="I have one in great condition",
		price=price,
		photos=(),
		status="pending",
		response_time=12,
		created_at="2026-01-01T10:00:00+00:00",
		request_id=7,
		request_title="Looking for an iPhone 13",
		category="electronique",
		sub_category="smartphones",
		seller=SellerSummary(
			business_name="Alpha shop",
			first_name="Bob",
			last_name="Martin",
			avatar="",
			is_available=True,
		),
	)


def status_change(response_id=1, status="accepted", feedback=None):
	return ResponseStatusNotification(
		response_id=response_id,
		status=status,
		price="45.00",
		message="I have one in great condition",
		request_id=7,
		request_title="Looking for an iPhone 13",
		client_first_name="Alice",
		client_last_name="Durand",
		feedback=feedback,
	)


class ResponseNotifierTests(SimpleTestCase):
	def setUp(self):
		self.session = FakeSessionChannel()
		self.push = FakePushChannel()
		self.notifier = ResponseNotifier(self.session, self.push)

	async def test_new_response_reaches_author_room_and_push(self):
		delivered = await wait_for(self.notifier.deliver(Delivery(99, new_response(), VALID_TOKEN)))

		self.assertTrue(delivered)
		events = self.session.events_for(user_room(99))
		self.assertEqual(len(events), 1)
		event, payload = events[0]
		self.assertEqual(event, "new_response_notification")
		self.assertEqual(payload["type"], "new_response")
		self.assertEqual(payload["response"]["price"], "45.00")
		self.assertEqual(payload["seller"]["business_name"], "Alpha shop")
		self.assertEqual(payload["metadata"], {"urgency": "normal"})

		token, title, body, data = self.push.sent[0]
		self.assertEqual(token, VALID_TOKEN)
		self.assertEqual(title, "New response received!")
		self.assertEqual(body, 'Alpha shop answered your request "Looking for an iPhone 13" - 45.00€')
		self.assertEqual(data["params"], {"request_id": 7, "tab": "responses"})

	async def test_missing_token_skips_push(self):
		delivered = await wait_for(self.notifier.deliver(Delivery(99, new_response())))

		self.assertTrue(delivered)
		self.assertEqual(self.push.sent, [])

	async def test_push_failure_does_not_fail_delivery(self):
		self.notifier = ResponseNotifier(self.session, FakePushChannel(succeed=False))

		self.assertTrue(await wait_for(self.notifier.deliver(Delivery(5, status_change(), VALID_TOKEN))))

	async def test_session_error_is_reported_as_not_delivered(self):
		self.session = FakeSessionChannel(raising_rooms={user_room(5)})
		self.notifier = ResponseNotifier(self.session, self.push)

		delivered = await wait_for(self.notifier.deliver(Delivery(5, status_change(), VALID_TOKEN)))

		self.assertFalse(delivered)
		# push is still attempted
		self.assertEqual(len(self.push.sent), 1)

	async def test_status_change_payload(self):
		feedback = {"message": "Great price", "rating": 5, "created_at": "2026-01-01T11:00:00+00:00"}
		await wait_for(self.notifier.deliver(Delivery(5, status_change(feedback=feedback), VALID_TOKEN)))

		event, payload = self.session.events_for(user_room(5))[0]
		self.assertEqual(event, "response_status_notification")
		self.assertEqual(payload["type"], "response_status_changed")
		self.assertEqual(payload["metadata"], {"is_accepted": True})
		self.assertEqual(payload["client"], {"first_name": "Alice", "last_name": "Durand"})
		self.assertEqual(payload["feedback"]["rating"], 5)
		self.assertEqual(self.push.sent[0][1], "Response accepted!")
		self.assertEqual(self.push.sent[0][2], "Alice accepted your offer of 45.00€")

	def test_push_text_per_status(self):
		self.assertEqual(status_change(status="declined").push_message().title, "Response declined")
		closed = status_change(status="cancelled").push_message()
		self.assertEqual(closed.title, "Request closed")
		self.assertIn("Looking for an iPhone 13", closed.body)

	async def test_deliver_many_emits_to_each_and_pushes_once(self):
		deliveries = [
			Delivery(1, status_change(1, "cancelled"), VALID_TOKEN),
			Delivery(2, status_change(2, "cancelled"), None),
			Delivery(3, status_change(3, "cancelled"), "not-a-token"),
		]

		delivered = await wait_for(self.notifier.deliver_many(deliveries))

		self.assertEqual(delivered, 3)
		self.assertEqual({room for room, _, _ in self.session.sent}, {user_room(1), user_room(2), user_room(3)})
		self.assertEqual(self.push.sent, [])
		self.assertEqual(len(self.push.batches), 1)
		self.assertEqual([token for token, _ in self.push.batches[0]], [VALID_TOKEN])

	async def test_deliver_many_counts_only_session_successes(self):
		self.session = FakeSessionChannel(failing_rooms={user_room(2)}, raising_rooms={user_room(3)})
		self.notifier = ResponseNotifier(self.session, self.push)
		deliveries = [Delivery(i, status_change(i, "cancelled")) for i in (1, 2, 3)]

		self.assertEqual(await wait_for(self.notifier.deliver_many(deliveries)), 1)
		self.assertEqual(self.push.batches, [])

	async def test_deliver_many_with_nothing_to_send(self):
		self.assertEqual(await wait_for(self.notifier.deliver_many([])), 0)
		self.assertEqual(self.session.sent, [])
