import asyncio

from django.test import SimpleTestCase

from realtime.channels import user_room
from services.notifications import NotificationFanout
from .fakes import FakePushChannel, FakeSessionChannel, FakeStore, make_request_stub, wait_for
from .test_ranking import make_candidate

VALID_TOKEN = "ExponentPushToken[xxxxxxxxxxxxxxxxxxxxxx]"


def candidates(count, token=VALID_TOKEN):
	result = []
	for i in range(1, count + 1):
		candidate = make_candidate(seller_id=i, distance=float(i))
		candidate.push_token = token
		candidate.score = 100 - i
		result.append(candidate)
	return result


class NotificationFanoutTests(SimpleTestCase):
	def setUp(self):
		self.item_request = make_request_stub()
		self.session = FakeSessionChannel()
		self.push = FakePushChannel()
		self.store = FakeStore()

	def fanout(self, **kwargs):
		return NotificationFanout(self.session, self.push, self.store, **kwargs)

	async def test_every_candidate_notified_and_author_confirmed(self):
		ranked = candidates(3)

		result = await wait_for(self.fanout().dispatch(self.item_request, ranked))

		self.assertEqual(result.notified_count, 3)
		self.assertEqual(result.total_candidates, 3)
		for candidate in ranked:
			events = self.session.events_for(user_room(candidate.user_id))
			self.assertEqual(len(events), 1)
			event, payload = events[0]
			self.assertEqual(event, "new_request_notification")
			self.assertEqual(payload["type"], "new_request")
			self.assertEqual(payload["seller"]["id"], candidate.seller_id)
			self.assertEqual(payload["metadata"]["match_score"], candidate.score)
			self.assertEqual(payload["metadata"]["urgency"], "high")
			self.assertEqual(payload["request"]["location"]["distance"], candidate.distance_km)

		confirmation = self.session.events_for(user_room(99))
		self.assertEqual(len(confirmation), 1)
		event, payload = confirmation[0]
		self.assertEqual(event, "request_created_confirmation")
		self.assertEqual(payload["stats"], {"notified_sellers": 3, "estimated_responses": 1})

	async def test_confirmation_is_sent_after_all_seller_sends(self):
		await wait_for(self.fanout().dispatch(self.item_request, candidates(4)))

		self.assertEqual(self.session.sent[-1][1], "request_created_confirmation")
		self.assertEqual(
			[event for _, event, _ in self.session.sent[:-1]],
			["new_request_notification"] * 4,
		)

	async def test_push_failure_still_counts_as_notified(self):
		self.push.succeed = False

		result = await wait_for(self.fanout().dispatch(self.item_request, candidates(2)))

		self.assertEqual(result.notified_count, 2)
		self.assertEqual(len(self.push.sent), 2)

	async def test_session_failure_lowers_count_but_others_proceed(self):
		ranked = candidates(3)
		self.session.failing_rooms = {user_room(ranked[0].user_id)}
		self.session.raising_rooms = {user_room(ranked[1].user_id)}

		result = await wait_for(self.fanout().dispatch(self.item_request, ranked))

		self.assertEqual(result.notified_count, 1)
		self.assertEqual(result.total_candidates, 3)
		# stats and push still happen for the failed sellers
		self.assertEqual(sorted(seller_id for seller_id, _ in self.store.increments), [1, 2, 3])
		self.assertEqual(len(self.push.sent), 3)

	async def test_stats_incremented_for_every_candidate(self):
		await wait_for(self.fanout().dispatch(self.item_request, candidates(3)))

		self.assertEqual(
			sorted(self.store.increments),
			[(1, {"total_requests": 1}), (2, {"total_requests": 1}), (3, {"total_requests": 1})],
		)

	async def test_stats_failure_does_not_fail_dispatch(self):
		self.store.fail = True

		result = await wait_for(self.fanout().dispatch(self.item_request, candidates(2)))

		self.assertEqual(result.notified_count, 2)

	async def test_invalid_or_missing_token_is_session_only(self):
		ranked = candidates(2)
		ranked[0].push_token = None
		ranked[1].push_token = "not-a-token"

		result = await wait_for(self.fanout().dispatch(self.item_request, ranked))

		self.assertEqual(result.notified_count, 2)
		self.assertEqual(self.push.sent, [])

	async def test_push_message_content(self):
		await wait_for(self.fanout().dispatch(self.item_request, candidates(1)))

		token, title, body, data = self.push.sent[0]
		self.assertEqual(token, VALID_TOKEN)
		self.assertEqual(title, "New request!")
		self.assertEqual(body, "Looking for an iPhone 13 - Paris")
		self.assertEqual(data["params"], {"request_id": 7})

	async def test_zero_candidates_still_confirms(self):
		result = await wait_for(self.fanout().dispatch(self.item_request, []))

		self.assertEqual(result.notified_count, 0)
		self.assertEqual(len(self.session.sent), 1)
		room, event, payload = self.session.sent[0]
		self.assertEqual(room, "user:99")
		self.assertEqual(payload["stats"], {"notified_sellers": 0, "estimated_responses": 0})
		self.assertIn("no matching seller", payload["message"])

	async def test_all_sends_start_before_any_completes(self):
		count = 5
		started = []
		all_started = asyncio.Event()

		class GatedSession(FakeSessionChannel):
			async def emit_to_room(inner, room, event_name, payload):
				if event_name == "new_request_notification":
					started.append(room)
					if len(started) == count:
						all_started.set()
					await all_started.wait()
				return await FakeSessionChannel.emit_to_room(inner, room, event_name, payload)

		self.session = GatedSession()

		# sequential sends would block on the first gate forever
		result = await wait_for(self.fanout().dispatch(self.item_request, candidates(count)))

		self.assertEqual(result.notified_count, count)
		self.assertEqual(len(started), count)

	async def test_concurrency_is_bounded(self):
		in_flight = 0
		peak = 0

		class SlowSession(FakeSessionChannel):
			async def emit_to_room(inner, room, event_name, payload):
				nonlocal in_flight, peak
				in_flight += 1
				peak = max(peak, in_flight)
				await asyncio.sleep(0.01)
				in_flight -= 1
				return True

		self.session = SlowSession()

		result = await wait_for(self.fanout(max_concurrency=2).dispatch(self.item_request, candidates(6)))

		self.assertEqual(result.notified_count, 6)
		self.assertLessEqual(peak, 2)

	async def test_repeated_dispatch_makes_independent_attempts(self):
		fanout = self.fanout()
		ranked = candidates(2)

		first = await wait_for(fanout.dispatch(self.item_request, ranked))
		second = await wait_for(fanout.dispatch(self.item_request, ranked))

		self.assertEqual(first.notified_count, 2)
		self.assertEqual(second.notified_count, 2)
		self.assertEqual(len(self.store.increments), 4)
		ids = [payload["id"] for _, event, payload in self.session.sent if event == "new_request_notification"]
		self.assertEqual(len(set(ids)), 4)

	async def test_confirmation_failure_is_swallowed(self):
		self.session.raising_rooms = {"user:99"}

		result = await wait_for(self.fanout().dispatch(self.item_request, candidates(1)))

		self.assertEqual(result.notified_count, 1)
