from datetime import timedelta
from unittest.mock import AsyncMock, patch

from asgiref.sync import async_to_sync
from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone

from realtime.channels import user_room
from services.matching import SellerMatcher, SellerStore
from services.notifications import NotificationFanout
from services.request_lifecycle import MatchingPipeline
from .fakes import FakePushChannel, FakeSessionChannel, FakeStore
from .helpers import make_item_request, make_seller, make_user


class MatchingPipelineTests(TestCase):
	def setUp(self):
		self.author = make_user("buyer", first_name="Alice")
		self.item_request = make_item_request(self.author, radius=10)
		self.session = FakeSessionChannel()
		self.store = SellerStore()
		self.fanout = NotificationFanout(self.session, FakePushChannel(), FakeStore())
		self.pipeline = MatchingPipeline(SellerMatcher(self.store), self.fanout)

	def run_pipeline(self, request_id=None):
		return async_to_sync(self.pipeline.run)(request_id or self.item_request.id)

	def test_run_notifies_in_rank_order(self):
		weak = make_seller("weak", km=1, rating=1, responded_requests=0, days_inactive=40)
		strong = make_seller("strong", km=2, rating=5, responded_requests=10, days_inactive=0)

		outcome = self.run_pipeline()

		self.assertTrue(outcome.succeeded)
		self.assertEqual(outcome.notified_count, 2)
		self.assertEqual(outcome.total_candidates, 2)
		notified_rooms = [room for room, event, _ in self.session.sent if event == "new_request_notification"]
		self.assertEqual(notified_rooms, [user_room(strong.user_id), user_room(weak.user_id)])

	def test_run_without_matches_confirms_zero(self):
		outcome = self.run_pipeline()

		self.assertTrue(outcome.succeeded)
		self.assertEqual(outcome.notified_count, 0)
		self.assertEqual(len(self.session.sent), 1)
		room, event, payload = self.session.sent[0]
		self.assertEqual(room, user_room(self.author.id))
		self.assertEqual(payload["stats"]["notified_sellers"], 0)

	def test_store_error_is_contained(self):
		make_seller("alpha", km=1)

		with patch.object(SellerStore, "find_within_sync", side_effect=DatabaseError("db down")):
			with self.assertLogs("services.request_lifecycle.pipeline", level="ERROR"):
				outcome = self.run_pipeline()

		self.assertFalse(outcome.succeeded)
		self.assertEqual(outcome.error, "db down")
		self.assertEqual(outcome.notified_count, 0)
		self.assertEqual(len(self.session.sent), 1)
		room, event, payload = self.session.sent[0]
		self.assertEqual(event, "request_created_confirmation")
		self.assertEqual(payload["stats"]["notified_sellers"], 0)

	def test_missing_request(self):
		outcome = self.run_pipeline(request_id=424242)

		self.assertFalse(outcome.succeeded)
		self.assertEqual(outcome.error, "Request not found")
		self.assertEqual(self.session.sent, [])

	def test_preview_does_not_notify(self):
		make_seller("alpha", km=1)
		self.fanout.dispatch = AsyncMock()

		ranked = async_to_sync(self.pipeline.preview)(self.item_request)

		self.assertEqual(len(ranked), 1)
		self.assertGreater(ranked[0].score, 0)
		self.fanout.dispatch.assert_not_called()
		self.assertEqual(self.session.sent, [])

	def test_load_failure_is_contained(self):
		make_seller("alpha", km=1)

		with patch(
			"services.request_lifecycle.pipeline._load_request",
			new=AsyncMock(side_effect=DatabaseError("db down")),
		):
			with self.assertLogs("services.request_lifecycle.pipeline", level="ERROR"):
				outcome = self.run_pipeline()

		self.assertFalse(outcome.succeeded)
		self.assertEqual(outcome.error, "db down")
		self.assertEqual(outcome.notified_count, 0)
		self.assertEqual(self.session.sent, [])

	def test_cancelled_request_is_skipped(self):
		make_seller("alpha", km=1)
		self.item_request.status = "cancelled"
		self.item_request.save()

		with self.assertLogs("services.request_lifecycle.pipeline", level="INFO") as logs:
			outcome = self.run_pipeline()

		self.assertTrue(outcome.succeeded)
		self.assertEqual(outcome.skipped, "cancelled")
		self.assertEqual(outcome.total_candidates, 0)
		self.assertEqual(self.session.sent, [])
		self.assertIn("is cancelled", logs.output[0])

	def test_expired_request_is_skipped(self):
		make_seller("alpha", km=1)
		self.item_request.expires_at = timezone.now() - timedelta(minutes=1)
		self.item_request.save()

		outcome = self.run_pipeline()

		self.assertEqual(outcome.skipped, "expired")
		self.assertEqual(self.session.sent, [])
