from unittest.mock import patch

from asgiref.sync import async_to_sync
from django.db import DatabaseError
from django.test import TestCase

from common.utils import distance_km
from services.matching import SellerFilters, SellerMatcher, SellerStore
from .helpers import (
	REQUEST_LAT,
	REQUEST_LON,
	lon_east_of_request,
	make_item_request,
	make_seller,
	make_user,
)


class SellerMatcherTests(TestCase):
	def setUp(self):
		self.author = make_user("buyer")
		self.item_request = make_item_request(self.author, radius=10)
		self.matcher = SellerMatcher(SellerStore())

	def find(self):
		return async_to_sync(self.matcher.find_matching_sellers)(self.item_request)

	def test_exact_specialty_within_radius_matches(self):
		seller = make_seller("alpha", km=3)

		candidates = self.find()

		self.assertEqual([c.seller_id for c in candidates], [seller.id])
		self.assertAlmostEqual(candidates[0].distance_km, 3.0, places=1)
		self.assertEqual(candidates[0].user_id, seller.user_id)

	def test_category_only_match_is_excluded(self):
		make_seller("tablets", km=2, specialties=(("electronique", ["tablettes"]),))
		self.assertEqual(self.find(), [])

	def test_sub_category_under_other_category_is_excluded(self):
		# "accessoires" exists in vetements too; only electronique counts here
		self.item_request.sub_category = "accessoires"
		self.item_request.save()
		make_seller("clothes", km=2, specialties=(("vetements", ["accessoires"]),))
		match = make_seller("gadgets", km=2, specialties=(("electronique", ["accessoires"]),))

		self.assertEqual([c.seller_id for c in self.find()], [match.id])

	def test_seller_outside_radius_is_excluded(self):
		make_seller("faraway", km=30, rating=5, responded_requests=10, days_inactive=0)
		self.assertEqual(self.find(), [])

	def test_just_inside_and_outside_radius(self):
		inside = make_seller("inside", km=9.9)
		make_seller("outside", km=10.1)
		self.assertEqual([c.seller_id for c in self.find()], [inside.id])

	def test_seller_at_the_radius_edge_is_kept(self):
		north = make_seller("north", km=9.995)
		east = make_seller("east", longitude=lon_east_of_request(9.995), latitude=REQUEST_LAT)

		self.assertEqual({c.seller_id for c in self.find()}, {north.id, east.id})

	def test_seller_at_the_edge_of_a_wide_radius_is_kept(self):
		self.item_request.radius = 100
		self.item_request.save()
		north = make_seller("north", km=99.95)
		east = make_seller("east", longitude=lon_east_of_request(99.95), latitude=REQUEST_LAT)
		make_seller("beyond", km=100.05)

		self.assertEqual({c.seller_id for c in self.find()}, {north.id, east.id})

	def test_status_and_availability(self):
		active = make_seller("active", km=1, status="active")
		pending = make_seller("pending", km=2, status="pending")
		make_seller("suspended", km=1, status="suspended")
		make_seller("inactive", km=1, status="inactive")
		make_seller("busy", km=1, is_available=False)

		self.assertEqual([c.seller_id for c in self.find()], [active.id, pending.id])

	def test_results_are_nearest_first(self):
		far = make_seller("far", km=8)
		near = make_seller("near", km=1)
		mid = make_seller("mid", km=4)

		self.assertEqual([c.seller_id for c in self.find()], [near.id, mid.id, far.id])

	def test_push_token_comes_from_device_token(self):
		with_token = make_seller("with_token", km=1, push_token="ExponentPushToken[abc123]")
		without_token = make_seller("without_token", km=2)

		by_id = {c.seller_id: c for c in self.find()}

		self.assertEqual(by_id[with_token.id].push_token, "ExponentPushToken[abc123]")
		self.assertIsNone(by_id[without_token.id].push_token)

	def test_match_iff_all_constraints_hold(self):
		variants = []
		for i, (km, status, available, subs) in enumerate([
			(2, "active", True, ["smartphones"]),
			(2, "pending", True, ["smartphones", "tablettes"]),
			(2, "suspended", True, ["smartphones"]),
			(2, "active", False, ["smartphones"]),
			(2, "active", True, ["tablettes"]),
			(15, "active", True, ["smartphones"]),
			(7, "active", True, ["gaming", "smartphones"]),
			(11, "pending", True, ["smartphones"]),
		]):
			seller = make_seller(f"v{i}", km=km, status=status, is_available=available,
								 specialties=(("electronique", subs),))
			variants.append((seller, km, status, available, subs))

		expected = {
			seller.id
			for seller, km, status, available, subs in variants
			if status in ("active", "pending") and available and km <= 10 and "smartphones" in subs
		}

		self.assertEqual({c.seller_id for c in self.find()}, expected)

	def test_store_failure_propagates(self):
		make_seller("alpha", km=3)
		with patch.object(SellerStore, "find_within_sync", side_effect=DatabaseError("db down")):
			with self.assertRaises(DatabaseError):
				self.find()

	def test_custom_eligible_statuses(self):
		make_seller("pending", km=2, status="pending")
		strict = SellerMatcher(SellerStore(), eligible_statuses=("active",))

		self.assertEqual(async_to_sync(strict.find_matching_sellers)(self.item_request), [])


class SellerStoreTests(TestCase):
	def test_find_within_without_category_filter(self):
		make_seller("books", km=1, specialties=(("livres", ["romans"]),))
		make_seller("phones", km=2)

		candidates = SellerStore().find_within_sync(
			point=(REQUEST_LON, REQUEST_LAT),
			radius_meters=5000,
			filters=SellerFilters(),
		)

		self.assertEqual(len(candidates), 2)

	def test_antimeridian_search(self):
		make_seller("west", longitude=179.99, latitude=0)
		make_seller("east", longitude=-179.99, latitude=0)

		candidates = SellerStore().find_within_sync(
			point=(179.995, 0),
			radius_meters=10000,
			filters=SellerFilters(),
		)

		self.assertEqual({c.business_name for c in candidates}, {"west shop", "east shop"})

	def test_increment_stats_is_atomic_update(self):
		seller = make_seller("alpha", km=1, total_requests=4)
		store = SellerStore()

		async_to_sync(store.increment_stats)(seller.id, total_requests=1)
		async_to_sync(store.increment_stats)(seller.id, total_requests=1)

		seller.refresh_from_db()
		self.assertEqual(seller.total_requests, 6)

	def test_distance_annotation_matches_haversine(self):
		seller = make_seller("alpha", km=5)
		candidate = SellerStore().find_within_sync((REQUEST_LON, REQUEST_LAT), 10000)[0]

		expected = distance_km(REQUEST_LAT, REQUEST_LON, float(seller.latitude), float(seller.longitude))
		self.assertAlmostEqual(candidate.raw_distance_km, expected, places=6)
