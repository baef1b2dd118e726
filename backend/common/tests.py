from math import asin, cos, degrees, radians, sin

from django.test import SimpleTestCase

from common.categories import (
	CATEGORIES,
	get_all_categories,
	get_category_display_name,
	get_sub_categories,
	validate_category_and_sub_category,
)
from common.utils import EARTH_RADIUS_KM, bounding_box, distance_km


PARIS = (48.8566, 2.3522)
LYON = (45.7640, 4.8357)


class DistanceTests(SimpleTestCase):
	def test_same_point_is_zero(self):
		self.assertEqual(distance_km(*PARIS, *PARIS), 0)

	def test_paris_lyon(self):
		# ~392 km great-circle
		self.assertAlmostEqual(distance_km(*PARIS, *LYON), 392, delta=3)

	def test_symmetric(self):
		self.assertAlmostEqual(
			distance_km(*PARIS, *LYON),
			distance_km(*LYON, *PARIS),
		)

	def test_accepts_decimal_strings(self):
		self.assertAlmostEqual(distance_km("48.85", "2.35", 48.85, 2.35), 0)

	def test_antipodes_do_not_overflow(self):
		self.assertAlmostEqual(distance_km(0, 0, 0, 180), 20015, delta=5)


class BoundingBoxTests(SimpleTestCase):
	def test_box_contains_radius(self):
		lat, lon = PARIS
		min_lat, max_lat, min_lon, max_lon = bounding_box(lat, lon, 10)

		self.assertGreaterEqual(distance_km(lat, lon, max_lat, lon), 9.9)
		self.assertGreaterEqual(distance_km(lat, lon, lat, max_lon), 9.9)
		self.assertLess(min_lat, lat)
		self.assertLess(min_lon, lon)

	def test_box_is_never_smaller_than_the_haversine_circle(self):
		lat, lon = PARIS
		for radius in (1, 10, 100):
			min_lat, max_lat, min_lon, max_lon = bounding_box(lat, lon, radius)

			self.assertGreaterEqual(distance_km(lat, lon, max_lat, lon), radius)
			self.assertGreaterEqual(distance_km(lat, lon, min_lat, lon), radius)

			# Easternmost point of the circle sits poleward of the centre
			angular = radius / EARTH_RADIUS_KM
			tangent_lat = degrees(asin(sin(radians(lat)) / cos(angular)))
			tangent_lon = lon + degrees(asin(sin(angular) / cos(radians(lat))))
			self.assertAlmostEqual(distance_km(lat, lon, tangent_lat, tangent_lon), radius, places=6)
			self.assertLessEqual(tangent_lon, max_lon)
			self.assertGreaterEqual(2 * lon - tangent_lon, min_lon)

	def test_circle_over_the_pole_spans_all_longitudes(self):
		_, _, min_lon, max_lon = bounding_box(89.5, 10, 100)
		self.assertEqual((min_lon, max_lon), (-170.0, 190.0))

	def test_latitude_is_clamped(self):
		min_lat, max_lat, _, _ = bounding_box(89.99, 0, 50)
		self.assertEqual(max_lat, 90.0)
		self.assertLess(min_lat, 89.99)


class CategoryTaxonomyTests(SimpleTestCase):
	def test_valid_pair(self):
		self.assertTrue(validate_category_and_sub_category("electronique", "smartphones"))

	def test_sub_category_from_other_category_is_rejected(self):
		self.assertFalse(validate_category_and_sub_category("electronique", "romans"))

	def test_unknown_category(self):
		self.assertFalse(validate_category_and_sub_category("nope", "smartphones"))
		self.assertEqual(get_sub_categories("nope"), [])

	def test_listing(self):
		categories = get_all_categories()
		self.assertEqual(len(categories), len(CATEGORIES))
		electronique = next(c for c in categories if c["id"] == "electronique")
		self.assertEqual(electronique["sub_categories_count"], len(CATEGORIES["electronique"]["sub_categories"]))

	def test_display_name(self):
		self.assertEqual(
			get_category_display_name("electronique", "smartphones"),
			"Électronique > Smartphones",
		)
		self.assertEqual(get_category_display_name("electronique"), "Électronique")
