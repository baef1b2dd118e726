import math
from datetime import timedelta
from types import SimpleNamespace

from django.test import SimpleTestCase
from django.utils import timezone

from services.matching import MatchCandidate, rank_candidates, score


def make_candidate(seller_id=1, distance=3.0, rating=4.5, responded=8, total=10,
				   days_inactive=1, specialties=None, now=None):
	now = now or timezone.now()
	return MatchCandidate(
		seller_id=seller_id,
		user_id=100 + seller_id,
		business_name=f"Seller {seller_id}",
		email=f"seller{seller_id}@example.com",
		first_name="Seller",
		raw_distance_km=distance,
		rating=rating,
		total_requests=total,
		responded_requests=responded,
		last_active_at=now - timedelta(days=days_inactive),
		specialties=specialties if specialties is not None else [("electronique", ["smartphones"])],
	)


class ScoreTests(SimpleTestCase):
	def setUp(self):
		self.now = timezone.now()
		self.item_request = SimpleNamespace(category="electronique", sub_category="smartphones")

	def score_of(self, **kwargs):
		candidate = make_candidate(now=self.now, **kwargs)
		return score(candidate, self.item_request, now=self.now)

	def test_reference_scenario_scores_154(self):
		# 44 distance + 30 specialty + 45 rating + 19 recency + 16 responsiveness
		self.assertEqual(self.score_of(), 154)

	def test_category_only_specialty_gets_no_bonus(self):
		exact = self.score_of()
		category_only = self.score_of(specialties=[("electronique", ["tablettes"])])
		self.assertEqual(exact - category_only, 30)

	def test_distance_component_floors_at_zero(self):
		self.assertEqual(self.score_of(distance=25), self.score_of(distance=40))

	def test_non_increasing_in_distance(self):
		scores = [self.score_of(distance=d) for d in (0, 1, 5, 12.5, 24, 26, 80)]
		self.assertEqual(scores, sorted(scores, reverse=True))

	def test_non_decreasing_in_rating(self):
		scores = [self.score_of(rating=r) for r in (0, 1, 2.5, 4, 5)]
		self.assertEqual(scores, sorted(scores))

	def test_non_decreasing_in_recency(self):
		scores = [self.score_of(days_inactive=d) for d in (60, 20, 10, 1, 0)]
		self.assertEqual(scores, sorted(scores))

	def test_non_decreasing_in_responsiveness(self):
		scores = [self.score_of(responded=r, total=10) for r in (0, 3, 5, 10)]
		self.assertEqual(scores, sorted(scores))

	def test_no_history_gives_zero_responsiveness(self):
		self.assertEqual(
			self.score_of(responded=0, total=0),
			self.score_of(responded=0, total=10),
		)

	def test_nan_rating_counts_as_zero(self):
		self.assertEqual(self.score_of(rating=math.nan), self.score_of(rating=0))

	def test_never_active_gets_no_recency(self):
		candidate = make_candidate(now=self.now)
		candidate.last_active_at = None
		self.assertEqual(score(candidate, self.item_request, now=self.now), 154 - 19)

	def test_explicit_distance_overrides_candidate(self):
		candidate = make_candidate(now=self.now, distance=3)
		self.assertEqual(score(candidate, self.item_request, distance_km=0, now=self.now), 160)

	def test_score_is_integer(self):
		self.assertIsInstance(self.score_of(distance=3.33, rating=3.14), int)


class RankCandidatesTests(SimpleTestCase):
	def setUp(self):
		self.now = timezone.now()
		self.item_request = SimpleNamespace(category="electronique", sub_category="smartphones")

	def test_sorted_by_score_descending(self):
		near_low_rating = make_candidate(seller_id=1, distance=1, rating=1, now=self.now)
		far_high_rating = make_candidate(seller_id=2, distance=8, rating=5, now=self.now)

		ranked = rank_candidates([near_low_rating, far_high_rating], self.item_request, now=self.now)

		self.assertEqual([c.seller_id for c in ranked], [2, 1])
		self.assertGreater(ranked[0].score, ranked[1].score)

	def test_ties_keep_proximity_order(self):
		candidates = [make_candidate(seller_id=i, now=self.now) for i in (5, 3, 9, 1)]

		ranked = rank_candidates(candidates, self.item_request, now=self.now)

		self.assertEqual(len({c.score for c in ranked}), 1)
		self.assertEqual([c.seller_id for c in ranked], [5, 3, 9, 1])

	def test_ranking_never_filters(self):
		candidates = [
			make_candidate(seller_id=1, distance=60, rating=0, responded=0, days_inactive=90, now=self.now),
			make_candidate(seller_id=2, now=self.now),
		]
		ranked = rank_candidates(candidates, self.item_request, now=self.now)
		self.assertEqual(len(ranked), 2)
		self.assertEqual(ranked[-1].score, 30)

	def test_empty(self):
		self.assertEqual(rank_candidates([], self.item_request), [])
