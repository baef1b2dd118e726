from django.test import TestCase
from rest_framework.test import APIClient

from services.container import reset_matching_pipeline
from services.tests.helpers import make_item_request, make_seller, make_user
from .models import Seller


def seller_body(**overrides):
	body = {
		'business_name': "Chez Marie & Fils",
		'description': 'Refurbished phones and repairs since 2010.',
		'phone': '01 02 03 04 05',
		'location': {
			'coordinates': [2.3522, 48.8566],
			'address': '5 rue de Rivoli',
			'city': 'Paris',
			'postal_code': '75004',
		},
		'service_radius': 15,
		'specialties': [
			{'category': 'electronique', 'sub_categories': ['smartphones', 'tablettes', 'smartphones']},
		],
	}
	body.update(overrides)
	return body


class SellerProfileTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.user = make_user('marie')
		self.client.force_authenticate(self.user)

	def test_create_profile(self):
		response = self.client.post('/api/sellers/profile/', seller_body(), format='json')

		self.assertEqual(response.status_code, 201)
		seller = response.data['seller']
		self.assertEqual(seller['status'], 'pending')
		self.assertEqual(seller['location']['coordinates'], [2.3522, 48.8566])
		self.assertEqual(
			seller['specialties'],
			[{'category': 'electronique', 'sub_categories': ['smartphones', 'tablettes']}],
		)
		self.assertEqual(seller['stats']['response_rate'], 0)

		self.user.refresh_from_db()
		self.assertEqual(self.user.role, 'seller')

	def test_duplicate_profile_rejected(self):
		self.client.post('/api/sellers/profile/', seller_body(), format='json')
		response = self.client.post('/api/sellers/profile/', seller_body(), format='json')

		self.assertEqual(response.status_code, 400)
		self.assertEqual(Seller.objects.filter(user=self.user).count(), 1)

	def test_invalid_specialty_rejected(self):
		body = seller_body(specialties=[{'category': 'electronique', 'sub_categories': ['romans']}])

		response = self.client.post('/api/sellers/profile/', body, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertFalse(Seller.objects.exists())

	def test_specialties_required(self):
		for specialties in ([], [{'category': 'electronique', 'sub_categories': []}]):
			response = self.client.post('/api/sellers/profile/', seller_body(specialties=specialties), format='json')
			self.assertEqual(response.status_code, 400)
		self.assertFalse(Seller.objects.exists())

	def test_get_profile(self):
		response = self.client.get('/api/sellers/profile/')
		self.assertEqual(response.status_code, 404)

		self.client.post('/api/sellers/profile/', seller_body(), format='json')
		response = self.client.get('/api/sellers/profile/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['seller']['business_name'], "Chez Marie & Fils")
		self.assertEqual(response.data['seller']['user']['role'], 'seller')

	def test_toggle_availability(self):
		seller = make_seller('vendor')
		self.client.force_authenticate(seller.user)
		before = seller.last_active_at

		response = self.client.patch('/api/sellers/profile/availability/')
		self.assertEqual(response.status_code, 200)
		self.assertFalse(response.data['is_available'])

		seller.refresh_from_db()
		self.assertFalse(seller.is_available)
		self.assertGreater(seller.last_active_at, before)

		response = self.client.patch('/api/sellers/profile/availability/')
		self.assertTrue(response.data['is_available'])

	def test_toggle_without_profile(self):
		response = self.client.patch('/api/sellers/profile/availability/')
		self.assertEqual(response.status_code, 404)


class SellerRecommendationsTests(TestCase):
	def setUp(self):
		reset_matching_pipeline()
		self.client = APIClient()
		self.author = make_user('buyer')
		self.item_request = make_item_request(self.author, radius=10)

	def tearDown(self):
		reset_matching_pipeline()

	def test_recommendations_ranked_without_notifying(self):
		weak = make_seller('weak', km=1, rating=1, responded_requests=0, days_inactive=40)
		strong = make_seller('strong', km=2, rating=5, responded_requests=10, days_inactive=0)
		make_seller('far', km=40)
		self.client.force_authenticate(self.author)

		response = self.client.get(f'/api/sellers/recommendations/{self.item_request.id}/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['count'], 2)
		self.assertEqual([s['seller_id'] for s in response.data['sellers']], [strong.id, weak.id])
		scores = [s['score'] for s in response.data['sellers']]
		self.assertEqual(scores, sorted(scores, reverse=True))

		# preview does not touch counters
		strong.refresh_from_db()
		self.assertEqual(strong.total_requests, 10)

	def test_recommendations_only_for_author(self):
		self.client.force_authenticate(make_user('other'))

		response = self.client.get(f'/api/sellers/recommendations/{self.item_request.id}/')

		self.assertEqual(response.status_code, 404)


class SellerModelTests(TestCase):
	def test_response_rate(self):
		seller = make_seller('alpha', total_requests=3, responded_requests=2)
		self.assertEqual(seller.response_rate, 67)

		seller.total_requests = 0
		self.assertEqual(seller.response_rate, 0)

	def test_has_specialty(self):
		seller = make_seller('alpha', specialties=(('electronique', ['smartphones']), ('livres', ['romans'])))

		self.assertTrue(seller.has_specialty('electronique'))
		self.assertTrue(seller.has_specialty('livres', 'romans'))
		self.assertFalse(seller.has_specialty('livres', 'bd-mangas'))
		self.assertFalse(seller.has_specialty('mobilier'))

	def test_can_serve_location(self):
		seller = make_seller('alpha', km=0)
		self.assertTrue(seller.can_serve_location(2.35, 48.9))
		self.assertFalse(seller.can_serve_location(4.83, 45.76))

	def test_increment_stats(self):
		seller = make_seller('alpha', total_requests=1, responded_requests=0)

		updated = Seller.increment_stats(seller.id, total_requests=2, responded_requests=1)

		self.assertEqual(updated, 1)
		seller.refresh_from_db()
		self.assertEqual((seller.total_requests, seller.responded_requests), (3, 1))
