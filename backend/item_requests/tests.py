from datetime import timedelta
from io import StringIO
from unittest.mock import AsyncMock, patch

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient, APIRequestFactory, force_authenticate

from realtime.channels import SessionChannel
from services.container import reset_matching_pipeline
from services.tests.helpers import make_item_request, make_seller, make_user
from .models import ItemRequest
from .views import ItemRequestCreateView


def request_body(**overrides):
	body = {
		'title': 'Looking for an iPhone 13',
		'description': 'Good condition, 128GB, any colour is fine.',
		'category': 'electronique',
		'sub_category': 'smartphones',
		'location': {
			'coordinates': [2.35, 48.85],
			'address': '10 place de la Concorde',
			'city': 'Paris',
			'postal_code': '75008',
		},
		'radius': 10,
		'priority': 'high',
		'tags': [' Apple ', 'iphone', ''],
	}
	body.update(overrides)
	return body


class ItemRequestCreateTests(TestCase):
	def setUp(self):
		self.factory = APIRequestFactory()
		self.author = make_user('buyer', first_name='Alice')
		reset_matching_pipeline()

	def tearDown(self):
		reset_matching_pipeline()

	def post(self, body):
		request = self.factory.post('/api/requests/', body, format='json')
		force_authenticate(request, user=self.author)
		return ItemRequestCreateView.as_view()(request)

	@patch('services.request_lifecycle.lifecycle.enqueue_matching')
	def test_create_returns_201_before_matching(self, mock_enqueue):
		with self.captureOnCommitCallbacks(execute=False) as callbacks:
			response = self.post(request_body())

		self.assertEqual(response.status_code, 201)
		self.assertEqual(response.data['notifications']['status'], 'processing')
		created = response.data['request']
		self.assertEqual(created['status'], 'active')
		self.assertEqual(created['location']['coordinates'], [2.35, 48.85])
		self.assertEqual(created['category_display'], 'Électronique > Smartphones')
		self.assertEqual(created['tags'], ['apple', 'iphone'])
		self.assertEqual(created['author']['first_name'], 'Alice')

		# matching is only queued once the transaction commits
		mock_enqueue.assert_not_called()
		self.assertEqual(len(callbacks), 1)
		callbacks[0]()
		mock_enqueue.assert_called_once_with(created['id'])

	@patch('item_requests.tasks.notify_matching_sellers_task.delay')
	def test_enqueue_after_commit(self, mock_delay):
		with self.captureOnCommitCallbacks(execute=True):
			response = self.post(request_body())

		mock_delay.assert_called_once_with(response.data['request']['id'])

	@patch('item_requests.tasks.notify_matching_sellers_task.delay', side_effect=ConnectionError('broker down'))
	def test_enqueue_failure_keeps_request(self, mock_delay):
		with self.captureOnCommitCallbacks(execute=True):
			response = self.post(request_body())

		self.assertEqual(response.status_code, 201)
		self.assertTrue(ItemRequest.objects.filter(id=response.data['request']['id']).exists())

	def test_invalid_category_pair_rejected(self):
		response = self.post(request_body(category='electronique', sub_category='romans'))

		self.assertEqual(response.status_code, 400)
		self.assertIn('sub_category', response.data)
		self.assertEqual(ItemRequest.objects.count(), 0)

	def test_radius_out_of_range_rejected(self):
		for radius in (0, 101):
			response = self.post(request_body(radius=radius))
			self.assertEqual(response.status_code, 400)
			self.assertIn('radius', response.data)
		self.assertEqual(ItemRequest.objects.count(), 0)

	def test_bad_coordinates_rejected(self):
		body = request_body()
		body['location']['coordinates'] = [48.85, 200]

		response = self.post(body)

		self.assertEqual(response.status_code, 400)
		self.assertIn('location', response.data)

	def test_too_many_photos_rejected(self):
		photos = [{'url': f'https://cdn.example.com/{i}.jpg'} for i in range(6)]

		response = self.post(request_body(photos=photos))

		self.assertEqual(response.status_code, 400)
		self.assertIn('photos', response.data)

	def test_short_title_rejected(self):
		response = self.post(request_body(title='ab'))
		self.assertEqual(response.status_code, 400)

	def test_radius_defaults_to_five(self):
		body = request_body()
		del body['radius']

		with patch('services.request_lifecycle.lifecycle.enqueue_matching'):
			response = self.post(body)

		self.assertEqual(response.data['request']['radius'], 5)

	def test_unauthenticated_rejected(self):
		response = APIClient().post('/api/requests/', request_body(), format='json')
		self.assertEqual(response.status_code, 401)

	@patch.object(SessionChannel, 'emit_to_room', new_callable=AsyncMock, return_value=True)
	def test_end_to_end_matching_runs_after_commit(self, mock_emit):
		near = make_seller('near', km=2)
		far = make_seller('far', km=30)
		wrong_sub = make_seller('tablets', km=1, specialties=(('electronique', ['tablettes']),))

		with self.captureOnCommitCallbacks(execute=True):
			response = self.post(request_body())

		self.assertEqual(response.status_code, 201)
		request_id = response.data['request']['id']

		near.refresh_from_db()
		far.refresh_from_db()
		wrong_sub.refresh_from_db()
		self.assertEqual(near.total_requests, 11)
		self.assertEqual(far.total_requests, 10)
		self.assertEqual(wrong_sub.total_requests, 10)

		rooms = [call.args[0] for call in mock_emit.await_args_list]
		self.assertEqual(rooms, [f'user:{near.user_id}', f'user:{self.author.id}'])
		confirmation = mock_emit.await_args_list[-1].args
		self.assertEqual(confirmation[1], 'request_created_confirmation')
		self.assertEqual(confirmation[2]['request']['id'], request_id)
		self.assertEqual(confirmation[2]['stats']['notified_sellers'], 1)


class ItemRequestReadTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.author = make_user('buyer')
		self.other = make_user('neighbour')
		self.item_request = make_item_request(self.author)

	def test_detail_counts_views_from_others_only(self):
		self.client.force_authenticate(self.author)
		response = self.client.get(f'/api/requests/{self.item_request.id}/')
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['request']['view_count'], 0)

		self.client.force_authenticate(self.other)
		response = self.client.get(f'/api/requests/{self.item_request.id}/')
		self.assertEqual(response.data['request']['view_count'], 1)

		self.item_request.refresh_from_db()
		self.assertEqual(self.item_request.view_count, 1)

	def test_detail_missing(self):
		self.client.force_authenticate(self.author)
		response = self.client.get('/api/requests/999999/')
		self.assertEqual(response.status_code, 404)

	def test_detail_expiry_fields(self):
		self.client.force_authenticate(self.author)
		response = self.client.get(f'/api/requests/{self.item_request.id}/')

		self.assertFalse(response.data['request']['is_expired'])
		self.assertEqual(response.data['request']['days_left'], 30)

	def test_my_requests_filter_and_pagination(self):
		make_item_request(self.author, status='completed')
		make_item_request(self.other)

		self.client.force_authenticate(self.author)
		response = self.client.get('/api/requests/mine/')
		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['count'], 2)

		response = self.client.get('/api/requests/mine/', {'status': 'completed'})
		self.assertEqual(response.data['count'], 1)
		self.assertEqual(response.data['results'][0]['status'], 'completed')

	def test_my_requests_invalid_status(self):
		self.client.force_authenticate(self.author)
		response = self.client.get('/api/requests/mine/', {'status': 'bogus'})
		self.assertEqual(response.status_code, 400)

	def test_categories_are_public(self):
		response = self.client.get('/api/requests/categories/')
		self.assertEqual(response.status_code, 200)
		ids = [category['id'] for category in response.data['categories']]
		self.assertIn('electronique', ids)

		response = self.client.get('/api/requests/categories/electronique/subcategories/')
		self.assertEqual(response.status_code, 200)
		self.assertIn({'id': 'smartphones', 'name': 'Smartphones'}, response.data['sub_categories'])

		response = self.client.get('/api/requests/categories/unknown/subcategories/')
		self.assertEqual(response.status_code, 404)


class ItemRequestStatusTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.author = make_user('buyer')
		self.item_request = make_item_request(self.author)
		self.client.force_authenticate(self.author)

	def test_complete(self):
		response = self.client.patch(f'/api/requests/{self.item_request.id}/complete/')

		self.assertEqual(response.status_code, 200)
		self.item_request.refresh_from_db()
		self.assertEqual(self.item_request.status, 'completed')

		response = self.client.patch(f'/api/requests/{self.item_request.id}/complete/')
		self.assertEqual(response.status_code, 400)

	def test_cancel_with_reason(self):
		response = self.client.post(
			f'/api/requests/{self.item_request.id}/cancel/',
			{'reason': 'Found one elsewhere'},
			format='json',
		)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['request']['status'], 'cancelled')

	def test_only_author_can_change_status(self):
		intruder = make_user('intruder')
		self.client.force_authenticate(intruder)

		response = self.client.post(f'/api/requests/{self.item_request.id}/cancel/', {}, format='json')

		self.assertEqual(response.status_code, 404)
		self.item_request.refresh_from_db()
		self.assertEqual(self.item_request.status, 'active')


class ExpireRequestsCommandTests(TestCase):
	def setUp(self):
		author = make_user('buyer')
		self.overdue = make_item_request(author, expires_at=timezone.now() - timedelta(days=1))
		self.fresh = make_item_request(author)
		self.done = make_item_request(author, status='completed', expires_at=timezone.now() - timedelta(days=1))

	def test_dry_run_changes_nothing(self):
		out = StringIO()
		call_command('expire_requests', '--dry-run', stdout=out)

		self.assertIn('Would expire 1 requests', out.getvalue())
		self.overdue.refresh_from_db()
		self.assertEqual(self.overdue.status, 'active')

	def test_expires_only_overdue_active_requests(self):
		out = StringIO()
		call_command('expire_requests', stdout=out)

		self.assertIn('Expired 1 requests', out.getvalue())
		for item_request, expected in ((self.overdue, 'expired'), (self.fresh, 'active'), (self.done, 'completed')):
			item_request.refresh_from_db()
			self.assertEqual(item_request.status, expected)


class ItemRequestModelTests(TestCase):
	def test_tags_normalized_on_save(self):
		item_request = make_item_request(make_user('buyer'), tags=[' A ', 'b', ''] + [str(i) for i in range(20)])
		self.assertEqual(item_request.tags[:2], ['a', 'b'])
		self.assertEqual(len(item_request.tags), 10)
