from unittest.mock import AsyncMock, patch

from django.test import TestCase
from rest_framework.test import APIClient

from realtime.channels import SessionChannel
from realtime.push import ExpoPushChannel, TicketSummary
from services.container import reset_matching_pipeline
from services.tests.helpers import make_item_request, make_seller, make_user
from .models import SellerResponse

VALID_TOKEN = 'ExponentPushToken[xxxxxxxxxxxxxxxxxxxxxx]'


def response_body(request_id, **overrides):
	body = {
		'request_id': request_id,
		'message': 'I have one in great condition, barely used.',
		'price': '45.00',
		'photos': [{'url': 'https://example.com/phone.jpg', 'alt': 'front', 'is_primary': True}],
	}
	body.update(overrides)
	return body


def make_response(item_request, seller, status='pending', **extra):
	return SellerResponse.objects.create(
		item_request=item_request,
		seller=seller,
		seller_user=seller.user,
		message='Still available',
		price='30.00',
		status=status,
		**extra
	)


class ResponseCreateTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.author = make_user('buyer', first_name='Alice')
		self.item_request = make_item_request(self.author)
		self.seller = make_seller('alpha')
		self.client.force_authenticate(self.seller.user)

	def post(self, body):
		return self.client.post('/api/responses/', body, format='json')

	@patch('seller_responses.tasks.notify_new_response_task.delay')
	def test_create_updates_counters_and_queues_notification(self, mock_delay):
		with self.captureOnCommitCallbacks(execute=True):
			response = self.post(response_body(self.item_request.id))

		self.assertEqual(response.status_code, 201)
		created = response.data['response']
		self.assertEqual(created['status'], 'pending')
		self.assertEqual(created['price'], '45.00')
		self.assertEqual(created['response_time'], 0)
		self.assertEqual(created['photos'][0]['is_primary'], True)
		self.assertEqual(created['seller']['business_name'], 'alpha shop')

		self.item_request.refresh_from_db()
		self.seller.refresh_from_db()
		self.assertEqual(self.item_request.response_count, 1)
		self.assertEqual(self.seller.responded_requests, 9)
		mock_delay.assert_called_once_with(created['id'])

	@patch('seller_responses.tasks.notify_new_response_task.delay', side_effect=ConnectionError('broker down'))
	def test_enqueue_failure_keeps_response(self, mock_delay):
		with self.captureOnCommitCallbacks(execute=True):
			response = self.post(response_body(self.item_request.id))

		self.assertEqual(response.status_code, 201)
		self.assertEqual(SellerResponse.objects.count(), 1)

	@patch('seller_responses.tasks.notify_new_response_task.delay')
	def test_duplicate_response_rejected(self, mock_delay):
		self.post(response_body(self.item_request.id))
		response = self.post(response_body(self.item_request.id, price='40.00'))

		self.assertEqual(response.status_code, 400)
		self.item_request.refresh_from_db()
		self.seller.refresh_from_db()
		self.assertEqual(self.item_request.response_count, 1)
		self.assertEqual(self.seller.responded_requests, 9)

	def test_own_request_rejected(self):
		own_request = make_item_request(self.seller.user)
		response = self.post(response_body(own_request.id))
		self.assertEqual(response.status_code, 400)

	def test_inactive_request_rejected(self):
		self.item_request.status = 'cancelled'
		self.item_request.save()

		response = self.post(response_body(self.item_request.id))

		self.assertEqual(response.status_code, 400)
		self.assertEqual(SellerResponse.objects.count(), 0)

	def test_missing_request(self):
		self.assertEqual(self.post(response_body(424242)).status_code, 404)

	def test_requires_seller_profile(self):
		self.client.force_authenticate(make_user('neighbour'))
		self.assertEqual(self.post(response_body(self.item_request.id)).status_code, 403)

	def test_suspended_seller_cannot_respond(self):
		self.client.force_authenticate(make_seller('banned', status='suspended').user)
		self.assertEqual(self.post(response_body(self.item_request.id)).status_code, 403)

	def test_invalid_input(self):
		cases = [
			{'message': '   '},
			{'price': '-1'},
			{'message': 'x' * 1001},
			{'photos': [{'url': 'not a url'}]},
		]
		for overrides in cases:
			with self.subTest(overrides=overrides):
				response = self.post(response_body(self.item_request.id, **overrides))
				self.assertEqual(response.status_code, 400)

		self.assertEqual(SellerResponse.objects.count(), 0)

	def test_unauthenticated_rejected(self):
		response = APIClient().post('/api/responses/', response_body(self.item_request.id), format='json')
		self.assertEqual(response.status_code, 401)


class ResponseReadTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.author = make_user('buyer')
		self.item_request = make_item_request(self.author)
		self.alpha = make_seller('alpha')
		self.beta = make_seller('beta')
		self.alpha_response = make_response(self.item_request, self.alpha)
		self.beta_response = make_response(self.item_request, self.beta, status='declined')

	def test_author_lists_responses_and_marks_them_read(self):
		self.client.force_authenticate(self.author)

		response = self.client.get(f'/api/responses/request/{self.item_request.id}/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['count'], 2)
		self.assertEqual([r['id'] for r in response.data['responses']], [self.beta_response.id, self.alpha_response.id])
		self.assertFalse(SellerResponse.objects.filter(is_read=False).exists())
		self.assertIsNotNone(SellerResponse.objects.get(id=self.alpha_response.id).read_at)

	def test_other_users_cannot_list_request_responses(self):
		self.client.force_authenticate(self.alpha.user)

		response = self.client.get(f'/api/responses/request/{self.item_request.id}/')

		self.assertEqual(response.status_code, 403)
		self.assertTrue(SellerResponse.objects.filter(is_read=False).exists())

	def test_list_for_missing_request(self):
		self.client.force_authenticate(self.author)
		self.assertEqual(self.client.get('/api/responses/request/424242/').status_code, 404)

	def test_seller_lists_own_responses(self):
		other_request = make_item_request(make_user('other'))
		make_response(other_request, self.alpha, status='accepted')
		self.client.force_authenticate(self.alpha.user)

		everything = self.client.get('/api/responses/mine/')
		pending = self.client.get('/api/responses/mine/?status=pending')

		self.assertEqual(everything.data['count'], 2)
		self.assertEqual([r['id'] for r in pending.data['results']], [self.alpha_response.id])

	def test_invalid_status_filter(self):
		self.client.force_authenticate(self.alpha.user)
		self.assertEqual(self.client.get('/api/responses/mine/?status=lost').status_code, 400)

	def test_detail_visible_to_author_and_seller_only(self):
		url = f'/api/responses/{self.alpha_response.id}/'

		self.client.force_authenticate(self.author)
		self.assertEqual(self.client.get(url).status_code, 200)
		self.client.force_authenticate(self.alpha.user)
		self.assertEqual(self.client.get(url).data['response']['request']['id'], self.item_request.id)
		self.client.force_authenticate(self.beta.user)
		self.assertEqual(self.client.get(url).status_code, 403)
		self.assertEqual(self.client.get('/api/responses/424242/').status_code, 404)


class ResponseStatusTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.author = make_user('buyer')
		self.item_request = make_item_request(self.author)
		self.seller = make_seller('alpha')
		self.seller_response = make_response(self.item_request, self.seller)
		self.url = f'/api/responses/{self.seller_response.id}/status/'

	@patch('seller_responses.tasks.notify_response_status_task.delay')
	def test_author_accepts_with_feedback(self, mock_delay):
		self.client.force_authenticate(self.author)

		with self.captureOnCommitCallbacks(execute=True):
			response = self.client.patch(
				self.url,
				{'status': 'accepted', 'feedback': {'message': 'Great price', 'rating': 5}},
				format='json',
			)

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['response']['status'], 'accepted')
		self.assertEqual(response.data['response']['feedback']['rating'], 5)
		self.seller_response.refresh_from_db()
		self.assertEqual(self.seller_response.feedback_message, 'Great price')
		self.assertIsNotNone(self.seller_response.feedback_at)
		mock_delay.assert_called_once_with(self.seller_response.id)

	@patch('seller_responses.tasks.notify_response_status_task.delay')
	def test_decision_is_final(self, mock_delay):
		self.client.force_authenticate(self.author)
		self.client.patch(self.url, {'status': 'declined'}, format='json')

		response = self.client.patch(self.url, {'status': 'accepted'}, format='json')

		self.assertEqual(response.status_code, 400)
		self.seller_response.refresh_from_db()
		self.assertEqual(self.seller_response.status, 'declined')
		self.assertIsNone(self.seller_response.feedback_rating)

	def test_only_author_decides(self):
		self.client.force_authenticate(self.seller.user)
		response = self.client.patch(self.url, {'status': 'accepted'}, format='json')
		self.assertEqual(response.status_code, 403)

	def test_author_cannot_set_other_statuses(self):
		self.client.force_authenticate(self.author)
		for value in ('cancelled', 'pending', 'maybe'):
			with self.subTest(status=value):
				response = self.client.patch(self.url, {'status': value}, format='json')
				self.assertEqual(response.status_code, 400)

	def test_feedback_rating_range(self):
		self.client.force_authenticate(self.author)
		response = self.client.patch(self.url, {'status': 'accepted', 'feedback': {'rating': 6}}, format='json')
		self.assertEqual(response.status_code, 400)


class ResponseWithdrawTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.author = make_user('buyer')
		self.item_request = make_item_request(self.author, response_count=1)
		self.seller = make_seller('alpha')
		self.seller_response = make_response(self.item_request, self.seller)
		self.url = f'/api/responses/{self.seller_response.id}/'

	def test_seller_withdraws_pending_response(self):
		self.client.force_authenticate(self.seller.user)

		response = self.client.delete(self.url)

		self.assertEqual(response.status_code, 200)
		self.assertFalse(SellerResponse.objects.exists())
		self.item_request.refresh_from_db()
		self.assertEqual(self.item_request.response_count, 0)

	def test_only_the_seller_withdraws(self):
		self.client.force_authenticate(self.author)
		self.assertEqual(self.client.delete(self.url).status_code, 403)

	def test_decided_response_cannot_be_withdrawn(self):
		self.seller_response.status = 'accepted'
		self.seller_response.save()
		self.client.force_authenticate(self.seller.user)

		self.assertEqual(self.client.delete(self.url).status_code, 400)
		self.assertTrue(SellerResponse.objects.exists())


class CloseRequestResponsesTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.author = make_user('buyer')
		self.item_request = make_item_request(self.author)
		self.alpha = make_seller('alpha')
		self.beta = make_seller('beta')
		self.gamma = make_seller('gamma')
		self.pending = [
			make_response(self.item_request, self.alpha),
			make_response(self.item_request, self.beta),
		]
		self.declined = make_response(self.item_request, self.gamma, status='declined')
		self.client.force_authenticate(self.author)

	@patch('seller_responses.tasks.notify_responses_closed_task.delay')
	def test_cancel_closes_pending_responses(self, mock_delay):
		with self.captureOnCommitCallbacks(execute=True):
			response = self.client.post(f'/api/requests/{self.item_request.id}/cancel/', {}, format='json')

		self.assertEqual(response.status_code, 200)
		statuses = dict(SellerResponse.objects.values_list('id', 'status'))
		for closed in self.pending:
			self.assertEqual(statuses[closed.id], 'cancelled')
		self.assertEqual(statuses[self.declined.id], 'declined')
		mock_delay.assert_called_once()
		self.assertCountEqual(mock_delay.call_args.args[0], [r.id for r in self.pending])

	@patch('seller_responses.tasks.notify_responses_closed_task.delay')
	def test_complete_closes_pending_responses(self, mock_delay):
		with self.captureOnCommitCallbacks(execute=True):
			self.client.patch(f'/api/requests/{self.item_request.id}/complete/')

		self.assertEqual(SellerResponse.objects.filter(status='pending').count(), 0)
		mock_delay.assert_called_once()

	@patch('seller_responses.tasks.notify_responses_closed_task.delay')
	def test_nothing_queued_without_pending_responses(self, mock_delay):
		SellerResponse.objects.filter(status='pending').update(status='declined')

		with self.captureOnCommitCallbacks(execute=True):
			self.client.patch(f'/api/requests/{self.item_request.id}/complete/')

		mock_delay.assert_not_called()


@patch.object(SessionChannel, 'emit_to_room', new_callable=AsyncMock, return_value=True)
class ResponseNotificationDeliveryTests(TestCase):
	"""Notification tasks run eagerly against the real notifier."""

	def setUp(self):
		self.client = APIClient()
		self.author = make_user('buyer', first_name='Alice')
		self.item_request = make_item_request(self.author)
		self.seller = make_seller('alpha', push_token=VALID_TOKEN)
		reset_matching_pipeline()

	def tearDown(self):
		reset_matching_pipeline()

	def test_author_receives_new_response(self, mock_emit):
		self.client.force_authenticate(self.seller.user)

		with self.captureOnCommitCallbacks(execute=True):
			response = self.client.post('/api/responses/', response_body(self.item_request.id), format='json')

		room, event, payload = mock_emit.await_args.args
		self.assertEqual(room, f'user:{self.author.id}')
		self.assertEqual(event, 'new_response_notification')
		self.assertEqual(payload['type'], 'new_response')
		self.assertEqual(payload['response']['id'], response.data['response']['id'])
		self.assertEqual(payload['response']['price'], '45.00')
		self.assertEqual(payload['request']['title'], self.item_request.title)
		self.assertEqual(payload['seller']['business_name'], 'alpha shop')

	def test_seller_receives_status_change(self, mock_emit):
		seller_response = make_response(self.item_request, self.seller)
		self.client.force_authenticate(self.author)

		with self.captureOnCommitCallbacks(execute=True):
			self.client.patch(
				f'/api/responses/{seller_response.id}/status/',
				{'status': 'accepted', 'feedback': {'rating': 4}},
				format='json',
			)

		room, event, payload = mock_emit.await_args.args
		self.assertEqual(room, f'user:{self.seller.user_id}')
		self.assertEqual(event, 'response_status_notification')
		self.assertEqual(payload['type'], 'response_status_changed')
		self.assertEqual(payload['metadata']['is_accepted'], True)
		self.assertEqual(payload['client']['first_name'], 'Alice')
		self.assertEqual(payload['feedback']['rating'], 4)

	@patch.object(ExpoPushChannel, 'send_batch', new_callable=AsyncMock, return_value=TicketSummary(success_count=1))
	def test_closing_notifies_sellers_with_one_push_batch(self, mock_batch, mock_emit):
		other = make_seller('beta')
		make_response(self.item_request, self.seller)
		make_response(self.item_request, other)

		with self.captureOnCommitCallbacks(execute=True):
			self.client.force_authenticate(self.author)
			self.client.post(f'/api/requests/{self.item_request.id}/cancel/', {}, format='json')

		rooms = {call.args[0] for call in mock_emit.await_args_list}
		self.assertEqual(rooms, {f'user:{self.seller.user_id}', f'user:{other.user_id}'})
		for call in mock_emit.await_args_list:
			self.assertEqual(call.args[1], 'response_status_notification')
			self.assertEqual(call.args[2]['response']['status'], 'cancelled')

		mock_batch.assert_awaited_once()
		pushes = mock_batch.await_args.args[0]
		self.assertEqual([token for token, _ in pushes], [VALID_TOKEN])
		self.assertEqual(pushes[0][1].title, 'Request closed')
