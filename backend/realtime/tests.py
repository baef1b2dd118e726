import json
from unittest.mock import patch

import httpx
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.test import SimpleTestCase, TestCase
from rest_framework_simplejwt.tokens import AccessToken

from services.tests.helpers import make_user
from .channels import SessionChannel, category_room, region_room, room_group_name, user_room
from .consumers.marketplace_consumer import MarketplaceConsumer
from .middleware import JWTAuthMiddleware
from .push import PUSH_CHUNK_SIZE, ExpoPushChannel, PushResult, analyze_tickets
from .routing import websocket_urlpatterns

VALID_TOKEN = 'ExponentPushToken[xxxxxxxxxxxxxxxxxxxxxx]'


class RoomNameTests(SimpleTestCase):
	def test_room_ids(self):
		self.assertEqual(user_room(42), 'user:42')
		self.assertEqual(region_room('Paris', '75001'), 'region:Paris:75001')
		self.assertEqual(category_room('electronique'), 'category:electronique')

	def test_group_names_are_channels_safe(self):
		self.assertEqual(room_group_name('user:42'), 'user.42')
		self.assertEqual(room_group_name('sellers'), 'sellers')
		self.assertEqual(room_group_name('region:Saint-Étienne:42000'), 'region.saint-etienne.42000')
		self.assertEqual(room_group_name('region:Le Mans:72000'), 'region.le-mans.72000')

	def test_group_name_length_capped(self):
		self.assertEqual(len(room_group_name('region:' + 'x' * 200 + ':1')), 99)


class RecordingLayer:
	def __init__(self, fail=False):
		self.fail = fail
		self.sent = []

	async def group_send(self, group, message):
		if self.fail:
			raise ConnectionError('redis unreachable')
		self.sent.append((group, message))


class SessionChannelTests(SimpleTestCase):
	async def test_emit_wraps_event_for_consumers(self):
		layer = RecordingLayer()
		channel = SessionChannel(layer)

		delivered = await channel.emit_to_user(7, 'new_request_notification', {'id': 'abc'})

		self.assertTrue(delivered)
		self.assertEqual(layer.sent, [(
			'user.7',
			{'type': 'notification.event', 'event': 'new_request_notification', 'payload': {'id': 'abc'}},
		)])

	async def test_layer_failure_reports_false(self):
		channel = SessionChannel(RecordingLayer(fail=True))

		self.assertFalse(await channel.emit_to_room('sellers', 'ping', {}))

	async def test_missing_layer_reports_false(self):
		with patch('realtime.channels.get_channel_layer', return_value=None):
			self.assertFalse(await SessionChannel().emit_to_room('sellers', 'ping', {}))


def expo_handler(tickets_for=None, status_code=200, calls=None):
	def handler(request):
		messages = json.loads(request.content)
		if calls is not None:
			calls.append(messages)
		if status_code != 200:
			return httpx.Response(status_code, json={'errors': [{'message': 'boom'}]})
		tickets = tickets_for(messages) if tickets_for else [{'status': 'ok', 'id': f'ticket-{i}'} for i in range(len(messages))]
		return httpx.Response(200, json={'data': tickets})
	return handler


class ExpoPushChannelTests(SimpleTestCase):
	def channel_for(self, handler, **kwargs):
		client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
		return ExpoPushChannel(http_client=client, access_token='secret', **kwargs), client

	def test_validate_token(self):
		self.assertTrue(ExpoPushChannel.validate_token(VALID_TOKEN))
		self.assertTrue(ExpoPushChannel.validate_token('ExpoPushToken[abc]'))
		self.assertTrue(ExpoPushChannel.validate_token('1f3a0d5e-8c2b-4e6f-9a7d-0b1c2d3e4f5a'))
		self.assertFalse(ExpoPushChannel.validate_token('ExponentPushToken[]'))
		self.assertFalse(ExpoPushChannel.validate_token('fcm-token'))
		self.assertFalse(ExpoPushChannel.validate_token(None))

	async def test_send_accepted(self):
		calls = []
		seen_headers = {}

		def handler(request):
			seen_headers.update(request.headers)
			return expo_handler(calls=calls)(request)

		channel, client = self.channel_for(handler)
		async with client:
			result = await channel.send(VALID_TOKEN, 'New request!', 'iPhone - Paris', {'screen': 'RequestDetail'})

		self.assertTrue(result.success)
		self.assertEqual(result.ticket['status'], 'ok')
		message = calls[0][0]
		self.assertEqual(message['to'], VALID_TOKEN)
		self.assertEqual(message['priority'], 'high')
		self.assertEqual(message['data']['screen'], 'RequestDetail')
		self.assertIn('timestamp', message['data'])
		self.assertEqual(seen_headers['authorization'], 'Bearer secret')

	async def test_error_ticket(self):
		def tickets_for(messages):
			return [{
				'status': 'error',
				'message': 'not a registered push notification recipient',
				'details': {'error': 'DeviceNotRegistered'},
			}]

		channel, client = self.channel_for(expo_handler(tickets_for=tickets_for))
		async with client:
			result = await channel.send(VALID_TOKEN, 'title', 'body')

		self.assertFalse(result.success)
		self.assertIn('not a registered', result.error)

	async def test_server_error_does_not_raise(self):
		channel, client = self.channel_for(expo_handler(status_code=500))
		async with client:
			result = await channel.send(VALID_TOKEN, 'title', 'body')

		self.assertFalse(result.success)
		self.assertIsNotNone(result.error)

	async def test_request_level_errors(self):
		def handler(request):
			return httpx.Response(200, json={'errors': [{'code': 'PUSH_TOO_MANY', 'message': 'Too many messages'}]})

		channel, client = self.channel_for(handler)
		async with client:
			result = await channel.send(VALID_TOKEN, 'title', 'body')

		self.assertEqual(result, PushResult(success=False, error='Too many messages'))

	async def test_invalid_token_skips_network(self):
		calls = []
		channel, client = self.channel_for(expo_handler(calls=calls))
		async with client:
			result = await channel.send('garbage', 'title', 'body')

		self.assertFalse(result.success)
		self.assertEqual(calls, [])

	async def test_disabled(self):
		calls = []
		channel, client = self.channel_for(expo_handler(calls=calls), enabled=False)
		async with client:
			result = await channel.send(VALID_TOKEN, 'title', 'body')

		self.assertFalse(result.success)
		self.assertEqual(calls, [])

	async def test_batch_is_chunked(self):
		calls = []
		channel, client = self.channel_for(expo_handler(calls=calls))
		message = type('Message', (), {'title': 't', 'body': 'b', 'data': {}})()
		notifications = [(f'ExponentPushToken[token{i}]', message) for i in range(250)]
		notifications.append(('invalid', message))

		async with client:
			summary = await channel.send_batch(notifications)

		self.assertEqual([len(chunk) for chunk in calls], [PUSH_CHUNK_SIZE, PUSH_CHUNK_SIZE, 50])
		self.assertEqual(summary.success_count, 250)
		self.assertEqual(summary.error_count, 0)

	async def test_batch_chunk_failure_continues(self):
		calls = []

		def handler(request):
			messages = json.loads(request.content)
			calls.append(messages)
			if len(calls) == 1:
				return httpx.Response(502)
			return httpx.Response(200, json={'data': [{'status': 'ok'} for _ in messages]})

		channel, client = self.channel_for(handler)
		message = type('Message', (), {'title': 't', 'body': 'b', 'data': {}})()
		async with client:
			summary = await channel.send_batch([(f'ExponentPushToken[t{i}]', message) for i in range(150)])

		self.assertEqual(len(calls), 2)
		self.assertEqual(summary.success_count, 50)
		self.assertEqual(summary.error_count, 100)

	def test_analyze_tickets(self):
		summary = analyze_tickets([
			{'status': 'ok'},
			{'status': 'error', 'message': 'bad', 'details': {'error': 'MessageTooBig'}},
			{'status': 'ok'},
		])

		self.assertEqual((summary.success_count, summary.error_count), (2, 1))
		self.assertEqual(summary.errors, [{'code': 'MessageTooBig', 'message': 'bad'}])


class MarketplaceConsumerTests(TestCase):
	def setUp(self):
		self.buyer = make_user('buyer')
		self.seller = make_user('vendor', role='seller')

	async def connect(self, user):
		communicator = WebsocketCommunicator(MarketplaceConsumer.as_asgi(), '/ws/notifications/')
		communicator.scope['user'] = user
		connected, _ = await communicator.connect()
		self.assertTrue(connected)
		greeting = await communicator.receive_json_from()
		self.assertEqual(greeting['type'], 'connection_established')
		return communicator

	async def test_anonymous_rejected(self):
		application = JWTAuthMiddleware(URLRouter(websocket_urlpatterns))
		communicator = WebsocketCommunicator(application, '/ws/notifications/')

		connected, _ = await communicator.connect()

		self.assertFalse(connected)

	async def test_jwt_query_token_authenticates(self):
		application = JWTAuthMiddleware(URLRouter(websocket_urlpatterns))
		token = str(AccessToken.for_user(self.buyer))
		communicator = WebsocketCommunicator(application, f'/ws/notifications/?token={token}')

		connected, _ = await communicator.connect()
		self.assertTrue(connected)
		greeting = await communicator.receive_json_from()

		self.assertEqual(greeting['user_id'], self.buyer.id)
		await communicator.disconnect()

	async def test_bad_token_rejected(self):
		application = JWTAuthMiddleware(URLRouter(websocket_urlpatterns))
		communicator = WebsocketCommunicator(application, '/ws/notifications/?token=not-a-jwt')

		connected, _ = await communicator.connect()

		self.assertFalse(connected)

	async def test_ping(self):
		communicator = await self.connect(self.buyer)

		await communicator.send_json_to({'type': 'ping'})
		response = await communicator.receive_json_from()

		self.assertEqual(response['type'], 'pong')
		self.assertEqual(response['user_id'], self.buyer.id)
		await communicator.disconnect()

	async def test_unknown_and_untyped_messages(self):
		communicator = await self.connect(self.buyer)

		await communicator.send_json_to({'type': 'dance'})
		self.assertEqual((await communicator.receive_json_from())['message'], 'Unknown message type: dance')

		await communicator.send_json_to({'hello': 'world'})
		self.assertEqual((await communicator.receive_json_from())['type'], 'error')
		await communicator.disconnect()

	async def test_region_join_requires_seller(self):
		communicator = await self.connect(self.buyer)

		await communicator.send_json_to({'type': 'join_seller_region', 'city': 'Paris', 'postal_code': '75001'})
		response = await communicator.receive_json_from()

		self.assertEqual(response, {'type': 'error', 'message': 'Only sellers can join regions'})
		await communicator.disconnect()

	async def test_seller_joins_region_and_receives_room_events(self):
		communicator = await self.connect(self.seller)

		await communicator.send_json_to({'type': 'join_seller_region', 'city': 'Paris', 'postal_code': '75001'})
		response = await communicator.receive_json_from()
		self.assertEqual(response, {'type': 'region_joined', 'region': 'region:Paris:75001'})

		delivered = await SessionChannel().emit_to_room('region:Paris:75001', 'regional_update', {'n': 1})
		self.assertTrue(delivered)
		event = await communicator.receive_json_from()

		self.assertEqual(event, {'type': 'regional_update', 'data': {'n': 1}})
		await communicator.disconnect()

	async def test_seller_joins_categories(self):
		communicator = await self.connect(self.seller)

		await communicator.send_json_to({'type': 'join_seller_categories', 'categories': ['electronique', 'livres']})
		response = await communicator.receive_json_from()
		self.assertEqual(response['type'], 'categories_joined')

		await communicator.send_json_to({'type': 'join_seller_categories', 'categories': ['spaceships']})
		response = await communicator.receive_json_from()
		self.assertEqual(response['type'], 'error')
		await communicator.disconnect()

	async def test_sellers_room_and_personal_room(self):
		seller_ws = await self.connect(self.seller)
		buyer_ws = await self.connect(self.buyer)

		await SessionChannel().emit_to_room('sellers', 'announcement', {'text': 'hello sellers'})
		await SessionChannel().emit_to_user(self.buyer.id, 'request_created_confirmation', {'stats': {'notified_sellers': 0}})

		self.assertEqual(
			await seller_ws.receive_json_from(),
			{'type': 'announcement', 'data': {'text': 'hello sellers'}},
		)
		self.assertEqual(
			await buyer_ws.receive_json_from(),
			{'type': 'request_created_confirmation', 'data': {'stats': {'notified_sellers': 0}}},
		)
		self.assertTrue(await buyer_ws.receive_nothing())

		await seller_ws.disconnect()
		await buyer_ws.disconnect()
