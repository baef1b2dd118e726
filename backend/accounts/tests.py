from django.test import TestCase
from rest_framework.test import APIClient

from services.tests.helpers import make_seller, make_user
from .models import DeviceToken, User
from . import services

VALID_TOKEN = 'ExponentPushToken[aaaaaaaaaaaaaaaaaaaaaa]'


class RegisterTests(TestCase):
	def setUp(self):
		self.client = APIClient()

	def test_register_returns_tokens(self):
		response = self.client.post('/api/auth/register/', {
			'username': 'marie',
			'email': 'Marie@Example.com',
			'password': 'password123',
			'first_name': 'Marie',
		}, format='json')

		self.assertEqual(response.status_code, 201)
		self.assertIn('access', response.data['tokens'])
		self.assertEqual(response.data['user']['role'], 'user')
		self.assertEqual(User.objects.get(username='marie').email, 'marie@example.com')

	def test_duplicate_email_rejected(self):
		make_user('marie')
		response = self.client.post('/api/auth/register/', {
			'username': 'marie2',
			'email': 'MARIE@example.com',
			'password': 'password123',
		}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertIn('email', response.data)

	def test_me(self):
		user = make_user('marie')
		self.client.force_authenticate(user)

		response = self.client.get('/api/auth/me/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['username'], 'marie')

	def test_token_login(self):
		make_user('marie')
		response = self.client.post('/api/auth/token/', {'username': 'marie', 'password': 'pass1234'}, format='json')

		self.assertEqual(response.status_code, 200)
		self.assertIn('access', response.data)


class PushTokenTests(TestCase):
	def setUp(self):
		self.client = APIClient()
		self.user = make_user('marie')
		self.client.force_authenticate(self.user)

	def test_register_valid_token(self):
		response = self.client.post('/api/push-tokens/register/', {
			'expo_push_token': VALID_TOKEN,
			'device_info': {'platform': 'ios', 'model': 'iPhone 15', 'os_version': '18.1'},
		}, format='json')

		self.assertEqual(response.status_code, 200)
		self.assertTrue(response.data['token_registered'])
		self.assertFalse(response.data['seller_profile'])
		device = DeviceToken.objects.get(user=self.user)
		self.assertEqual(device.device_model, 'iPhone 15')

	def test_register_invalid_token(self):
		response = self.client.post('/api/push-tokens/register/', {'expo_push_token': 'bogus'}, format='json')

		self.assertEqual(response.status_code, 400)
		self.assertFalse(DeviceToken.objects.exists())

	def test_reregistering_replaces_token(self):
		services.register_device_token(self.user, VALID_TOKEN)
		services.register_device_token(self.user, 'ExpoPushToken[bbbbbbbbbbbbbbbbbbbbbb]', {'platform': 'android'})

		self.assertEqual(DeviceToken.objects.filter(user=self.user).count(), 1)
		device = services.get_device_token(self.user)
		self.assertEqual(device.token, 'ExpoPushToken[bbbbbbbbbbbbbbbbbbbbbb]')
		self.assertEqual(device.platform, 'android')

	def test_status(self):
		response = self.client.get('/api/push-tokens/status/')
		self.assertFalse(response.data['has_token'])
		self.assertIsNone(response.data['device'])

		services.register_device_token(self.user, VALID_TOKEN, {'platform': 'ios'})
		response = self.client.get('/api/push-tokens/status/')

		self.assertTrue(response.data['has_token'])
		self.assertTrue(response.data['device']['is_valid_token'])
		self.assertEqual(response.data['device']['token_preview'], VALID_TOKEN[:20] + '...')

	def test_status_reports_seller_profile(self):
		seller = make_seller('vendor', push_token=VALID_TOKEN)
		self.client.force_authenticate(seller.user)

		response = self.client.get('/api/push-tokens/status/')

		self.assertTrue(response.data['seller_profile'])
		self.assertTrue(response.data['has_token'])

	def test_unregister(self):
		services.register_device_token(self.user, VALID_TOKEN)

		response = self.client.delete('/api/push-tokens/unregister/')
		self.assertTrue(response.data['removed'])
		self.assertFalse(DeviceToken.objects.exists())

		response = self.client.delete('/api/push-tokens/unregister/')
		self.assertFalse(response.data['removed'])
