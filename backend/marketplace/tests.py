from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase
from rest_framework.test import APIClient


class HealthCheckTests(TestCase):
	def setUp(self):
		self.client = APIClient()

	def test_healthy(self):
		response = self.client.get('/health/')

		self.assertEqual(response.status_code, 200)
		self.assertEqual(response.data['status'], 'healthy')
		self.assertEqual(response.data['services']['database'], 'healthy')
		self.assertEqual(response.data['services']['redis'], 'not configured')
		self.assertEqual(response.data['services']['channels'], 'healthy')
		self.assertEqual(response.data['services']['celery'], 'healthy')

	@patch('marketplace.views.ItemRequest.objects.exists', side_effect=DatabaseError('gone'))
	def test_database_down(self, mock_exists):
		response = self.client.get('/health/')

		self.assertEqual(response.status_code, 503)
		self.assertEqual(response.data['status'], 'unhealthy')
		self.assertTrue(response.data['services']['database'].startswith('unhealthy'))
