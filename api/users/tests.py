"""
Tests for the current-user endpoint
"""
from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

User = get_user_model()


class MeEndpointTests(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(email='Test@Example.com', password='testpass123', full_name='Test User')
        self.url = '/api/v1/users/me/'

    def test_email_is_normalized(self):
        self.assertEqual(self.user.email, 'Test@example.com')

    def test_get_profile(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['full_name'], 'Test User')

    def test_update_profile_keeps_email(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.patch(self.url, {'full_name': 'Renamed', 'email': 'other@example.com'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.full_name, 'Renamed')
        self.assertEqual(self.user.email, 'Test@example.com')

    def test_requires_authentication(self):
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_token_login(self):
        response = self.client.post('/api/v1/auth/token/', {
            'email': 'Test@example.com',
            'password': 'testpass123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_200_OK)
