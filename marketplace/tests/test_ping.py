from django.test import TestCase
from rest_framework.test import APIClient


class PingTest(TestCase):
    def test_ping_without_token(self):
        response = APIClient().get('/ping/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "Bang"})
