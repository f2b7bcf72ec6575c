"""Tests for the keep-alive endpoint."""

import unittest

from health_server import app


class HealthServerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = app.test_client()

    def test_root(self) -> None:
        response = self.client.get("/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {"status": "Bot is running!"})

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json(), {"status": "healthy"})


if __name__ == "__main__":
    unittest.main()
