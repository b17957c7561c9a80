# -*- coding: utf-8 -*-

from __future__ import annotations

import os
import shutil
import sqlite3
import sys
import tempfile
import unittest
from datetime import timedelta
from pathlib import Path

from fastapi.testclient import TestClient


class TestSyncBackend(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls._tmp = Path(tempfile.mkdtemp(prefix="gymbro-test-"))
        data_root = cls._tmp / "data"
        cls.db_path = data_root / "gymbro.db"
        os.environ["GYMBRO_DATA_ROOT"] = str(data_root)
        os.environ["GYMBRO_DB_PATH"] = str(cls.db_path)
        os.environ["GYMBRO_JWT_SECRET"] = "test-secret"
        os.environ["GYMBRO_ENV"] = "test"

        # Ensure settings/app reflect the env vars above.
        for name in list(sys.modules.keys()):
            if name == "gymbro" or name.startswith("gymbro."):
                sys.modules.pop(name, None)

        from gymbro.api import app  # noqa: WPS433 (import inside test for env control)

        cls.app = app
        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls) -> None:
        try:
            cls.client.close()
        except Exception:
            pass
        shutil.rmtree(cls._tmp, ignore_errors=True)

    def _register(self, email: str, password: str = "password123", name: str | None = None) -> dict:
        payload = {"email": email, "password": password}
        if name is not None:
            payload["name"] = name
        resp = self.client.post("/api/auth/register", json=payload)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    @staticmethod
    def _auth(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    def test_health_is_public(self) -> None:
        resp = self.client.get("/api/health")
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["status"], "OK")
        self.assertEqual(body["environment"], "test")
        self.assertTrue(body["timestamp"].endswith("Z"))

    def test_data_requires_token(self) -> None:
        resp = self.client.get("/api/data/sync")
        self.assertEqual(resp.status_code, 401)
        self.assertIn("detail", resp.json())

        resp = self.client.get("/api/data/sync", headers={"Authorization": "Token abc"})
        self.assertEqual(resp.status_code, 401)

    def test_register_login_verify(self) -> None:
        body = self._register("Alice@Example.com", name="  Alice ")
        self.assertEqual(body["user"]["email"], "alice@example.com")
        self.assertEqual(body["user"]["name"], "Alice")
        self.assertTrue(body["token"])

        resp = self.client.post("/api/auth/register", json={"email": "alice@example.com", "password": "password123"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "User already exists")

        resp = self.client.post("/api/auth/login", json={"email": "ALICE@example.com", "password": "password123"})
        self.assertEqual(resp.status_code, 200)
        token = resp.json()["token"]

        resp = self.client.get("/api/auth/verify", headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"valid": True, "user": body["user"]})

    def test_bad_credentials(self) -> None:
        self._register("bob@example.com")
        resp = self.client.post("/api/auth/login", json={"email": "bob@example.com", "password": "wrong-pass"})
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Invalid credentials")

        resp = self.client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "password123"})
        self.assertEqual(resp.status_code, 401)

    def test_short_password_rejected(self) -> None:
        resp = self.client.post("/api/auth/register", json={"email": "short@example.com", "password": "12345"})
        self.assertEqual(resp.status_code, 422)

    def test_expired_and_tampered_tokens(self) -> None:
        from gymbro.auth.security import create_access_token, sign_token  # noqa: WPS433

        user = self._register("carol@example.com")["user"]

        expired = create_access_token(user_id=user["id"], email=user["email"], ttl=timedelta(seconds=-60))
        resp = self.client.get("/api/auth/verify", headers=self._auth(expired))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Token expired")

        forged = sign_token({"sub": user["id"], "email": user["email"]}, "not-the-secret")
        resp = self.client.get("/api/auth/verify", headers=self._auth(forged))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["detail"], "Invalid token")

        resp = self.client.get("/api/auth/verify", headers=self._auth("garbage"))
        self.assertEqual(resp.status_code, 401)

    def test_profile(self) -> None:
        token = self._register("dave@example.com")["token"]

        resp = self.client.get("/api/users/profile", headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["email"], "dave@example.com")
        self.assertIsNone(body["name"])
        self.assertTrue(body["created_at"])

        resp = self.client.put("/api/users/profile", json={"name": "   "}, headers=self._auth(token))
        self.assertEqual(resp.status_code, 400)

        resp = self.client.put("/api/users/profile", json={"name": "Dave"}, headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["user"]["name"], "Dave")

        resp = self.client.get("/api/users/profile", headers=self._auth(token))
        self.assertEqual(resp.json()["name"], "Dave")

    def test_sync_upserts_one_row_per_data_type(self) -> None:
        registered = self._register("erin@example.com")
        token, user_id = registered["token"], registered["user"]["id"]

        resp = self.client.get("/api/data/sync", headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"], {})

        doc = {"workoutHistory": [{"id": "1", "type": "Push"}], "preferences": {"theme": "dark"}}
        resp = self.client.post("/api/data/sync", json={"data": doc}, headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["success"])

        doc["workoutHistory"].append({"id": "2", "type": "Legs"})
        resp = self.client.post("/api/data/sync", json={"data": doc}, headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)

        with sqlite3.connect(str(self.db_path)) as conn:
            rows = conn.execute(
                "SELECT data_type, COUNT(*) FROM user_data WHERE user_id = ? GROUP BY data_type",
                (user_id,),
            ).fetchall()
        self.assertEqual(dict(rows), {"workoutHistory": 1, "preferences": 1})

        resp = self.client.get("/api/data/sync", headers=self._auth(token))
        self.assertEqual(resp.json()["data"], doc)

    def test_sync_rejects_non_object(self) -> None:
        token = self._register("frank@example.com")["token"]
        resp = self.client.post("/api/data/sync", json={"data": [1, 2]}, headers=self._auth(token))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["detail"], "Invalid data format")

    def test_single_data_type_endpoints(self) -> None:
        token = self._register("gina@example.com")["token"]

        resp = self.client.get("/api/data/mealHistory", headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["dataType"], "mealHistory")
        self.assertEqual(resp.json()["data"], {})

        meals = [{"id": "m1", "food": "Eggs"}]
        resp = self.client.post("/api/data/mealHistory", json={"data": meals}, headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)
        resp = self.client.get("/api/data/mealHistory", headers=self._auth(token))
        self.assertEqual(resp.json()["data"], meals)

        resp = self.client.delete("/api/data/mealHistory", headers=self._auth(token))
        self.assertEqual(resp.status_code, 200)
        resp = self.client.get("/api/data/mealHistory", headers=self._auth(token))
        self.assertEqual(resp.json()["data"], {})

    def test_users_cannot_see_each_other(self) -> None:
        first = self._register("hank@example.com")["token"]
        second = self._register("ivy@example.com")["token"]
        self.client.post("/api/data/sync", json={"data": {"mealHistory": [{"id": "x"}]}}, headers=self._auth(first))
        resp = self.client.get("/api/data/sync", headers=self._auth(second))
        self.assertEqual(resp.json()["data"], {})


if __name__ == "__main__":
    unittest.main()
