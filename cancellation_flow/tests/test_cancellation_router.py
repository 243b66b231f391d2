"""Tests for POST /api/cancellation: variant lookup, outcomes, validation."""

from unittest.mock import patch

import pytest

from cancellation_flow.tests.conftest import make_subscription

URL = "/api/cancellation"


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestGetVariant:
    def test_assigns_and_returns_variant(self, client, fake_db):
        resp = client.post(URL, json={"user_id": "u1", "subscription_id": "s1", "get_variant": True})
        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["variant"] in ("A", "B")
        assert fake_db.store["cancellations"][0]["downsell_variant"] == data["variant"]

    def test_repeat_requests_return_same_variant(self, client, fake_db):
        body = {"user_id": "u1", "subscription_id": "s1", "get_variant": True}
        variants = {client.post(URL, json=body).json()["variant"] for _ in range(10)}
        assert len(variants) == 1
        assert len(fake_db.store["cancellations"]) == 1

    @pytest.mark.parametrize("body", [
        {"subscription_id": "s1", "get_variant": True},
        {"user_id": "u1", "get_variant": True},
        {"user_id": "", "subscription_id": "s1", "get_variant": True},
    ])
    def test_missing_identity(self, client, body):
        resp = client.post(URL, json=body)
        assert resp.status_code == 400
        assert resp.json() == {"success": False, "message": "Missing user_id or subscription_id"}

    def test_non_string_identity(self, client):
        resp = client.post(URL, json={"user_id": 42, "subscription_id": "s1", "get_variant": True})
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_storage_failure_is_500(self, client):
        with patch("cancellation_flow.supabase_client.get_cancellation",
                   side_effect=RuntimeError("db down")):
            resp = client.post(URL, json={"user_id": "u1", "subscription_id": "s1",
                                          "get_variant": True})
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "message": "Internal server error"}


class TestSubmitOutcome:
    def test_accepted_downsell_keeps_subscription_active(self, client, fake_db):
        fake_db.store["subscriptions"].append(make_subscription(id="s1"))
        resp = client.post(URL, json={
            "user_id": "u1", "subscription_id": "s1",
            "accepted_downsell": True, "reason": "Accepted retention offer",
        })
        assert resp.status_code == 200
        assert resp.json() == {"success": True}

        row = fake_db.store["cancellations"][0]
        assert row["accepted_downsell"] is True
        assert row["reason"] == "Accepted retention offer"
        assert row["downsell_variant"] in ("A", "B")
        assert fake_db.store["subscriptions"][0]["status"] == "active"

    def test_declined_marks_pending_cancellation(self, client, fake_db):
        fake_db.store["subscriptions"].append(make_subscription(id="s1"))
        client.post(URL, json={"user_id": "u1", "subscription_id": "s1", "get_variant": True})

        resp = client.post(URL, json={
            "user_id": "u1", "subscription_id": "s1",
            "accepted_downsell": False, "reason": "Too expensive - willing to pay: $10",
        })
        assert resp.status_code == 200
        assert fake_db.store["subscriptions"][0]["status"] == "pending_cancellation"
        assert len(fake_db.store["cancellations"]) == 1
        assert fake_db.store["cancellations"][0]["accepted_downsell"] is False

    def test_reason_is_optional(self, client, fake_db):
        resp = client.post(URL, json={"user_id": "u1", "subscription_id": "s1",
                                      "accepted_downsell": True})
        assert resp.status_code == 200
        assert fake_db.store["cancellations"][0]["reason"] is None

    @pytest.mark.parametrize("value", ["true", 1, None])
    def test_non_boolean_accepted_downsell(self, client, fake_db, value):
        resp = client.post(URL, json={"user_id": "u1", "subscription_id": "s1",
                                      "accepted_downsell": value})
        assert resp.status_code == 400
        assert resp.json()["message"] == "accepted_downsell must be boolean"
        assert fake_db.store["cancellations"] == []

    @pytest.mark.parametrize("reason", [["nope"], 7, False, 0, [], {}])
    def test_non_string_reason(self, client, fake_db, reason):
        resp = client.post(URL, json={"user_id": "u1", "subscription_id": "s1",
                                      "accepted_downsell": False, "reason": reason})
        assert resp.status_code == 400
        assert resp.json()["message"] == "reason must be string"
        assert fake_db.store["cancellations"] == []

    def test_invalid_json(self, client):
        resp = client.post(URL, content=b"{not json", headers={"Content-Type": "application/json"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid JSON body"


class TestRateLimit:
    def test_rejects_over_limit(self, client, fake_db):
        body = {"user_id": "u1", "subscription_id": "s1", "get_variant": True}
        with patch("cancellation_flow.routers.cancellation.RATE_LIMIT", 3):
            codes = [client.post(URL, json=body).status_code for _ in range(4)]
        assert codes == [200, 200, 200, 429]
