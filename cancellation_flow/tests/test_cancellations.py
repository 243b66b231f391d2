"""Tests for recording cancellation outcomes."""

import pytest

from cancellation_flow.services.cancellations import record_outcome
from cancellation_flow.services.variant_assignment import get_or_assign_variant
from cancellation_flow.tests.conftest import make_subscription


class TestRecordOutcome:
    def test_updates_existing_row_and_keeps_variant(self, fake_db):
        variant = get_or_assign_variant("u1", "s1")
        row = record_outcome("u1", "s1", True, "Accepted retention offer")

        assert row["downsell_variant"] == variant.value
        assert row["accepted_downsell"] is True
        assert len(fake_db.store["cancellations"]) == 1

    def test_creates_row_when_flow_never_fetched_variant(self, fake_db):
        record_outcome("u1", "s1", False, "Other: something went wrong here for sure")
        rows = fake_db.store["cancellations"]
        assert len(rows) == 1
        assert rows[0]["downsell_variant"] in ("A", "B")
        assert rows[0]["accepted_downsell"] is False

    def test_decline_marks_only_that_subscription(self, fake_db):
        fake_db.store["subscriptions"].extend([
            make_subscription(id="s1"),
            make_subscription(id="s2"),
        ])
        record_outcome("u1", "s1", False)
        statuses = {s["id"]: s["status"] for s in fake_db.store["subscriptions"]}
        assert statuses == {"s1": "pending_cancellation", "s2": "active"}

    def test_accept_leaves_subscription_alone(self, fake_db):
        fake_db.store["subscriptions"].append(make_subscription(id="s1"))
        record_outcome("u1", "s1", True)
        assert fake_db.store["subscriptions"][0]["status"] == "active"

    def test_rejects_unknown_subscription_status(self, fake_db):
        from cancellation_flow import supabase_client

        with pytest.raises(ValueError, match="Unknown subscription status"):
            supabase_client.set_subscription_status("s1", "paused")
