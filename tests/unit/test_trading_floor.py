"""Unit tests for the trading floor coordinator views and result shapes."""

from datetime import timedelta
from decimal import Decimal

from src.schemas.trading import Asset, EventType, IntentStatus, utcnow


def match_alice_and_bob(floor):
    floor.post_intent("alice", {"token": "USDC", "amount": "1000"}, {"token": "ETH"})
    return floor.post_intent("bob", {"token": "ETH", "amount": "1"}, {"token": "USDC"})


class TestResults:
    def test_failures_are_structured(self, floor):
        result = floor.deposit("ghost", "USDC", 10)

        assert result == {"success": False, "error": "Agent ghost not found", "code": "not_found"}

    def test_resting_intent_result(self, funded_floor):
        result = funded_floor.post_intent("alice", {"token": "USDC", "amount": "100"}, {"token": "SOL"})

        assert result["success"] is True
        assert result["matched"] is False
        assert funded_floor.get_intent(result["intent"].id)["intent"].status == IntentStatus.ACTIVE

    def test_cancel_returns_released_balance(self, funded_floor):
        intent = funded_floor.post_intent("alice", {"token": "USDC", "amount": "100"}, {"token": "SOL"})["intent"]

        result = funded_floor.cancel_intent("alice", intent.id)

        assert result["intent"].status == IntentStatus.CANCELLED
        assert result["balance"][Asset.USDC] == Decimal("1000")

    def test_expire_intents(self, funded_floor):
        funded_floor.post_intent("alice", {"token": "USDC", "amount": "100"}, {"token": "SOL"})

        result = funded_floor.expire_intents(utcnow() + timedelta(hours=2))

        assert len(result["expired"]) == 1
        assert funded_floor.get_active_intents()["intents"] == []
        assert funded_floor.get_agent("alice")["agent"].balance[Asset.USDC] == Decimal("1000")


class TestSwaps:
    def test_swap_history_most_recent_first(self, funded_floor):
        first = match_alice_and_bob(funded_floor)["swap"]
        funded_floor.deposit("alice", "USDC", 1000)
        funded_floor.deposit("bob", "ETH", 1)
        second = match_alice_and_bob(funded_floor)["swap"]

        assert [s.id for s in funded_floor.get_swap_history()] == [second.id, first.id]
        assert [s.id for s in funded_floor.get_swap_history(limit=1)] == [second.id]
        assert funded_floor.get_swap_history(limit=0) == []

    def test_get_swap(self, funded_floor):
        swap = match_alice_and_bob(funded_floor)["swap"]

        assert funded_floor.get_swap(swap.id)["swap"] is swap
        assert funded_floor.get_swap("missing")["code"] == "not_found"

    def test_annotations_and_reward_events(self, funded_floor):
        swap = match_alice_and_bob(funded_floor)["swap"]

        funded_floor.annotate_swap(swap.id, "proof", {"reference": "r1"})
        funded_floor.annotate_swap("missing", "proof", {})
        funded_floor.record_reward(swap.id, "bob", {"reward": "500", "tx_hash": "0xabc"})

        assert swap.annotations == {"proof": {"reference": "r1"}}
        event = funded_floor.get_events()[-1]
        assert event.type == EventType.REWARD_DISTRIBUTED
        assert event.data["tx_hash"] == "0xabc"

    def test_audit_balanced_after_swap(self, funded_floor):
        match_alice_and_bob(funded_floor)
        funded_floor.post_intent("alice", {"token": "ETH", "amount": "0.5"}, {"token": "SOL"})

        report = funded_floor.audit()

        assert all(entry["balanced"] for entry in report.values())
        assert report["ETH"]["deposited"] == Decimal("1")


class TestWorldViews:
    def test_world_state(self, funded_floor):
        match_alice_and_bob(funded_floor)

        state = funded_floor.get_world_state()

        assert state["name"] == "AgentSwaps Trading Floor"
        assert state["agents"] == 2
        assert state["active_intents"] == 0
        assert state["total_swaps"] == 1
        assert state["epoch"] == 1
        assert state["treasury"][Asset.ETH] == Decimal("0.003")
        assert [entry.name for entry in state["leaderboard"]] == ["bob", "alice"]
        assert len(state["recent_events"]) <= 20

    def test_update_prices_ignores_bad_values(self, floor):
        result = floor.update_prices({"ETH": "3000", "SOL": -1, "DOGE": 1, "BTC": "nan", "mon": 0.6})

        assert result["updated"] == {Asset.ETH: Decimal("3000"), Asset.MON: Decimal("0.6")}
        prices = floor.get_prices()
        assert prices[Asset.SOL] == Decimal("120.0")
        assert prices[Asset.BTC] == Decimal("98000.0")
        assert floor.get_events()[-1].type == EventType.PRICES_UPDATED

    def test_update_prices_no_event_when_nothing_changes(self, floor):
        before = len(floor.get_events())

        assert floor.update_prices({"DOGE": 1})["updated"] == {}
        assert len(floor.get_events()) == before
