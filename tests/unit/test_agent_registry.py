"""Unit tests for agent registration and deposits through the trading floor."""

from decimal import Decimal

from src.schemas.trading import Asset, EventType


class TestRegisterAgent:
    def test_register_creates_zero_balances(self, floor):
        result = floor.register_agent("alice", metadata={"strategy": "mm"})

        assert result["success"] is True
        agent = result["agent"]
        assert agent.name == "alice"
        assert agent.reputation == 100
        assert agent.swaps_completed == 0
        assert agent.total_volume == Decimal("0")
        assert agent.metadata == {"strategy": "mm"}
        assert set(agent.balance) == set(Asset)
        assert all(v == Decimal("0") for v in agent.balance.values())
        assert all(v == Decimal("0") for v in agent.escrowed.values())

    def test_register_emits_agent_entered(self, floor):
        floor.register_agent("alice")

        events = floor.get_events()
        assert events[-1].type == EventType.AGENT_ENTERED
        assert events[-1].data["agent"] == "alice"

    def test_duplicate_name_fails_and_keeps_original(self, floor):
        floor.register_agent("alice", wallet_address="0x1")
        result = floor.register_agent("alice", wallet_address="0x2")

        assert result == {
            "success": False,
            "error": "Agent alice already registered",
            "code": "already_registered",
        }
        assert floor.get_agent("alice")["agent"].wallet_address == "0x1"

    def test_names_are_case_sensitive(self, floor):
        assert floor.register_agent("Alice")["success"] is True
        assert floor.register_agent("alice")["success"] is True


class TestGetAgent:
    def test_unknown_agent(self, floor):
        result = floor.get_agent("nobody")

        assert result["success"] is False
        assert result["code"] == "not_found"


class TestDeposit:
    def test_deposit_credits_free_balance(self, floor):
        floor.register_agent("alice")
        result = floor.deposit("alice", "USDC", Decimal("1000"))

        assert result["success"] is True
        assert result["balance"][Asset.USDC] == Decimal("1000")
        assert floor.get_agent("alice")["agent"].balance[Asset.USDC] == Decimal("1000")

    def test_deposit_accepts_lowercase_symbol(self, floor):
        floor.register_agent("alice")

        assert floor.deposit("alice", "eth", "0.5")["balance"][Asset.ETH] == Decimal("0.5")

    def test_unsupported_token_leaves_balances_alone(self, floor):
        floor.register_agent("alice")
        result = floor.deposit("alice", "DOGE", Decimal("100"))

        assert result["success"] is False
        assert result["code"] == "unsupported_asset"
        assert all(v == Decimal("0") for v in floor.get_agent("alice")["agent"].balance.values())

    def test_non_positive_amount(self, floor):
        floor.register_agent("alice")

        assert floor.deposit("alice", "USDC", 0)["code"] == "invalid_amount"
        assert floor.deposit("alice", "USDC", -5)["code"] == "invalid_amount"

    def test_unknown_agent_checked_first(self, floor):
        result = floor.deposit("ghost", "DOGE", -1)

        assert result["code"] == "not_found"

    def test_deposit_emits_event(self, floor):
        floor.register_agent("alice")
        floor.deposit("alice", "SOL", Decimal("3"))

        event = floor.get_events()[-1]
        assert event.type == EventType.DEPOSIT
        assert event.data["token"] == "SOL"
        assert event.data["amount"] == "3"
