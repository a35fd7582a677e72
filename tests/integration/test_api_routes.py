"""
Integration tests for the trading floor HTTP API.

Each test gets a fresh trading floor installed on the application state and
talks to it through an in-process ASGI client.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

API = "/api/v1"


async def register(client, name: str, **body):
    return await client.post(f"{API}/agents", json={"name": name, **body})


async def fund(client, name: str, token: str, amount: str):
    return await client.post(f"{API}/agents/{name}/deposit", json={"token": token, "amount": amount})


async def post_intent(client, agent: str, give_token: str, amount: str, want_token: str, **want):
    return await client.post(
        f"{API}/intents",
        json={"agent": agent, "give": {"token": give_token, "amount": amount}, "want": {"token": want_token, **want}},
    )


@pytest.fixture
async def traders(client):
    await register(client, "alice")
    await register(client, "bob")
    await fund(client, "alice", "USDC", "2800")
    await fund(client, "bob", "ETH", "1")
    return client


class TestAgents:
    @pytest.mark.asyncio
    async def test_register(self, client):
        response = await register(client, "alice", metadata={"strategy": "market-maker"})

        assert response.status_code == 201
        agent = response.json()["agent"]
        assert agent["name"] == "alice"
        assert agent["reputation"] == 100
        assert agent["balance"]["USDC"] == "0"
        assert agent["metadata"] == {"strategy": "market-maker"}

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts(self, client):
        await register(client, "alice")

        response = await register(client, "alice")

        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "error": "Agent alice already registered",
            "code": "already_registered",
        }

    @pytest.mark.asyncio
    async def test_empty_name_rejected(self, client):
        response = await register(client, "")

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_deposit(self, client):
        await register(client, "alice")

        response = await fund(client, "alice", "usdc", "250.5")

        assert response.status_code == 200
        assert response.json()["balance"]["USDC"] == "250.5"

    @pytest.mark.asyncio
    async def test_deposit_errors(self, client):
        await register(client, "alice")

        assert (await fund(client, "ghost", "USDC", "1")).status_code == 404
        unsupported = await fund(client, "alice", "DOGE", "1")
        assert unsupported.status_code == 400
        assert unsupported.json()["code"] == "unsupported_asset"
        negative = await fund(client, "alice", "USDC", "-5")
        assert negative.json()["code"] == "invalid_amount"

    @pytest.mark.asyncio
    async def test_get_unknown_agent(self, client):
        response = await client.get(f"{API}/agents/ghost")

        assert response.status_code == 404
        assert response.json()["code"] == "not_found"


class TestIntents:
    @pytest.mark.asyncio
    async def test_resting_intent_escrows(self, traders):
        response = await post_intent(traders, "alice", "USDC", "100", "SOL", max_slippage="0.05")

        assert response.status_code == 201
        body = response.json()
        assert body["matched"] is False
        assert body["intent"]["status"] == "active"
        assert body["intent"]["want"]["max_slippage"] == "0.05"

        agent = (await traders.get(f"{API}/agents/alice")).json()["agent"]
        assert agent["balance"]["USDC"] == "2700"
        assert agent["escrowed"]["USDC"] == "100"

    @pytest.mark.asyncio
    async def test_insufficient_balance(self, traders):
        response = await post_intent(traders, "alice", "USDC", "5000", "ETH")

        assert response.status_code == 400
        assert response.json()["code"] == "insufficient_balance"

    @pytest.mark.asyncio
    async def test_past_expiry_rejected(self, traders):
        await post_intent(traders, "bob", "ETH", "1", "USDC")

        response = await traders.post(
            f"{API}/intents",
            json={
                "agent": "alice",
                "give": {"token": "USDC", "amount": "2800"},
                "want": {"token": "ETH"},
                "expires_at": "2000-01-01T00:00:00Z",
            },
        )

        assert response.status_code == 400
        assert response.json()["code"] == "invalid_intent"
        assert (await traders.get(f"{API}/swaps")).json() == []

    @pytest.mark.asyncio
    async def test_reciprocal_intents_settle(self, traders):
        await post_intent(traders, "alice", "USDC", "2800", "ETH")

        response = await post_intent(traders, "bob", "ETH", "1", "USDC")

        assert response.status_code == 201
        body = response.json()
        assert body["matched"] is True
        swap = body["swap"]
        assert swap["agent_a"] == "bob"
        assert swap["agent_b"] == "alice"
        assert Decimal(swap["fee_a"]) == Decimal("0.003")
        assert Decimal(swap["fee_b"]) == Decimal("8.4")
        assert Decimal(body["balance_a"]["USDC"]) == Decimal("2791.6")
        assert Decimal(body["balance_b"]["ETH"]) == Decimal("0.997")

        swaps = (await traders.get(f"{API}/swaps")).json()
        assert [s["id"] for s in swaps] == [swap["id"]]
        detail = await traders.get(f"{API}/swaps/{swap['id']}")
        assert detail.json()["swap"]["volume_usd"] == swap["volume_usd"]

    @pytest.mark.asyncio
    async def test_list_and_filter(self, traders):
        await post_intent(traders, "alice", "USDC", "100", "SOL")
        await post_intent(traders, "bob", "ETH", "0.5", "BTC")

        everything = (await traders.get(f"{API}/intents")).json()["intents"]
        sol_only = (await traders.get(f"{API}/intents", params={"token": "SOL"})).json()["intents"]

        assert len(everything) == 2
        assert [i["agent"] for i in sol_only] == ["alice"]

    @pytest.mark.asyncio
    async def test_cancel(self, traders):
        intent = (await post_intent(traders, "alice", "USDC", "100", "SOL")).json()["intent"]

        forbidden = await traders.delete(f"{API}/intents/{intent['id']}", params={"agent": "bob"})
        cancelled = await traders.delete(f"{API}/intents/{intent['id']}", params={"agent": "alice"})
        again = await traders.delete(f"{API}/intents/{intent['id']}", params={"agent": "alice"})

        assert forbidden.status_code == 403
        assert cancelled.status_code == 200
        assert cancelled.json()["intent"]["status"] == "cancelled"
        assert cancelled.json()["balance"]["USDC"] == "2800"
        assert again.status_code == 409
        assert again.json()["code"] == "intent_not_active"

    @pytest.mark.asyncio
    async def test_unknown_intent(self, client):
        response = await client.get(f"{API}/intents/missing")

        assert response.status_code == 404


class TestWorld:
    @pytest.mark.asyncio
    async def test_world_state(self, traders):
        data = (await traders.get(f"{API}/world")).json()

        assert data["agents"] == 2
        assert data["total_swaps"] == 0
        assert data["token_prices"]["ETH"] == "2800.0"
        assert data["supported_tokens"] == ["USDC", "ETH", "SOL", "MON", "BTC"]
        assert data["fee_rate"] == "0.003"

    @pytest.mark.asyncio
    async def test_events_and_leaderboard(self, traders):
        await post_intent(traders, "alice", "USDC", "2800", "ETH")
        await post_intent(traders, "bob", "ETH", "1", "USDC")

        events = (await traders.get(f"{API}/events", params={"limit": 3})).json()
        leaderboard = (await traders.get(f"{API}/leaderboard")).json()

        assert len(events) == 3
        assert events[-1]["type"] == "swap_executed"
        assert [entry["name"] for entry in leaderboard] == ["alice", "bob"]
        assert {entry["volume"] for entry in leaderboard} == {"2800.0"}

    @pytest.mark.asyncio
    async def test_events_limit_validated(self, client):
        response = await client.get(f"{API}/events", params={"limit": 500})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_prices_keep_table_when_oracle_fails(self, client, price_oracle):
        data = (await client.get(f"{API}/prices")).json()

        price_oracle.fetch_prices.assert_awaited_once()
        assert data["USDC"] == "1.0"
        assert data["ETH"] == "2800.0"

    @pytest.mark.asyncio
    async def test_prices_refreshed_from_oracle(self, client, price_oracle):
        price_oracle.fetch_prices.return_value = {"ETH": Decimal("3050.25"), "USDC": Decimal("1.0")}

        data = (await client.get(f"{API}/prices")).json()

        assert data["ETH"] == "3050.25"
        assert data["SOL"] == "120.0"


class TestGovernance:
    @pytest.mark.asyncio
    async def test_swap_rewards_and_proposals(self, traders):
        await post_intent(traders, "alice", "USDC", "2800", "ETH")
        await post_intent(traders, "bob", "ETH", "1", "USDC")

        balance = (await traders.get(f"{API}/governance/balance/alice")).json()
        assert balance == {"agent": "alice", "balance": 280000, "token": "$SWAP"}

        created = await traders.post(
            f"{API}/governance/proposals",
            json={"agent": "alice", "title": "Lower fees", "description": "0.2%", "options": ["For", "Against"]},
        )
        assert created.status_code == 201
        proposal_id = created.json()["proposal"]["id"]

        vote = await traders.post(
            f"{API}/governance/proposals/{proposal_id}/vote",
            json={"agent": "bob", "option_index": 0},
        )
        assert vote.status_code == 200
        twice = await traders.post(
            f"{API}/governance/proposals/{proposal_id}/vote",
            json={"agent": "bob", "option_index": 1},
        )
        assert twice.status_code == 400

        proposals = (await traders.get(f"{API}/governance/proposals")).json()
        assert proposals[0]["total_votes"] == 280000

    @pytest.mark.asyncio
    async def test_proposal_requires_holdings(self, client):
        response = await client.post(
            f"{API}/governance/proposals",
            json={"agent": "nobody", "title": "t", "description": "d", "options": ["a", "b"]},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Must hold $SWAP to create proposals"

    @pytest.mark.asyncio
    async def test_tokenomics(self, client):
        data = (await client.get(f"{API}/governance/tokenomics")).json()

        assert data["total_supply"] == 1_000_000_000
        assert data["total_minted"] == 0


class TestOnChainAndProofs:
    @pytest.mark.asyncio
    async def test_onchain_status_without_key(self, client):
        data = (await client.get(f"{API}/onchain/status")).json()

        assert data["initialized"] is False
        balance = (await client.get(f"{API}/onchain/balance/0x{'1' * 40}")).json()
        assert balance["balance"] == "0"
        assert balance["eth"] is None

    @pytest.mark.asyncio
    async def test_onchain_state_unavailable_when_disabled(self, client):
        response = await client.get(f"{API}/onchain/state")

        assert response.status_code == 503
        assert response.json() == {"error": "Base chain not connected"}

    @pytest.mark.asyncio
    async def test_onchain_state_served_from_reader(self, client, api_app):
        api_app.state.chain_reader.get_state = AsyncMock(return_value={"chain": "base", "block_number": 7})

        response = await client.get(f"{API}/onchain/state")

        assert response.status_code == 200
        assert response.json()["block_number"] == 7

    @pytest.mark.asyncio
    async def test_onchain_contracts(self, client):
        data = (await client.get(f"{API}/onchain/contracts")).json()

        assert data["chain_id"] == 8453
        assert set(data["contracts"]) == {"token", "dao", "settler"}
        assert data["erc8004"]["agent_id"] == 2065

    @pytest.mark.asyncio
    async def test_swap_proof_journal(self, traders, api_app):
        await post_intent(traders, "alice", "USDC", "2800", "ETH")
        swap_id = (await post_intent(traders, "bob", "ETH", "1", "USDC")).json()["swap"]["id"]

        floor = api_app.state.trading_floor
        recorded = await api_app.state.proof_recorder.record_swap(floor.get_swap(swap_id)["swap"])

        data = (await traders.get(f"{API}/swaps/{swap_id}/proof")).json()
        assert data["swap_id"] == swap_id
        assert [p["reference"] for p in data["proofs"]] == [recorded["reference"]]

    @pytest.mark.asyncio
    async def test_unknown_swap(self, client):
        response = await client.get(f"{API}/swaps/missing")

        assert response.status_code == 404


class TestMetricsEndpoint:
    @pytest.mark.asyncio
    async def test_prometheus_text(self, client):
        response = await client.get(f"{API}/metrics")

        assert response.status_code == 200
        assert "agentswaps_swaps_executed_total" in response.text
