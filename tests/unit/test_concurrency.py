"""Unit tests for the trading floor under concurrent callers."""

from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from src.schemas.trading import IntentStatus

USDC_AGENTS = [f"buyer{i}" for i in range(8)]
ETH_AGENTS = [f"seller{i}" for i in range(8)]
ROUNDS = 5


def build_floor(floor):
    for name in USDC_AGENTS:
        floor.register_agent(name)
        floor.deposit(name, "USDC", Decimal("100000"))
    for name in ETH_AGENTS:
        floor.register_agent(name)
        floor.deposit(name, "ETH", Decimal("100"))
    return floor


def buy_eth(floor, name):
    return [
        floor.post_intent(name, {"token": "USDC", "amount": "2800"}, {"token": "ETH"}, {"metadata": {"r": r}})
        for r in range(ROUNDS)
    ]


def sell_eth(floor, name):
    return [
        floor.post_intent(name, {"token": "ETH", "amount": "1"}, {"token": "USDC"}, {"metadata": {"r": r}})
        for r in range(ROUNDS)
    ]


def run_concurrently(floor):
    jobs = [(buy_eth, name) for name in USDC_AGENTS] + [(sell_eth, name) for name in ETH_AGENTS]
    with ThreadPoolExecutor(max_workers=len(jobs)) as pool:
        futures = [pool.submit(fn, floor, name) for fn, name in jobs]
        return [result for future in futures for result in future.result()]


class TestConcurrentPosting:
    def test_every_post_succeeds_and_ledger_balances(self, floor):
        results = run_concurrently(build_floor(floor))

        assert len(results) == (len(USDC_AGENTS) + len(ETH_AGENTS)) * ROUNDS
        assert all(result["success"] for result in results)
        assert all(entry["balanced"] for entry in floor.audit().values())

    def test_no_intent_settles_twice(self, floor):
        run_concurrently(build_floor(floor))

        swaps = floor.get_swap_history(limit=10_000)
        assert swaps
        counts = Counter(intent_id for swap in swaps for intent_id in (swap.intent_a, swap.intent_b))
        assert all(swap.intent_a != swap.intent_b for swap in swaps)
        assert all(n == 1 for n in counts.values())

        filled = [i for i in floor.world.intents.values() if i.status == IntentStatus.FILLED]
        assert {i.id for i in filled} == set(counts)
        assert all(i.filled_by_swap is not None for i in filled)

    def test_swap_counter_matches_history(self, floor):
        results = run_concurrently(build_floor(floor))

        matched = sum(1 for result in results if result.get("matched"))
        assert floor.get_world_state()["total_swaps"] == matched
        assert len(floor.get_swap_history(limit=10_000)) == matched

    def test_no_intent_is_both_active_and_filled(self, floor):
        run_concurrently(build_floor(floor))

        active = {i.id for i in floor.get_active_intents()["intents"]}
        for swap in floor.get_swap_history(limit=10_000):
            assert swap.intent_a not in active
            assert swap.intent_b not in active
