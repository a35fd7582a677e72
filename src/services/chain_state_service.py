"""
Read-only view of the deployed $SWAP contracts on Base.

Collects token pool counters, settler order counters and DAO parameters in
one round of concurrent ``eth_call`` requests. Results are cached for a few
seconds; when the RPC fails the last good snapshot is served instead.

No key is needed, so this works even when on-chain rewards are disabled.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any

from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from src.contracts.abis import SWAP_DAO_ABI, SWAP_SETTLER_ABI, SWAP_TOKEN_ABI
from src.core.constants import (
    BASE_CHAIN_ID,
    CHAIN_STATE_CACHE_SECONDS,
    ERC8004_AGENT_ID,
    ERC8004_REGISTRY_ADDRESS,
    SWAP_DAO_ADDRESS,
    SWAP_SETTLER_ADDRESS,
    SWAP_TOKEN_ADDRESS,
)

logger = logging.getLogger(__name__)

EXPLORER_URL = "https://basescan.org"

CONTRACTS = {
    "token": SWAP_TOKEN_ADDRESS,
    "settler": SWAP_SETTLER_ADDRESS,
    "dao": SWAP_DAO_ADDRESS,
    "erc8004_registry": ERC8004_REGISTRY_ADDRESS,
}


def _ether(value: int) -> str:
    return str(Web3.from_wei(value, "ether"))


class BaseChainReader:
    """Cached reader for SwapToken, SwapSettler and SwapDAO view functions."""

    def __init__(
        self,
        rpc_url: str,
        enabled: bool = True,
        cache_seconds: float = CHAIN_STATE_CACHE_SECONDS,
        w3: AsyncWeb3 | None = None,
    ):
        self.rpc_url = rpc_url
        self.enabled = enabled
        self.cache_seconds = cache_seconds
        self.w3 = w3
        self._token = None
        self._settler = None
        self._dao = None
        self._cached: dict[str, Any] | None = None
        self._refreshed_at = 0.0
        self._refresh_lock = asyncio.Lock()

    def _connect(self) -> None:
        if self.w3 is None:
            self.w3 = AsyncWeb3(AsyncHTTPProvider(self.rpc_url))
        if self._token is None:
            contract = self.w3.eth.contract
            self._token = contract(address=Web3.to_checksum_address(SWAP_TOKEN_ADDRESS), abi=SWAP_TOKEN_ABI)
            self._settler = contract(address=Web3.to_checksum_address(SWAP_SETTLER_ADDRESS), abi=SWAP_SETTLER_ABI)
            self._dao = contract(address=Web3.to_checksum_address(SWAP_DAO_ADDRESS), abi=SWAP_DAO_ABI)

    def _is_fresh(self) -> bool:
        return self._cached is not None and time.monotonic() - self._refreshed_at < self.cache_seconds

    async def get_state(self) -> dict[str, Any] | None:
        """
        Snapshot of every contract counter.

        Returns:
            None when disabled, the last good snapshot when the RPC fails,
            or ``{"error", "chain"}`` when no snapshot was ever taken.
        """
        if not self.enabled:
            return None
        if self._is_fresh():
            return self._cached

        async with self._refresh_lock:
            if self._is_fresh():
                return self._cached
            try:
                self._connect()
                state = await self._read_state()
            except Exception as e:
                logger.warning(f"Base state query failed: {e}")
                return self._cached or {"error": str(e), "chain": "base"}

            self._cached = state
            self._refreshed_at = time.monotonic()
            return state

    async def _read_state(self) -> dict[str, Any]:
        token = self._token.functions
        settler = self._settler.functions
        dao = self._dao.functions
        (
            name,
            symbol,
            total_supply,
            usage_distributed,
            usage_remaining,
            governance_distributed,
            ecosystem_distributed,
            liquidity_distributed,
            total_distributed,
            total_remaining,
            epoch,
            halving_divisor,
            token_owner,
            orders_opened,
            orders_filled,
            fee_bps,
            fee_recipient,
            settler_owner,
            proposal_count,
            quorum,
            voting_duration,
            proposal_threshold,
            block_number,
        ) = await asyncio.gather(
            token.name().call(),
            token.symbol().call(),
            token.totalSupply().call(),
            token.usageDistributed().call(),
            token.usageRemaining().call(),
            token.governanceDistributed().call(),
            token.ecosystemDistributed().call(),
            token.liquidityDistributed().call(),
            token.totalDistributed().call(),
            token.totalRemaining().call(),
            token.currentEpoch().call(),
            token.halvingDivisor().call(),
            token.owner().call(),
            settler.totalOrdersOpened().call(),
            settler.totalOrdersFilled().call(),
            settler.feeBps().call(),
            settler.feeRecipient().call(),
            settler.owner().call(),
            dao.proposalCount().call(),
            dao.quorumTokens().call(),
            dao.votingDuration().call(),
            dao.proposalThreshold().call(),
            self.w3.eth.block_number,
        )

        return {
            "chain": "base",
            "chain_id": BASE_CHAIN_ID,
            "block_number": int(block_number),
            "contracts": dict(CONTRACTS),
            "erc8004_agent_id": ERC8004_AGENT_ID,
            "token": {
                "name": name,
                "symbol": symbol,
                "total_supply": _ether(total_supply),
                "pools": {
                    "usage": {"distributed": _ether(usage_distributed), "remaining": _ether(usage_remaining)},
                    "governance": {"distributed": _ether(governance_distributed)},
                    "ecosystem": {"distributed": _ether(ecosystem_distributed)},
                    "liquidity": {"distributed": _ether(liquidity_distributed)},
                },
                "total_distributed": _ether(total_distributed),
                "total_remaining": _ether(total_remaining),
                "halving": {"epoch": int(epoch), "divisor": int(halving_divisor)},
                "owner": token_owner,
            },
            "settler": {
                "orders_opened": int(orders_opened),
                "orders_filled": int(orders_filled),
                "fee_bps": int(fee_bps),
                "fee_percent": f"{int(fee_bps) / 100}%",
                "fee_recipient": fee_recipient,
                "owner": settler_owner,
            },
            "dao": {
                "proposal_count": int(proposal_count),
                "quorum": _ether(quorum),
                "voting_duration_seconds": int(voting_duration),
                "proposal_threshold": _ether(proposal_threshold),
            },
            "refreshed_at": datetime.now(timezone.utc).isoformat(),
        }

    async def get_eth_balance(self, address: str) -> dict[str, Any] | None:
        """Native ETH balance; None when disabled."""
        if not self.enabled:
            return None
        if not Web3.is_address(address):
            return {"error": f"Invalid address: {address}"}
        try:
            self._connect()
            balance = await self.w3.eth.get_balance(Web3.to_checksum_address(address))
        except Exception as e:
            logger.warning(f"Could not read ETH balance for {address}: {e}")
            return {"error": str(e)}
        return {"address": address, "token": "ETH", "balance": _ether(balance), "raw": str(balance)}

    def contracts(self) -> dict[str, Any]:
        """Deployed addresses with explorer links."""
        def entry(address: str, name: str) -> dict[str, str]:
            return {"address": address, "name": name, "url": f"{EXPLORER_URL}/address/{address}"}

        return {
            "chain": "base",
            "chain_id": BASE_CHAIN_ID,
            "explorer": EXPLORER_URL,
            "contracts": {
                "token": entry(SWAP_TOKEN_ADDRESS, "$SWAP Token"),
                "dao": entry(SWAP_DAO_ADDRESS, "AgentSwaps DAO"),
                "settler": entry(SWAP_SETTLER_ADDRESS, "ERC-7683 Settler"),
            },
            "erc8004": {"agent_id": ERC8004_AGENT_ID, **entry(ERC8004_REGISTRY_ADDRESS, "ERC-8004 Registry")},
        }
