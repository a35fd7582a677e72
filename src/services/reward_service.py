"""
On-chain $SWAP usage reward distribution on Base.

After a swap settles, each participating agent with a wallet address gets a
usage reward from the SwapToken contract. The contract halves the base
reward per epoch; the distributor checks the halved amount and the remaining
usage pool before sending ``distributeUsageReward``.

Without ``DEPLOYER_PRIVATE_KEY`` the distributor stays uninitialized and every
call returns a failure result instead of touching the chain.
"""

import asyncio
import logging
from typing import Any

from eth_account import Account
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from src.contracts.abis import SWAP_TOKEN_ABI
from src.core.constants import SWAP_DAO_ADDRESS, SWAP_SETTLER_ADDRESS, SWAP_TOKEN_ADDRESS
from src.services.alerting_service import AlertType, send_error_alert

logger = logging.getLogger(__name__)

CONTRACTS = {
    "token": SWAP_TOKEN_ADDRESS,
    "settler": SWAP_SETTLER_ADDRESS,
    "dao": SWAP_DAO_ADDRESS,
}


class OnChainRewardDistributor:
    """Signs and sends SwapToken reward transactions from the deployer wallet."""

    def __init__(
        self,
        rpc_url: str,
        private_key: str | None,
        token_address: str = SWAP_TOKEN_ADDRESS,
        base_reward_wei: int = 1000 * 10**18,
        timeout_seconds: int = 120,
    ):
        self.rpc_url = rpc_url
        self.token_address = token_address
        self.base_reward_wei = base_reward_wei
        self.timeout_seconds = timeout_seconds
        self._private_key = private_key

        self.w3: AsyncWeb3 | None = None
        self.account = None
        self.contract = None
        self.initialized = False

        self.rewards_distributed = 0
        self.rewards_failed = 0
        self.last_reward_tx: str | None = None
        # One nonce sequence per deployer wallet
        self._tx_lock = asyncio.Lock()

    async def initialize(self) -> bool:
        """
        Connect to Base and make sure the deployer may distribute rewards.

        Returns:
            True when ready, False when running without a key or when the
            connection failed.
        """
        if not self._private_key:
            logger.info("No deployer key configured - on-chain rewards disabled")
            return False

        key = self._private_key if self._private_key.startswith("0x") else f"0x{self._private_key}"
        try:
            self.w3 = AsyncWeb3(AsyncHTTPProvider(self.rpc_url))
            self.account = Account.from_key(key)
            self.contract = self.w3.eth.contract(
                address=Web3.to_checksum_address(self.token_address),
                abi=SWAP_TOKEN_ABI,
            )
            logger.info(f"Connected to Base as {self.account.address}")

            owner = await self.contract.functions.owner().call()
            logger.info(f"SwapToken owner: {owner} (deployer is owner: {owner.lower() == self.account.address.lower()})")

            await self.ensure_distributor_auth()
            self.initialized = True
            return True
        except Exception as e:
            logger.error(f"On-chain reward distributor init failed: {e}")
            send_error_alert(
                alert_type=AlertType.REWARD_DISTRIBUTION_FAILURE,
                message="On-chain reward distributor failed to initialize",
                details={"error": str(e), "rpc_url": self.rpc_url},
            )
            return False

    async def ensure_distributor_auth(self) -> bool:
        """Register the deployer as a usage distributor if it is not one yet."""
        try:
            authorized = await self.contract.functions.usageDistributors(self.account.address).call()
            if authorized:
                logger.info("Deployer is an authorized usage distributor")
                return True

            logger.info("Deployer not authorized - registering as usage distributor")
            tx_hash, receipt = await self._transact(
                self.contract.functions.setUsageDistributor(self.account.address, True)
            )
            logger.info(f"Authorized distributor in block {receipt['blockNumber']} (tx: {tx_hash})")
            return True
        except Exception as e:
            logger.error(f"Failed to authorize distributor: {e}")
            return False

    async def _transact(self, call) -> tuple[str, Any]:
        """Build, sign and send a contract call; wait for one confirmation."""
        async with self._tx_lock:
            nonce = await self.w3.eth.get_transaction_count(self.account.address)
            chain_id = await self.w3.eth.chain_id
            tx = await call.build_transaction({
                "from": self.account.address,
                "nonce": nonce,
                "chainId": chain_id,
            })
            signed = self.account.sign_transaction(tx)
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
            receipt = await self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.timeout_seconds)

        tx_hash_hex = tx_hash.hex()
        if not tx_hash_hex.startswith("0x"):
            tx_hash_hex = "0x" + tx_hash_hex
        return tx_hash_hex, receipt

    async def distribute_swap_reward(self, agent_address: str | None) -> dict[str, Any]:
        """
        Send one usage reward to an agent wallet.

        Returns:
            ``{"success": True, "tx_hash", "block_number", "gas_used",
            "reward", "epoch"}`` or ``{"success": False, "error"}``
        """
        if not self.initialized:
            return {"success": False, "error": "On-chain module not initialized"}
        if not agent_address or not Web3.is_address(agent_address):
            return {"success": False, "error": f"Invalid address: {agent_address}"}

        try:
            functions = self.contract.functions
            actual_reward = await functions.applyHalving(self.base_reward_wei).call()
            if actual_reward == 0:
                return {"success": False, "error": "Reward is zero (halving exhausted)"}

            remaining = await functions.usageRemaining().call()
            if remaining < actual_reward:
                return {"success": False, "error": "Usage pool exhausted"}

            tx_hash, receipt = await self._transact(
                functions.distributeUsageReward(
                    Web3.to_checksum_address(agent_address), self.base_reward_wei
                )
            )
            epoch = await functions.currentEpoch().call()
        except Exception as e:
            self.rewards_failed += 1
            logger.error(f"Reward failed for {agent_address}: {e}")
            return {"success": False, "error": str(e)}

        self.rewards_distributed += 1
        self.last_reward_tx = tx_hash
        reward = str(Web3.from_wei(actual_reward, "ether"))
        logger.info(f"Rewarded {reward} SWAP to {agent_address[:10]}... (tx: {tx_hash[:14]}...)")
        return {
            "success": True,
            "tx_hash": tx_hash,
            "block_number": receipt["blockNumber"],
            "gas_used": str(receipt["gasUsed"]),
            "reward": reward,
            "epoch": int(epoch),
        }

    async def distribute_swap_rewards(self, address_a: str, address_b: str) -> dict[str, Any]:
        """Reward both sides of a swap; one side failing does not affect the other."""
        results = await asyncio.gather(
            self.distribute_swap_reward(address_a),
            self.distribute_swap_reward(address_b),
            return_exceptions=True,
        )
        reward_a, reward_b = (
            {"success": False, "error": str(result)} if isinstance(result, BaseException) else result
            for result in results
        )
        return {"reward_a": reward_a, "reward_b": reward_b}

    async def get_swap_balance(self, address: str) -> str:
        """On-chain $SWAP balance in whole tokens, "0" when unavailable."""
        if not self.initialized:
            return "0"
        try:
            balance = await self.contract.functions.balanceOf(Web3.to_checksum_address(address)).call()
        except Exception as e:
            logger.warning(f"Could not read $SWAP balance for {address}: {e}")
            return "0"
        return str(Web3.from_wei(balance, "ether"))

    def status(self) -> dict[str, Any]:
        return {
            "initialized": self.initialized,
            "deployer": self.account.address if self.account is not None else None,
            "contracts": dict(CONTRACTS),
            "stats": {
                "rewards_distributed": self.rewards_distributed,
                "rewards_failed": self.rewards_failed,
                "last_reward_tx": self.last_reward_tx,
            },
        }
