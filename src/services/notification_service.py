"""
Outbound notification queue.

Settlement publishes a ``SwapNotification`` and returns; a background worker
started with the application delivers it to the reward distributor and the
proof recorder. Each notification is attempted once. Failures are logged and
alerted, never retried and never reported to the request that settled the
swap. Results are attached to the swap record as annotations.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Protocol

from src.schemas.trading import SwapRecord
from src.services.alerting_service import AlertType, send_error_alert
from src.services.metrics_service import metrics_collector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapNotification:
    swap: SwapRecord
    wallet_a: str | None = None
    wallet_b: str | None = None


class RewardDistributor(Protocol):
    async def distribute_swap_rewards(self, address_a: str, address_b: str) -> dict[str, Any]: ...


class ProofRecorder(Protocol):
    async def record_swap(self, swap: SwapRecord) -> dict[str, Any]: ...


class NotificationSink(Protocol):
    """Where the worker writes results back (the trading floor)."""

    def annotate_swap(self, swap_id: str, key: str, value: Any) -> None: ...

    def record_reward(self, swap_id: str, agent_name: str, reward: dict[str, Any]) -> None: ...


class NotificationDispatcher:
    """asyncio.Queue-backed outbox with a single consumer task."""

    def __init__(
        self,
        reward_distributor: RewardDistributor | None = None,
        proof_recorder: ProofRecorder | None = None,
    ):
        self.reward_distributor = reward_distributor
        self.proof_recorder = proof_recorder
        self.sink: NotificationSink | None = None
        self._pending: deque[SwapNotification] = deque()
        self._queue: asyncio.Queue[SwapNotification] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._worker: asyncio.Task | None = None
        self.delivered = 0
        self.failed = 0

    def attach(self, sink: NotificationSink) -> None:
        self.sink = sink

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def publish(self, notification: SwapNotification) -> None:
        """
        Enqueue without waiting. Safe to call from any thread.

        Before ``start`` notifications are buffered and handed to the worker
        when it starts.
        """
        if self._loop is None or self._queue is None:
            self._pending.append(notification)
            return
        self._loop.call_soon_threadsafe(self._queue.put_nowait, notification)

    async def start(self) -> None:
        if self.running:
            return
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue()
        while self._pending:
            self._queue.put_nowait(self._pending.popleft())
        self._worker = asyncio.create_task(self._run(), name="swap-notifications")
        logger.info("Swap notification worker started")

    async def stop(self) -> None:
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._worker = None
        self._queue = None
        self._loop = None
        logger.info("Swap notification worker stopped")

    async def drain(self) -> None:
        """Wait until everything queued so far has been processed."""
        if self._queue is not None:
            await self._queue.join()

    async def _run(self) -> None:
        assert self._queue is not None
        while True:
            notification = await self._queue.get()
            try:
                await self.process(notification)
            except Exception as e:
                self.failed += 1
                logger.error(f"Notification for swap {notification.swap.id} failed: {e}", exc_info=True)
            finally:
                self._queue.task_done()

    async def process(self, notification: SwapNotification) -> None:
        """Deliver one notification to every configured collaborator."""
        swap = notification.swap
        if self.reward_distributor is not None and notification.wallet_a and notification.wallet_b:
            await self._distribute_rewards(notification)
        if self.proof_recorder is not None:
            await self._record_proof(swap)
        self.delivered += 1

    async def _distribute_rewards(self, notification: SwapNotification) -> None:
        swap = notification.swap
        try:
            rewards = await self.reward_distributor.distribute_swap_rewards(
                notification.wallet_a, notification.wallet_b
            )
        except Exception as e:
            self._collaborator_failed("reward distribution", swap.id, e)
            return

        metrics_collector.record_notification(success=True)
        if self.sink is None:
            return
        await asyncio.to_thread(self.sink.annotate_swap, swap.id, "on_chain_rewards", rewards)
        for agent_name, key in ((swap.agent_a, "reward_a"), (swap.agent_b, "reward_b")):
            reward = rewards.get(key) or {}
            if reward.get("success"):
                await asyncio.to_thread(self.sink.record_reward, swap.id, agent_name, reward)

    async def _record_proof(self, swap: SwapRecord) -> None:
        try:
            proof = await self.proof_recorder.record_swap(swap)
        except Exception as e:
            self._collaborator_failed("proof recording", swap.id, e)
            return

        if proof.get("reference") is None:
            self._collaborator_failed("proof recording", swap.id, Exception(proof.get("error")))
        else:
            metrics_collector.record_notification(success=True)
        if self.sink is not None:
            await asyncio.to_thread(self.sink.annotate_swap, swap.id, "proof", proof)

    def _collaborator_failed(self, what: str, swap_id: str, error: Exception) -> None:
        self.failed += 1
        metrics_collector.record_notification(success=False)
        logger.warning(f"Swap {swap_id}: {what} failed: {error}")
        send_error_alert(
            alert_type=AlertType.EXTERNAL_SERVICE_FAILURE,
            message=f"Swap {what} failed",
            details={"swap": swap_id, "error": str(error)},
        )
