"""Slot Poller — tracks the cluster's current slot while a wallet is connected.

Invariants:
    - Polls get_slot("processed") immediately on connect, then every interval_seconds
    - disconnect()/close() cancel the poll task and clear the slot
    - A failed poll is logged and skipped; it never stops the loop
"""

import asyncio
import logging

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Processed

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 15.0


class SlotPoller:
    def __init__(self, client: AsyncClient, interval_seconds: float = DEFAULT_INTERVAL_SECONDS):
        self.client = client
        self.interval_seconds = interval_seconds
        self.slot: int | None = None
        self._task: asyncio.Task | None = None

    @property
    def connected(self) -> bool:
        return self._task is not None and not self._task.done()

    def connect(self) -> None:
        if self.connected:
            return
        self._task = asyncio.create_task(self._poll())

    async def disconnect(self) -> None:
        task, self._task = self._task, None
        self.slot = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    close = disconnect

    async def _poll(self) -> None:
        while True:
            try:
                resp = await self.client.get_slot(Processed)
                self.slot = resp.value
            except Exception as e:
                logger.warning(f"Failed to fetch slot: {e}")
            await asyncio.sleep(self.interval_seconds)
