"""
Watch Registry
==============
One periodic scan task per chat.

Starting a watch for a chat that already has one cancels the old task
before the new one is registered, so a chat never has two loops running.
"""

import asyncio
from typing import Awaitable, Callable, Dict, Optional

from rent_reclaimer.shared.system.logging import Logger

Tick = Callable[[], Awaitable[None]]


class WatchRegistry:
    """
    Maps chat id -> owned asyncio task running `tick` every interval.

    Usage:
        registry = WatchRegistry()
        await registry.start(chat_id, 60, tick)
        await registry.stop(chat_id)
    """

    def __init__(self):
        self._tasks: Dict[int, asyncio.Task] = {}

    def __contains__(self, chat_id: int) -> bool:
        task = self._tasks.get(chat_id)
        return task is not None and not task.done()

    def __len__(self) -> int:
        return sum(1 for chat_id in self._tasks if chat_id in self)

    async def start(self, chat_id: int, interval_sec: float, tick: Tick) -> asyncio.Task:
        """Run `tick` now and then every `interval_sec`, replacing any prior watch."""
        await self.stop(chat_id)

        task = asyncio.create_task(self._loop(chat_id, interval_sec, tick), name=f"watch-{chat_id}")
        self._tasks[chat_id] = task
        Logger.info("[WATCH] Watch started", chat_id=chat_id, interval_sec=interval_sec)
        return task

    async def stop(self, chat_id: int) -> bool:
        """Cancel the watch for `chat_id`. Returns True if one was running."""
        task: Optional[asyncio.Task] = self._tasks.pop(chat_id, None)
        if task is None:
            return False

        running = not task.done()
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        if running:
            Logger.info("[WATCH] Watch stopped", chat_id=chat_id)
        return running

    async def stop_all(self) -> None:
        for chat_id in list(self._tasks):
            await self.stop(chat_id)

    async def _loop(self, chat_id: int, interval_sec: float, tick: Tick) -> None:
        while True:
            try:
                await tick()
            except Exception as e:
                Logger.error("[WATCH] Tick failed", chat_id=chat_id, err=str(e))
            await asyncio.sleep(interval_sec)
