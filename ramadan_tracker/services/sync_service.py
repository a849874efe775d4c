"""
Sync coordinator.

Reconciles the local record store with the remote store of record:
- on login, pull every remote row once and overwrite those dates locally
  (remote wins wholesale for each date it has);
- on local mutation while logged in, push that date's full record after a
  quiet window, collapsing bursts into one push of the latest state.

Remote failures are logged and dropped. Local reads and writes never wait on
the network.
"""
import asyncio
import logging
from datetime import date
from typing import Dict, Optional

from ramadan_tracker.constants import SYNC_DEBOUNCE_SECONDS

logger = logging.getLogger("ramadan_tracker.sync")


class SyncCoordinator:
    """Local-first, server-eventually-consistent synchronization"""

    def __init__(self, store, remote, debounce_seconds: float = SYNC_DEBOUNCE_SECONDS):
        self.store = store
        self.remote = remote
        self.debounce_seconds = debounce_seconds
        self.authenticated = False
        self.last_pull_ok: Optional[bool] = None
        self._pending: Dict[date, asyncio.Task] = {}
        self._merge_done = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._unsubscribe = store.subscribe(self.notify_mutation)

    async def set_authenticated(self, active: bool) -> None:
        """
        Observe a session-state transition.

        Becoming active triggers exactly one pull/merge. Becoming inactive
        cancels pending pushes.
        """
        self._loop = asyncio.get_running_loop()

        if active and not self.authenticated:
            self.authenticated = True
            self._merge_done.clear()
            try:
                await self.pull_and_merge()
            finally:
                self._merge_done.set()
        elif not active and self.authenticated:
            self.authenticated = False
            self._cancel_pending()
            logger.info("Session ended, pending pushes cancelled")

    async def pull_and_merge(self) -> int:
        """
        Pull all remote rows and overwrite the matching local dates.

        Local dates the remote does not have are left alone.

        Returns:
            Number of dates overwritten
        """
        result = await self.remote.fetch_rows()
        self.last_pull_ok = result.ok
        if not result.ok:
            logger.warning(f"Pull failed, keeping local state: {result.error}")
            return 0

        merged = self.store.replace_many(result.data)
        logger.info(f"Merged {merged} remote rows into local store")
        return merged

    def notify_mutation(self, day: date) -> None:
        """Store listener: (re)schedule a debounced push for day"""
        if not self.authenticated:
            return

        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # Mutation came from a worker thread
            if self._loop is not None and self._loop.is_running():
                self._loop.call_soon_threadsafe(self._schedule_push, day)
            return
        self._schedule_push(day)

    def _schedule_push(self, day: date) -> None:
        pending = self._pending.pop(day, None)
        if pending is not None and not pending.done():
            pending.cancel()
        self._pending[day] = asyncio.ensure_future(self._push_after_delay(day))

    async def _push_after_delay(self, day: date) -> None:
        try:
            await asyncio.sleep(self.debounce_seconds)
            # Never push pre-merge local state over a fresh pull
            await self._merge_done.wait()
            if not self.authenticated:
                return
            record = self.store.get(day)
            result = await self.remote.put_row(day, record)
            if result.ok:
                logger.debug(f"Pushed record for {day}")
            else:
                logger.warning(f"Push for {day} dropped: {result.error}")
        finally:
            if self._pending.get(day) is asyncio.current_task():
                del self._pending[day]

    def pending_dates(self):
        return sorted(self._pending)

    async def flush(self) -> None:
        """Wait for every pending push to finish"""
        while self._pending:
            tasks = list(self._pending.values())
            await asyncio.gather(*tasks, return_exceptions=True)

    def _cancel_pending(self) -> None:
        for task in self._pending.values():
            task.cancel()
        self._pending.clear()

    async def close(self) -> None:
        """Cancel pending pushes, detach from the store and close the client"""
        self._cancel_pending()
        self._unsubscribe()
        close = getattr(self.remote, "aclose", None)
        if close is not None:
            await close()
