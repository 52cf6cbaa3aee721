"""Network presence tracking with online/offline transition events."""

import asyncio
import logging
import threading
from typing import Awaitable, Callable, Optional

from models.enums import ConnectivityEvent

logger = logging.getLogger(__name__)

ConnectivityListener = Callable[[ConnectivityEvent], None]
Probe = Callable[[], Awaitable[bool]]


class ConnectivityMonitor:
    """Single shared online/offline flag observed by any number of listeners.

    The platform signal is fed in through ``set_online`` (or ``watch`` with an
    async probe); listeners receive a ConnectivityEvent only on transitions.

    Example:
        >>> monitor = ConnectivityMonitor()
        >>> unsubscribe = monitor.subscribe(lambda event: print(event.value))
        >>> monitor.set_online(False)
        offline
        >>> unsubscribe()
    """

    def __init__(self, is_online: bool = True):
        self._is_online = is_online
        self._listeners: list[ConnectivityListener] = []
        self._lock = threading.RLock()
        self._watch_task: Optional[asyncio.Task] = None

    @property
    def is_online(self) -> bool:
        return self._is_online

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def subscribe(self, listener: ConnectivityListener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: ConnectivityListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def set_online(self, online: bool) -> bool:
        """Update the shared flag. Returns True if this was a transition."""
        with self._lock:
            if online == self._is_online:
                return False
            self._is_online = online
            listeners = list(self._listeners)

        event = ConnectivityEvent.ONLINE if online else ConnectivityEvent.OFFLINE
        logger.info("Connectivity changed: %s", event.value)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Connectivity listener failed on '%s'", event.value)
        return True

    async def check(self, probe: Probe) -> bool:
        """Run one probe and feed its result into the shared flag."""
        try:
            online = bool(await probe())
        except Exception as e:
            logger.debug("Connectivity probe failed: %s", e)
            online = False
        self.set_online(online)
        return online

    async def watch(self, probe: Probe, interval: float) -> None:
        """Probe forever, ``interval`` seconds apart. Cancel the task to stop."""
        while True:
            await self.check(probe)
            await asyncio.sleep(interval)

    def start_watching(self, probe: Probe, interval: float) -> asyncio.Task:
        """Start ``watch`` as a background task on the running loop."""
        if self._watch_task is not None and not self._watch_task.done():
            return self._watch_task
        self._watch_task = asyncio.get_running_loop().create_task(self.watch(probe, interval))
        logger.info("Connectivity watch started (interval=%.1fs)", interval)
        return self._watch_task

    async def stop(self) -> None:
        """Stop a background watch started with ``start_watching``."""
        task, self._watch_task = self._watch_task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Connectivity watch stopped")
