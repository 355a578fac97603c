from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..errors import MonitorError
from ..models import StatsSnapshot
from ..state import AppState
from .resolver import DetailResolver

logger = logging.getLogger(__name__)

ACTIVE = "active"
SUSPENDED = "suspended"


class PollingController:
    """Keeps the dashboard stats fresh while the dashboard is visible.

    Two states: ``active`` runs a background task that refreshes immediately
    and then every ``interval`` seconds; ``suspended`` has no task at all.
    A failed poll is logged and leaves the previous snapshot in place.
    """

    def __init__(
        self,
        resolver: DetailResolver,
        state: AppState,
        interval: float = 3.0,
    ):
        self.resolver = resolver
        self.state = state
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def status(self) -> str:
        return ACTIVE if self._task is not None and not self._task.done() else SUSPENDED

    def activate(self) -> None:
        if self.status == ACTIVE:
            return
        logger.info("Dashboard polling every %.1fs", self.interval)
        self._task = asyncio.get_running_loop().create_task(self._run())

    def suspend(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        logger.info("Dashboard polling suspended")

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def refresh(self) -> Optional[StatsSnapshot]:
        seq = self.state.begin("dashboard")
        try:
            snapshot = await self.resolver.fetch_stats()
        except MonitorError as exc:
            logger.warning("Failed to load dashboard data: %s", exc)
            return None

        if not self.state.is_current("dashboard", seq) or self.state.current_view != "dashboard":
            logger.debug("Dropping stale stats response #%d", seq)
            return None

        self.state.stats = snapshot
        return snapshot

    async def _run(self) -> None:
        while True:
            try:
                await self.refresh()
            except Exception:
                logger.exception("Dashboard poll failed unexpectedly")
            await asyncio.sleep(self.interval)
