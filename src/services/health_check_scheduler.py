"""Health Check Scheduler - Keeps playlist health data fresh in the background.

Runs a bounded health refresh on a fixed cadence so allocations can skip the
inline refresh. ``CampaignService`` instances built without a health monitor,
as the operator CLI builds them, rely on this loop; ``playlist_engine.py
schedule`` runs it. The refresh itself is blocking I/O and runs in a worker
thread.
"""

import asyncio
import logging

from src.core.config import get_config
from src.services.health_monitor import HealthMonitor

logger = logging.getLogger(__name__)


def _default_monitor() -> HealthMonitor:
    from src.adapters import get_prober
    from src.core.database.repositories import SqlResourceCatalogStore

    return HealthMonitor(SqlResourceCatalogStore(), get_prober())


class HealthCheckScheduler:
    """Scheduler that periodically refreshes stale playlist health."""

    def __init__(self, monitor: HealthMonitor | None = None, interval_seconds: float | None = None) -> None:
        self.monitor = monitor
        self.interval_seconds = (
            interval_seconds if interval_seconds is not None else get_config().engine.health_check_interval_seconds
        )
        self.is_running = False
        self._task: asyncio.Task | None = None
        self._lock = asyncio.Lock()

    async def start(self) -> None:
        """Start the scheduler background task."""
        async with self._lock:
            if self.is_running:
                logger.warning("Health check scheduler is already running")
                return

            self.is_running = True
            self._task = asyncio.create_task(self._run_scheduler())
            logger.info(f"Health check scheduler started (checking every {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the scheduler background task."""
        async with self._lock:
            if not self.is_running:
                return

            self.is_running = False
            if self._task:
                self._task.cancel()
                try:
                    await self._task
                except asyncio.CancelledError:
                    pass
            logger.info("Health check scheduler stopped")

    async def _run_scheduler(self) -> None:
        """Main scheduler loop - runs on a fixed cadence."""
        while self.is_running:
            try:
                await self.run_once()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in health check scheduler: {e}", exc_info=True)
            await asyncio.sleep(self.interval_seconds)

    async def run_once(self) -> None:
        """Run one bounded refresh in a worker thread."""
        if self.monitor is None:
            self.monitor = _default_monitor()
        summary = await asyncio.to_thread(self.monitor.refresh_stale)
        if summary.checked:
            logger.info(f"Scheduled health check probed {summary.checked} playlist(s), {summary.failed} failed")


# Global singleton instance
_scheduler: HealthCheckScheduler | None = None


def get_health_check_scheduler() -> HealthCheckScheduler:
    """Get or create the global health check scheduler instance."""
    global _scheduler
    if _scheduler is None:
        _scheduler = HealthCheckScheduler()
    return _scheduler


async def start_health_check_scheduler() -> None:
    """Start the global health check scheduler."""
    scheduler = get_health_check_scheduler()
    await scheduler.start()


async def stop_health_check_scheduler() -> None:
    """Stop the global health check scheduler."""
    scheduler = get_health_check_scheduler()
    await scheduler.stop()


async def run_health_check_scheduler(stop_event: asyncio.Event | None = None) -> None:
    """Run the global scheduler until ``stop_event`` is set or the task is cancelled."""
    stop_event = stop_event or asyncio.Event()
    await start_health_check_scheduler()
    try:
        await stop_event.wait()
    finally:
        await stop_health_check_scheduler()
