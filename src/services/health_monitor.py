"""Playlist health monitor.

Probes stale playlists through a ``PlaylistHealthProber`` and records the
classified outcome on the catalog. A refresh is bounded in both batch size and
concurrency so it can run inline before an allocation:

- never-checked playlists first, then the oldest check first
- at most ``batch_size`` playlists per call
- probes run on a small thread pool with a fixed delay between submissions

A failing probe is recorded as ``error`` and never aborts the batch. Store
failures (reads or write-backs) propagate to the caller.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime, timedelta

from src.adapters.base import PlaylistHealthProber
from src.core.config import get_config
from src.core.schemas import HealthRefreshSummary, HealthStatus, ProbeResult, Resource
from src.core.stores import ResourceCatalogStore

logger = logging.getLogger(__name__)

_NEVER_CHECKED = datetime.min.replace(tzinfo=UTC)


def classify_probe(result: ProbeResult) -> HealthStatus:
    """Map a probe result onto a health status."""
    if result.is_removed:
        return HealthStatus.REMOVED
    if not result.is_reachable:
        return HealthStatus.ERROR
    if result.is_public is True:
        return HealthStatus.PUBLIC
    if result.is_public is False:
        return HealthStatus.PRIVATE
    return HealthStatus.ACTIVE


def _checked_at(resource: Resource) -> datetime:
    checked = resource.health_checked_at
    if checked is None:
        return _NEVER_CHECKED
    if checked.tzinfo is None:
        return checked.replace(tzinfo=UTC)
    return checked


class HealthMonitor:
    """Refreshes the health status of stale playlists."""

    def __init__(
        self,
        store: ResourceCatalogStore,
        prober: PlaylistHealthProber,
        batch_size: int | None = None,
        max_workers: int | None = None,
        probe_delay: float | None = None,
    ):
        engine_config = get_config().engine
        self.store = store
        self.prober = prober
        self.batch_size = batch_size if batch_size is not None else engine_config.health_batch_size
        self.max_workers = max_workers if max_workers is not None else engine_config.probe_max_workers
        self.probe_delay = probe_delay if probe_delay is not None else engine_config.probe_delay_seconds

    def select_stale(self, max_age: timedelta, now: datetime) -> list[Resource]:
        """Active playlists due for a probe, most overdue first, capped at the batch size."""
        cutoff = now - max_age
        stale = [r for r in self.store.list_active() if r.health_checked_at is None or _checked_at(r) < cutoff]
        stale.sort(key=lambda r: (_checked_at(r), r.id))
        return stale[: self.batch_size]

    def refresh_stale(self, max_age: timedelta | None = None, now: datetime | None = None) -> HealthRefreshSummary:
        """Probe stale playlists and write the results back.

        Args:
            max_age: Playlists checked longer ago than this are probed (default: configured max age)
            now: Reference time for staleness and the recorded check time

        Returns:
            Counts of healthy, unhealthy and failed probes for this batch

        Raises:
            StoreError: If the catalog cannot be read or a result cannot be written
        """
        if max_age is None:
            max_age = timedelta(seconds=get_config().engine.health_max_age_seconds)
        if now is None:
            now = datetime.now(UTC)

        batch = self.select_stale(max_age, now)
        summary = HealthRefreshSummary()
        if not batch:
            return summary

        logger.info(f"Refreshing health for {len(batch)} playlist(s) via {self.prober.prober_name}")

        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="health_probe_") as executor:
            futures = []
            for index, resource in enumerate(batch):
                if index and self.probe_delay:
                    time.sleep(self.probe_delay)
                futures.append(executor.submit(self._probe_and_record, resource, now))

            for resource, future in zip(batch, futures, strict=True):
                status, failed = future.result()
                summary.checked += 1
                summary.resource_ids.append(resource.id)
                if failed:
                    summary.failed += 1
                elif status.is_healthy:
                    summary.healthy += 1
                else:
                    summary.unhealthy += 1

        logger.info(
            f"Health refresh complete: {summary.checked} checked, {summary.healthy} healthy, "
            f"{summary.unhealthy} unhealthy, {summary.failed} failed"
        )
        return summary

    def _probe_and_record(self, resource: Resource, checked_at: datetime) -> tuple[HealthStatus, bool]:
        """Probe one playlist and record the outcome. Returns (status, probe_failed)."""
        if not resource.reference:
            self.store.update_health(resource.id, HealthStatus.ERROR, checked_at, "No playlist link")
            return HealthStatus.ERROR, True

        try:
            result = self.prober.probe(resource.reference)
        except Exception as e:
            logger.warning(f"Health probe failed for playlist {resource.id}: {e}")
            self.store.update_health(resource.id, HealthStatus.ERROR, checked_at, str(e))
            return HealthStatus.ERROR, True

        status = classify_probe(result)
        self.store.update_health(resource.id, status, checked_at, result.error_message)
        if result.occupancy_count is not None:
            self.store.update_utilization(resource.id, result.occupancy_count)

        if status != resource.health_status:
            logger.info(
                f"Playlist {resource.id} ({resource.name}) health: {resource.health_status.value} -> {status.value}"
            )
        return status, status == HealthStatus.ERROR
