"""Tests for the background health check scheduler."""

import asyncio
from unittest.mock import MagicMock

import pytest

from src.core.schemas import HealthRefreshSummary
from src.services import health_check_scheduler as module
from src.services.health_check_scheduler import HealthCheckScheduler


@pytest.fixture
def monitor():
    monitor = MagicMock()
    monitor.refresh_stale.return_value = HealthRefreshSummary(checked=2, healthy=2, resource_ids=["a", "b"])
    return monitor


@pytest.mark.asyncio
async def test_run_once_refreshes(monitor):
    scheduler = HealthCheckScheduler(monitor=monitor, interval_seconds=60)

    await scheduler.run_once()

    monitor.refresh_stale.assert_called_once_with()


@pytest.mark.asyncio
async def test_start_runs_on_cadence_and_stop_cancels(monitor):
    scheduler = HealthCheckScheduler(monitor=monitor, interval_seconds=0.01)

    await scheduler.start()
    assert scheduler.is_running
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert not scheduler.is_running
    assert monitor.refresh_stale.call_count >= 2
    calls = monitor.refresh_stale.call_count
    await asyncio.sleep(0.05)
    assert monitor.refresh_stale.call_count == calls


@pytest.mark.asyncio
async def test_errors_do_not_stop_the_loop(monitor):
    monitor.refresh_stale.side_effect = [RuntimeError("db down"), HealthRefreshSummary()] + [
        HealthRefreshSummary()
    ] * 50
    scheduler = HealthCheckScheduler(monitor=monitor, interval_seconds=0.01)

    await scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert monitor.refresh_stale.call_count >= 2


@pytest.mark.asyncio
async def test_double_start_is_ignored(monitor):
    scheduler = HealthCheckScheduler(monitor=monitor, interval_seconds=60)

    await scheduler.start()
    first_task = scheduler._task
    await scheduler.start()

    assert scheduler._task is first_task
    await scheduler.stop()


@pytest.mark.asyncio
async def test_stop_when_not_running_is_noop(monitor):
    scheduler = HealthCheckScheduler(monitor=monitor, interval_seconds=60)

    await scheduler.stop()

    assert not scheduler.is_running


def test_interval_defaults_to_config(monkeypatch):
    from src.core.config import reset_config

    monkeypatch.setenv("PLAYLIST_ENGINE_HEALTH_CHECK_INTERVAL_SECONDS", "120")
    reset_config()

    assert HealthCheckScheduler(monitor=MagicMock()).interval_seconds == 120


def test_global_scheduler_is_singleton(monkeypatch):
    monkeypatch.setattr(module, "_scheduler", None)

    assert module.get_health_check_scheduler() is module.get_health_check_scheduler()


@pytest.mark.asyncio
async def test_run_until_stopped(monkeypatch, monitor):
    scheduler = HealthCheckScheduler(monitor=monitor, interval_seconds=0.01)
    monkeypatch.setattr(module, "_scheduler", scheduler)
    stop_event = asyncio.Event()

    runner = asyncio.create_task(module.run_health_check_scheduler(stop_event))
    await asyncio.sleep(0.05)
    assert scheduler.is_running
    stop_event.set()
    await runner

    assert not scheduler.is_running
    assert monitor.refresh_stale.call_count >= 1


def test_schedule_command_runs_loop_with_configured_prober(mocker):
    from scripts.ops import playlist_engine

    prober = MagicMock(prober_name="mock")
    mocker.patch.object(playlist_engine, "get_prober", return_value=prober)
    mocker.patch.object(playlist_engine, "SqlResourceCatalogStore")
    scheduler = HealthCheckScheduler(monitor=MagicMock(), interval_seconds=60)
    mocker.patch.object(playlist_engine, "get_health_check_scheduler", return_value=scheduler)
    mocker.patch.object(playlist_engine, "run_health_check_scheduler", side_effect=KeyboardInterrupt)

    playlist_engine.run_schedule(5.0, "mock")

    assert scheduler.interval_seconds == 5.0
    assert scheduler.monitor.prober is prober
    prober.close.assert_called_once_with()
