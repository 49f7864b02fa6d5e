#!/usr/bin/env python3
"""Operate the playlist campaign engine from the command line."""

import asyncio
import sys
from datetime import UTC, datetime, timedelta

from rich.console import Console
from rich.table import Table

from src.adapters import get_prober
from src.core.database.repositories import SqlCampaignStore, SqlResourceCatalogStore
from src.core.logging_config import setup_structured_logging
from src.core.schemas import CampaignStatus, HealthStatus
from src.core.stores import StoreError
from src.services.campaign_service import CampaignService
from src.services.health_check_scheduler import get_health_check_scheduler, run_health_check_scheduler
from src.services.health_monitor import HealthMonitor
from src.services.package_catalog import PackageTierCatalog
from src.services.utilization_report import build_utilization_report

console = Console()

STATUS_STYLES = {
    CampaignStatus.ACTION_NEEDED: "yellow",
    CampaignStatus.RUNNING: "green",
    CampaignStatus.REMOVAL_NEEDED: "red",
    CampaignStatus.COMPLETED: "dim",
}


def _health_style(status: HealthStatus) -> str:
    if status.is_healthy:
        return "green"
    if status == HealthStatus.UNKNOWN:
        return "dim"
    return "red"


def refresh_health(max_age_minutes: int | None, prober_type: str | None):
    """Probe stale playlists once and print the summary."""
    prober = get_prober(prober_type)
    try:
        monitor = HealthMonitor(SqlResourceCatalogStore(), prober)
        max_age = timedelta(minutes=max_age_minutes) if max_age_minutes is not None else None
        summary = monitor.refresh_stale(max_age=max_age)
    finally:
        prober.close()

    if not summary.checked:
        console.print("[green]All playlists have fresh health data.[/green]")
        return

    console.print(
        f"[cyan]Checked {summary.checked} playlist(s) via {prober.prober_name}:[/cyan] "
        f"[green]{summary.healthy} healthy[/green], [yellow]{summary.unhealthy} unhealthy[/yellow], "
        f"[red]{summary.failed} failed[/red]"
    )


def show_utilization():
    """Print occupancy and next available slot per playlist."""
    rows = build_utilization_report(SqlResourceCatalogStore(), SqlCampaignStore(), datetime.now(UTC))
    if not rows:
        console.print("[yellow]No active playlists found.[/yellow]")
        return

    table = Table(title="Playlist Utilization")
    table.add_column("Playlist", style="cyan")
    table.add_column("Genre", style="blue")
    table.add_column("Occupied", justify="right")
    table.add_column("Occupancy", justify="right")
    table.add_column("Health")
    table.add_column("Next Available", style="magenta")

    for row in rows:
        health = row.health_status
        table.add_row(
            row.name,
            row.genre,
            f"{row.occupied}/{row.capacity}",
            f"{row.occupancy_percent:.1f}%",
            f"[{_health_style(health)}]{health.value}[/{_health_style(health)}]",
            row.next_available.strftime("%b %d, %Y") if row.next_available else "Open",
        )

    console.print(table)


def assign_pending(service: CampaignService):
    """Allocate playlists to every open campaign that has none."""
    results = service.assign_all_pending()
    console.print(f"[green]✓ Assigned {results['assigned']} campaign(s)[/green]")
    if results["failed"]:
        console.print(f"[red]✗ {results['failed']} campaign(s) failed, see logs[/red]")


def show_overview(service: CampaignService, refresh: bool):
    """Print every campaign with its live status and progress."""
    now = datetime.now(UTC)
    if refresh:
        updated = service.refresh_statuses(now)
        console.print(f"[cyan]Refreshed {updated} stored status(es)[/cyan]")

    views = service.campaign_overview(now)
    if not views:
        console.print("[yellow]No campaigns found.[/yellow]")
        return

    table = Table(title="Campaigns")
    table.add_column("Campaign", style="cyan")
    table.add_column("Package")
    table.add_column("Genre", style="blue")
    table.add_column("Playlists", justify="right")
    table.add_column("Streams", justify="right")
    table.add_column("Status")
    table.add_column("Removal Date", style="magenta")

    for view in views:
        campaign = view.campaign
        style = STATUS_STYLES[view.status]
        table.add_row(
            campaign.id,
            campaign.package_tier or "-",
            campaign.genre.value,
            f"{len(campaign.real_assignments)}/{campaign.slots_needed}",
            f"{view.streams_accrued:,}/{campaign.target_volume:,} ({view.progress_percent:.1f}%)",
            f"[{style}]{view.status.value}[/{style}]",
            view.removal_date.isoformat() if view.removal_date else "-",
        )

    console.print(table)


def run_schedule(interval_seconds: float | None, prober_type: str | None):
    """Refresh stale playlist health on a fixed cadence until interrupted."""
    prober = get_prober(prober_type)
    scheduler = get_health_check_scheduler()
    scheduler.monitor = HealthMonitor(SqlResourceCatalogStore(), prober)
    if interval_seconds is not None:
        scheduler.interval_seconds = interval_seconds

    console.print(
        f"[cyan]Health checks every {scheduler.interval_seconds}s via {prober.prober_name} "
        f"(Ctrl+C to stop)[/cyan]"
    )
    try:
        asyncio.run(run_health_check_scheduler())
    except KeyboardInterrupt:
        console.print("[yellow]Health check scheduler stopped[/yellow]")
    finally:
        prober.close()


def build_service() -> CampaignService:
    return CampaignService(SqlCampaignStore(), SqlResourceCatalogStore(), PackageTierCatalog())


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Operate the playlist campaign engine")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Health command
    health_parser = subparsers.add_parser("health", help="Probe playlists with stale health data")
    health_parser.add_argument("--max-age-minutes", type=int, help="Staleness threshold (default from config)")
    health_parser.add_argument("--prober", choices=["spotify", "mock"], help="Prober to use")

    # Schedule command
    schedule_parser = subparsers.add_parser("schedule", help="Keep playlist health fresh in the background")
    schedule_parser.add_argument("--interval-seconds", type=float, help="Refresh cadence (default from config)")
    schedule_parser.add_argument("--prober", choices=["spotify", "mock"], help="Prober to use")

    # Utilization command
    subparsers.add_parser("utilization", help="Show playlist occupancy and next available slots")

    # Assign pending command
    subparsers.add_parser("assign-pending", help="Assign playlists to campaigns that have none")

    # Overview command
    overview_parser = subparsers.add_parser("overview", help="Show campaign status and progress")
    overview_parser.add_argument("--refresh", action="store_true", help="Also update stored statuses")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    setup_structured_logging()

    try:
        if args.command == "health":
            refresh_health(args.max_age_minutes, args.prober)
        elif args.command == "schedule":
            run_schedule(args.interval_seconds, args.prober)
        elif args.command == "utilization":
            show_utilization()
        elif args.command == "assign-pending":
            assign_pending(build_service())
        elif args.command == "overview":
            show_overview(build_service(), args.refresh)
    except StoreError as e:
        console.print(f"[red]Database error: {e}[/red]")
        sys.exit(2)


if __name__ == "__main__":
    main()
