#!/usr/bin/env python3
"""Run database migrations using Alembic."""

import sys
from pathlib import Path

from alembic import command
from alembic.config import Config


def _alembic_config() -> Config:
    # Project root is two levels up from scripts/ops/
    project_root = Path(__file__).parent.parent.parent
    return Config(str(project_root / "alembic.ini"))


def run_migrations(exit_on_error=True):
    """Run all pending database migrations, then seed the package tiers.

    Args:
        exit_on_error: If True, exit the process on error. If False, raise exception.
    """
    alembic_cfg = _alembic_config()

    try:
        print("Running database migrations...")
        command.upgrade(alembic_cfg, "heads")
        print("✅ Database migrations completed successfully!")

        try:
            from src.core.database.database import seed_package_tiers

            inserted = seed_package_tiers()
            print(f"✅ Package tiers ready ({inserted} inserted)")
        except Exception as e:
            print(f"⚠️ Could not seed package tiers: {e}")
    except Exception as e:
        print(f"❌ Error running migrations: {e}")
        if exit_on_error:
            sys.exit(1)
        else:
            raise


def check_migration_status():
    """Check current migration status."""
    try:
        print("Checking migration status...")
        command.current(_alembic_config())
    except Exception as e:
        print(f"Error checking status: {e}")


if __name__ == "__main__":
    if len(sys.argv) > 1:
        if sys.argv[1] == "status":
            check_migration_status()
        elif sys.argv[1] == "upgrade":
            run_migrations()
        else:
            print(
                """Usage:
    python migrate.py               # Run all pending migrations
    python migrate.py upgrade       # Run all pending migrations
    python migrate.py status        # Check current migration status
            """
            )
    else:
        # Default action is to run migrations
        run_migrations()
