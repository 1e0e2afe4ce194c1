"""
Collection Migration Runner

Runs the migrations listed in migrations.registry in order and tracks the
executed ones in the _migrations ledger of the target database.

Usage:
    python -m migrations.runner migrate      # Run pending migrations
    python -m migrations.runner status       # Show migration status
    python -m migrations.runner rollback     # Downgrade the latest executed migration
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from valueboard.core.config import STORAGE_BACKENDS, get_settings
from valueboard.core.exceptions import MigrationError, PersistenceError, ValueboardError
from valueboard.core.logging import LogContext, get_logger
from valueboard.repositories.base import CollectionDao
from valueboard.repositories.factory import create_dao

from migrations.registry import MIGRATIONS, Migration

logger = get_logger("valueboard.migrations.runner")


class MigrationRunner:
    """Applies registered migrations against one DAO."""

    def __init__(self, dao: CollectionDao, migrations: Sequence[Migration]) -> None:
        ids = [migration.id for migration in migrations]
        if len(ids) != len(set(ids)):
            raise ValueError("Migration ids must be unique")

        self.dao = dao
        self.migrations = list(migrations)

    def status(self) -> list[tuple[str, bool]]:
        """(migration id, executed) for every registered migration, in order."""
        executed = self._executed()
        return [(migration.id, migration.id in executed) for migration in self.migrations]

    def pending(self) -> list[Migration]:
        executed = self._executed()
        return [migration for migration in self.migrations if migration.id not in executed]

    def migrate(self) -> list[str]:
        """
        Run all pending migrations in order.

        Stops at the first failure; the failed migration stays pending.

        Returns:
            Ids of the migrations that were applied

        Raises:
            MigrationError: if a migration fails
        """
        applied: list[str] = []
        for migration in self.pending():
            self._run(migration, migration.upgrade, "upgrade")
            self._record(migration, self.dao.mark_migration_executed)
            applied.append(migration.id)
        return applied

    def rollback(self) -> Optional[str]:
        """
        Downgrade the most recently registered migration that has been executed.

        Returns:
            Id of the rolled back migration, or None if nothing was executed
        """
        executed = self._executed()
        for migration in reversed(self.migrations):
            if migration.id in executed:
                self._run(migration, migration.downgrade, "downgrade")
                self._record(migration, self.dao.unmark_migration)
                return migration.id
        return None

    def _executed(self) -> dict[str, str]:
        try:
            return self.dao.executed_migrations()
        except PersistenceError as exc:
            raise MigrationError(
                f"Cannot list executed migrations: {exc.message}", details=exc.details
            ) from exc

    def _record(self, migration: Migration, ledger_update) -> None:
        # The step has already run at this point; only its ledger entry failed
        try:
            ledger_update(migration.id)
        except PersistenceError as exc:
            raise MigrationError(
                f"{migration.id} ledger update failed: {exc.message}",
                details={**exc.details, "migration_id": migration.id},
            ) from exc

    def _run(self, migration: Migration, step, direction: str) -> None:
        with LogContext(logger, f"{direction} {migration.id}", migration_id=migration.id):
            try:
                step(self.dao)
            except MigrationError:
                raise
            except ValueboardError as exc:
                raise MigrationError(
                    f"{migration.id} {direction} failed: {exc.message}",
                    details={"migration_id": migration.id, **exc.details},
                ) from exc


def cmd_migrate(runner: MigrationRunner) -> int:
    """Run all pending migrations."""
    try:
        pending = runner.pending()

        if not pending:
            print("No pending migrations.")
            return 0

        print(f"Found {len(pending)} pending migration(s):\n")
        for migration in pending:
            print(f"  {migration.id}")

        applied = runner.migrate()
    except MigrationError as exc:
        print(f"\n  ✗ Error: {exc.message}")
        print("\nStopping due to error.")
        return 1

    print(f"\nCompleted {len(applied)}/{len(pending)} migrations.")
    return 0


def cmd_status(runner: MigrationRunner) -> int:
    """Show migration status."""
    try:
        statuses = runner.status()
    except MigrationError as exc:
        print(f"  ✗ Error: {exc.message}")
        return 1

    if not statuses:
        print("No migrations found.")
        return 0

    print("Migration Status:\n")
    for migration_id, executed in statuses:
        status = "✓ executed" if executed else "○ pending"
        print(f"  {status}  {migration_id}")
    return 0


def cmd_rollback(runner: MigrationRunner) -> int:
    """Downgrade the latest executed migration."""
    try:
        migration_id = runner.rollback()
    except MigrationError as exc:
        print(f"  ✗ Error: {exc.message}")
        return 1

    if migration_id is None:
        print("No executed migrations to roll back.")
    else:
        print(f"  ✓ Rolled back: {migration_id}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Collection Migration Runner")
    parser.add_argument(
        "--backend",
        choices=STORAGE_BACKENDS,
        help="Storage backend (defaults to STORAGE_BACKEND)",
    )
    parser.add_argument("--data-dir", type=Path, help="Data directory for the local backend")

    subparsers = parser.add_subparsers(dest="command", help="Commands")
    subparsers.add_parser("migrate", help="Run pending migrations")
    subparsers.add_parser("status", help="Show migration status")
    subparsers.add_parser("rollback", help="Downgrade the latest executed migration")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    commands = {
        "migrate": cmd_migrate,
        "status": cmd_status,
        "rollback": cmd_rollback,
    }
    if args.command not in commands:
        parser.print_help()
        return 2

    settings = get_settings()
    if args.backend:
        settings = replace(settings, storage_backend=args.backend)
    if args.data_dir:
        settings = replace(settings, data_dir=args.data_dir)

    runner = MigrationRunner(create_dao(settings), MIGRATIONS)
    return commands[args.command](runner)


if __name__ == "__main__":
    sys.exit(main())
