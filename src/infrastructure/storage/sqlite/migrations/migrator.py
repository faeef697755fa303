"""
Database schema migrator with versioned migrations.

Migration files are named v<NNN>_<name>.sql and applied in version order.
Each one runs in its own transaction together with its schema_migrations
row, so a failing script leaves the database at the previous version.
An applied file whose checksum changed stops the run.
"""

import asyncio
import hashlib
import re
import time
from dataclasses import dataclass
from pathlib import Path

import aiosqlite

from src.config import get_logger, get_settings
from src.core.exceptions import ConfigurationError

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

REQUIRED_TABLES = [
    "branches",
    "stock_records",
    "stock_movements",
    "transfers",
    "transfer_items",
    "schema_migrations",
]


@dataclass
class MigrationInfo:
    """A migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        """Parse v<NNN>_<name>.sql."""
        match = re.match(r"v(\d+)_(.+)\.sql$", path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")

        content = path.read_text(encoding="utf-8")
        return cls(
            version=match.group(1),
            name=match.group(2),
            path=path,
            checksum=hashlib.sha256(content.encode()).hexdigest()[:16],
        )


@dataclass
class MigrationResult:
    """Result of applying one migration."""

    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Map applied version -> checksum."""
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
        return {row[0]: row[1] for row in await cursor.fetchall()}
    except aiosqlite.OperationalError:
        # Fresh database
        return {}


def discover_migrations() -> list[MigrationInfo]:
    """Discover all migration files in version order."""
    migrations = []
    for path in sorted(MIGRATIONS_DIR.glob("v*.sql")):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return migrations


def pending_migrations(
    migrations: list[MigrationInfo], applied: dict[str, str]
) -> list[MigrationInfo]:
    """
    Migrations not yet applied.

    Raises:
        ConfigurationError: An applied migration file was edited afterwards
    """
    pending = []
    for migration in migrations:
        checksum = applied.get(migration.version)
        if checksum is None:
            pending.append(migration)
        elif checksum != migration.checksum:
            raise ConfigurationError(
                f"Migration {migration.version} changed after it was applied",
                code="MIGRATION_CHECKSUM_MISMATCH",
                details={
                    "version": migration.version,
                    "applied_checksum": checksum,
                    "file_checksum": migration.checksum,
                },
            )
    return pending


async def apply_migration(
    conn: aiosqlite.Connection,
    migration: MigrationInfo,
) -> MigrationResult:
    """Apply a single migration and record it in the same transaction."""
    logger.info("applying_migration", version=migration.version, name=migration.name)
    start_time = time.time()

    script = migration.path.read_text(encoding="utf-8")
    try:
        await conn.executescript(f"BEGIN;\n{script}\n")
        await conn.execute(
            """
            INSERT INTO schema_migrations (version, name, checksum, execution_time_ms)
            VALUES (?, ?, ?, ?)
            """,
            (
                migration.version,
                migration.name,
                migration.checksum,
                int((time.time() - start_time) * 1000),
            ),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        if conn.in_transaction:
            await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=int((time.time() - start_time) * 1000),
            error=str(e),
        )

    execution_time = int((time.time() - start_time) * 1000)
    logger.info(
        "migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=execution_time,
    )
    return MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=execution_time,
    )


async def initialize_database(db_path: Path | None = None) -> list[MigrationResult]:
    """
    Apply all pending migrations, stopping at the first failure.

    Returns:
        Results for the migrations that were attempted
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    results: list[MigrationResult] = []
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")

        for migration in pending_migrations(
            discover_migrations(), await get_applied_migrations(conn)
        ):
            result = await apply_migration(conn, migration)
            results.append(result)
            if not result.success:
                break

    return results


run_migrations = initialize_database


async def get_migration_status(db_path: Path | None = None) -> dict:
    """Summarize applied and pending migrations."""
    db_path = db_path or get_settings().storage.db_path
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = sorted(await get_applied_migrations(conn))
    return {
        "exists": True,
        "current_version": applied[-1] if applied else None,
        "applied_migrations": applied,
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    Verify the database and the stock ledger.

    Besides SQLite's own checks this flags negative stock quantities and
    movements whose previous/new quantities do not balance.
    """
    db_path = db_path or get_settings().storage.db_path
    checks = []

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        fk_violations = await cursor.fetchall()
        checks.append({
            "check": "foreign_keys",
            "status": "PASS" if not fk_violations else "FAIL",
            "violations": len(fk_violations),
        })

        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = await cursor.fetchone()
        checks.append({
            "check": "integrity",
            "status": "PASS" if integrity[0] == "ok" else "FAIL",
            "result": integrity[0],
        })

        cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        existing_tables = {row[0] for row in await cursor.fetchall()}
        missing = [t for t in REQUIRED_TABLES if t not in existing_tables]
        checks.append({
            "check": "required_tables",
            "status": "PASS" if not missing else "FAIL",
            "missing": missing,
        })
        if missing:
            return checks

        cursor = await conn.execute("SELECT COUNT(*) FROM stock_records WHERE quantity < 0")
        negative = (await cursor.fetchone())[0]
        checks.append({
            "check": "non_negative_stock",
            "status": "PASS" if negative == 0 else "FAIL",
            "violations": negative,
        })

        cursor = await conn.execute(
            """
            SELECT COUNT(*) FROM stock_movements
            WHERE ABS(
                new_quantity - previous_quantity
                - CASE movement_type WHEN 'in' THEN quantity ELSE -quantity END
            ) > 1e-9
            """
        )
        unbalanced = (await cursor.fetchone())[0]
        checks.append({
            "check": "movement_balance",
            "status": "PASS" if unbalanced == 0 else "FAIL",
            "violations": unbalanced,
        })

    return checks


def main() -> None:
    """CLI entry point for database migration."""
    import argparse

    parser = argparse.ArgumentParser(description="Branch stock database migrator")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    parser.add_argument("--status", action="store_true", help="Show migration status")
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Verify schema and stock ledger integrity",
    )
    args = parser.parse_args()

    async def run():
        if args.status:
            status = await get_migration_status(args.db_path)
            print(f"Database exists: {status['exists']}")
            print(f"Current version: {status['current_version'] or 'N/A'}")
            print(f"Applied migrations: {status['applied_migrations']}")
            print(f"Pending migrations: {status['pending_migrations']}")

        elif args.verify:
            for check in await verify_schema_integrity(args.db_path):
                print(f"[{check['status']}] {check['check']}")
                if check["status"] != "PASS":
                    for key, value in check.items():
                        if key not in ("check", "status"):
                            print(f"       {key}: {value}")

        else:
            for result in await initialize_database(args.db_path):
                status = "SUCCESS" if result.success else "FAILED"
                print(f"[{status}] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
                if result.error:
                    print(f"         Error: {result.error}")

    asyncio.run(run())


if __name__ == "__main__":
    main()
