"""SQLite implementation of branch storage."""

from datetime import datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.branch import Branch
from src.core.exceptions import ValidationError
from src.core.interfaces.branch_store import IBranchStore
from src.infrastructure.storage.sqlite.base import SQLiteStore
from src.infrastructure.storage.sqlite.connection import parse_timestamp

logger = get_logger(__name__)


class SQLiteBranchStore(SQLiteStore, IBranchStore):
    """SQLite implementation of branch storage."""

    async def create_branch(self, branch: Branch) -> Branch:
        """Create a new branch; IDs are caller-chosen and must be unique."""
        now = datetime.utcnow()
        branch.created_at = now
        branch.updated_at = now
        async with self._writing() as conn:
            try:
                await conn.execute(
                    """
                    INSERT INTO branches (
                        id, name, branch_type, address, is_active,
                        created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        branch.id,
                        branch.name,
                        branch.branch_type,
                        branch.address,
                        1 if branch.is_active else 0,
                        branch.created_at.isoformat(),
                        branch.updated_at.isoformat(),
                    ),
                )
            except aiosqlite.IntegrityError as e:
                raise ValidationError("id", "Branch already exists", branch.id) from e
        logger.info("branch_created", branch_id=branch.id, name=branch.name)
        return branch

    async def get_branch(self, branch_id: str) -> Branch | None:
        """Get branch by ID."""
        async with self._reading() as conn:
            cursor = await conn.execute(
                "SELECT * FROM branches WHERE id = ?", (branch_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_branch(row)

    async def list_branches(self, include_inactive: bool = False) -> list[Branch]:
        """List branches ordered by name."""
        query = "SELECT * FROM branches"
        if not include_inactive:
            query += " WHERE is_active = 1"
        query += " ORDER BY name, id"
        async with self._reading() as conn:
            cursor = await conn.execute(query)
            rows = await cursor.fetchall()
            return [self._row_to_branch(row) for row in rows]

    @staticmethod
    def _row_to_branch(row: aiosqlite.Row) -> Branch:
        return Branch(
            id=row["id"],
            name=row["name"],
            branch_type=row["branch_type"],
            address=row["address"],
            is_active=bool(row["is_active"]),
            created_at=parse_timestamp(row["created_at"]) or datetime.utcnow(),
            updated_at=parse_timestamp(row["updated_at"]) or datetime.utcnow(),
        )
