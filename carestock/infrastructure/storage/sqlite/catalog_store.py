"""SQLite implementation of the item catalog and subject registry."""

from datetime import datetime

import aiosqlite

from carestock.config import get_logger
from carestock.core.entities.catalog import Item, SubjectInfo
from carestock.core.interfaces.stores import ICatalogStore
from carestock.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


class SQLiteCatalogStore(ICatalogStore):
    """SQLite storage for catalog items and subjects."""

    async def upsert_item(self, item: Item) -> Item:
        """Create a catalog item or update an existing one in place."""
        item = item.model_copy(update={"updated_at": datetime.utcnow()})
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO items (
                    id, name, category, unit, minimum_threshold, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    category = excluded.category,
                    unit = excluded.unit,
                    minimum_threshold = excluded.minimum_threshold,
                    updated_at = excluded.updated_at
                """,
                (
                    item.id,
                    item.name,
                    item.category,
                    item.unit,
                    item.minimum_threshold,
                    item.created_at.isoformat(),
                    item.updated_at.isoformat(),
                ),
            )
        logger.info("catalog_item_saved", item_id=item.id, name=item.name)
        return item

    async def get_item(self, item_id: str) -> Item | None:
        """Get catalog item by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM items WHERE id = ?", (item_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_item(row)

    async def list_items(self, category: str | None = None) -> list[Item]:
        """List catalog items ordered by name."""
        async with get_connection() as conn:
            if category is None:
                cursor = await conn.execute("SELECT * FROM items ORDER BY name, id")
            else:
                cursor = await conn.execute(
                    "SELECT * FROM items WHERE category = ? ORDER BY name, id",
                    (category,),
                )
            rows = await cursor.fetchall()
            return [self._row_to_item(row) for row in rows]

    async def upsert_subject(self, subject: SubjectInfo) -> SubjectInfo:
        """Create a subject or update an existing one in place."""
        async with get_transaction() as conn:
            await conn.execute(
                """
                INSERT INTO subjects (id, display_name, is_active)
                VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    display_name = excluded.display_name,
                    is_active = excluded.is_active
                """,
                (subject.id, subject.display_name, int(subject.is_active)),
            )
        logger.info("subject_saved", subject_id=subject.id)
        return subject

    async def get_subject(self, subject_id: str) -> SubjectInfo | None:
        """Get subject by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM subjects WHERE id = ?", (subject_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_subject(row)

    async def list_subjects(self, active_only: bool = False) -> list[SubjectInfo]:
        """List subjects ordered by display name."""
        query = "SELECT * FROM subjects"
        if active_only:
            query += " WHERE is_active = 1"
        query += " ORDER BY display_name, id"
        async with get_connection() as conn:
            cursor = await conn.execute(query)
            rows = await cursor.fetchall()
            return [self._row_to_subject(row) for row in rows]

    @staticmethod
    def _row_to_item(row: aiosqlite.Row) -> Item:
        """Convert a database row to an Item entity."""
        created_at = datetime.utcnow()
        if row["created_at"]:
            try:
                created_at = datetime.fromisoformat(row["created_at"])
            except (ValueError, TypeError):
                pass

        updated_at = created_at
        if row["updated_at"]:
            try:
                updated_at = datetime.fromisoformat(row["updated_at"])
            except (ValueError, TypeError):
                pass

        return Item(
            id=row["id"],
            name=row["name"],
            category=row["category"] or "",
            unit=row["unit"] or "unit",
            minimum_threshold=int(row["minimum_threshold"]),
            created_at=created_at,
            updated_at=updated_at,
        )

    @staticmethod
    def _row_to_subject(row: aiosqlite.Row) -> SubjectInfo:
        """Convert a database row to a SubjectInfo entity."""
        return SubjectInfo(
            id=row["id"],
            display_name=row["display_name"],
            is_active=bool(row["is_active"]),
        )
