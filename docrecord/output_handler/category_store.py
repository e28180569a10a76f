"""
Category Store Module.

SQLite-backed storage for owner categories. A UNIQUE(owner_id, slug)
constraint with ON CONFLICT IGNORE gives create-or-fetch semantics: two
jobs that infer the same new slug at the same time both insert, one
insert is ignored, and both read back the same row.

Author: ML Engineering Team
"""

import json
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from config import get_config
from docrecord.classification.category import Category, default_category_specs, name_for_slug
from docrecord.utils.exceptions import StorageError, ValidationError
from docrecord.utils.helpers import ensure_directory, slugify
from docrecord.utils.logger import get_logger

logger = get_logger(__name__)


class CategoryStore:
    """
    Persists categories per owner.

    Connections are opened per operation, so one store may be shared by
    worker threads.

    Attributes:
        db_path: Path to the SQLite database file
        table_name: Name of the categories table

    Example:
        >>> store = CategoryStore("data/categories.db")
        >>> category = store.create_or_get("owner-1", "home-garden")
        >>> category.name
        "Home Garden"
    """

    def __init__(self, db_path: Optional[str] = None, table_name: str = "categories") -> None:
        """
        Initialize the store and create the table if needed.

        Args:
            db_path: Path to database file. If None, uses paths.category_db.
        """
        self.db_path = Path(db_path or get_config("paths.category_db", "data/categories.db"))
        self.table_name = table_name
        ensure_directory(self.db_path.parent)
        self._create_tables()
        logger.info(f"CategoryStore initialized (db: {self.db_path})")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=30)
        conn.row_factory = sqlite3.Row
        return conn

    def _create_tables(self) -> None:
        create_sql = f"""
        CREATE TABLE IF NOT EXISTS {self.table_name} (
            id TEXT PRIMARY KEY,
            owner_id TEXT NOT NULL,
            name TEXT NOT NULL,
            slug TEXT NOT NULL,
            is_default INTEGER NOT NULL DEFAULT 0,
            field_priorities TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL,
            UNIQUE(owner_id, slug) ON CONFLICT IGNORE
        )
        """
        try:
            conn = self._connect()
            try:
                conn.execute(create_sql)
                conn.execute(f"""
                    CREATE INDEX IF NOT EXISTS idx_{self.table_name}_owner
                    ON {self.table_name} (owner_id)
                """)
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError("create tables", str(e))

    @staticmethod
    def _row_to_category(row: sqlite3.Row) -> Category:
        return Category(
            id=row['id'],
            owner_id=row['owner_id'],
            name=row['name'],
            slug=row['slug'],
            is_default=bool(row['is_default']),
            field_priorities=json.loads(row['field_priorities'] or '[]'),
        )

    def get_by_slug(self, owner_id: str, slug: str) -> Optional[Category]:
        """
        Look up an owner's category by slug.

        Returns:
            The category, or None if the owner has no such slug.
        """
        query = f"SELECT * FROM {self.table_name} WHERE owner_id = ? AND slug = ?"
        try:
            conn = self._connect()
            try:
                row = conn.execute(query, (owner_id, slug)).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError("get category", str(e))
        return self._row_to_category(row) if row else None

    def list_categories(self, owner_id: str) -> List[Category]:
        """All categories of an owner, oldest first."""
        query = f"SELECT * FROM {self.table_name} WHERE owner_id = ? ORDER BY created_at, rowid"
        try:
            conn = self._connect()
            try:
                rows = conn.execute(query, (owner_id,)).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError("list categories", str(e))
        return [self._row_to_category(row) for row in rows]

    def create_or_get(
        self,
        owner_id: str,
        slug: str,
        name: Optional[str] = None,
        field_priorities: Optional[Sequence[str]] = None,
        is_default: bool = False,
    ) -> Category:
        """
        Create a category unless the owner already has the slug.

        A duplicate insert is silently ignored by the unique constraint
        and the existing row is returned instead.

        Args:
            owner_id: Owner of the category.
            slug: Category slug; normalized before use.
            name: Display name. Derived from the slug when omitted.
            field_priorities: Field ranking for the category.
            is_default: Whether this is a seeded default.

        Returns:
            The stored category for (owner_id, slug).

        Raises:
            ValidationError: If the slug normalizes to nothing.
            StorageError: If the database operation fails.
        """
        normalized = slugify(slug)
        if not normalized:
            raise ValidationError("Category slug is empty", {"slug": slug})

        insert_sql = f"""
        INSERT INTO {self.table_name} (id, owner_id, name, slug, is_default, field_priorities, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        """
        values = (
            str(uuid.uuid4()),
            owner_id,
            name_for_slug(normalized, name),
            normalized,
            1 if is_default else 0,
            json.dumps(list(field_priorities or [])),
            datetime.now().isoformat(),
        )
        try:
            conn = self._connect()
            try:
                cursor = conn.execute(insert_sql, values)
                conn.commit()
                created = cursor.rowcount == 1
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StorageError("create category", str(e))

        if created:
            logger.info(f"Created category '{normalized}' for owner {owner_id}")
        category = self.get_by_slug(owner_id, normalized)
        if category is None:
            raise StorageError("create category", f"category '{normalized}' missing after insert")
        return category

    def resolve(self, owner_id: str, slug: str, fallback_name: Optional[str] = None) -> Category:
        """
        Look up a category by slug, creating it only when absent.

        Args:
            owner_id: Owner of the category.
            slug: Category slug.
            fallback_name: Name used if the category has to be created.

        Returns:
            The owner's category for the slug.
        """
        existing = self.get_by_slug(owner_id, slugify(slug))
        if existing:
            return existing
        return self.create_or_get(owner_id, slug, fallback_name)

    def ensure_default_categories(self, owner_id: str) -> List[Category]:
        """
        Seed the default categories for an owner who has none.

        Returns:
            The owner's categories after seeding.
        """
        existing = self.list_categories(owner_id)
        if existing:
            return existing

        for spec in default_category_specs():
            self.create_or_get(
                owner_id,
                spec['slug'],
                name=spec['name'],
                field_priorities=spec['field_priorities'],
                is_default=True,
            )
        logger.info(f"Seeded default categories for owner {owner_id}")
        return self.list_categories(owner_id)
