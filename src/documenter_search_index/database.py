"""SQLite storage for imported documentation search indexes."""

import logging
import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from documenter_search_index.errors import BuildNotFoundError
from documenter_search_index.models import BuildInfo, DocumentEntry, SearchIndex, StoredEntry
from documenter_search_index.parser import EntryTextParser

logger = logging.getLogger(__name__)


class SearchIndexDatabase:
    """Stores the search index of each documentation build."""

    def __init__(self, db_path: Path) -> None:
        """Initialise database with the given path.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self.text_parser = EntryTextParser()
        self._initialise_schema()

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections.

        Yields:
            SQLite connection with Row factory enabled.
        """
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        finally:
            conn.close()

    def _initialise_schema(self) -> None:
        """Create database schema if it doesn't exist."""
        with self._get_connection() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS builds (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT UNIQUE NOT NULL,
                    source TEXT,
                    variable TEXT,
                    imported_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                );

                CREATE TABLE IF NOT EXISTS entries (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    build_id INTEGER NOT NULL REFERENCES builds(id) ON DELETE CASCADE,
                    position INTEGER NOT NULL,
                    location TEXT NOT NULL,
                    page TEXT NOT NULL,
                    title TEXT NOT NULL,
                    text TEXT NOT NULL,
                    category TEXT NOT NULL,
                    signature TEXT,
                    summary TEXT,
                    UNIQUE (build_id, position)
                );

                CREATE INDEX IF NOT EXISTS idx_entries_location ON entries(build_id, location);
                CREATE INDEX IF NOT EXISTS idx_entries_page ON entries(build_id, page);
                CREATE INDEX IF NOT EXISTS idx_entries_category ON entries(build_id, category);
            """)
            conn.commit()

    def replace_build(self, name: str, index: SearchIndex, source: str | None = None) -> int:
        """Store a build's index, replacing any previous import of it.

        Args:
            name: Build name, e.g. ``stable`` or ``previews/PR35``.
            index: Search index of the build.
            source: Where the index was read from.

        Returns:
            Number of entries stored.
        """
        rows = []
        for position, entry in enumerate(index.docs):
            summary = self.text_parser.parse(entry)
            rows.append(
                (
                    position,
                    entry.location,
                    entry.page,
                    entry.title,
                    entry.text,
                    entry.category,
                    summary.signature,
                    summary.description,
                )
            )

        with self._get_connection() as conn:
            conn.execute("DELETE FROM builds WHERE name = ?", (name,))
            cursor = conn.execute(
                "INSERT INTO builds (name, source, variable) VALUES (?, ?, ?)",
                (name, source, index.variable),
            )
            build_id = cursor.lastrowid
            conn.executemany(
                """
                INSERT INTO entries
                    (build_id, position, location, page, title, text, category, signature, summary)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [(build_id, *row) for row in rows],
            )
            conn.commit()

        logger.debug("Stored %d entries for build %s", len(rows), name)
        return len(rows)

    def get_build(self, name: str) -> BuildInfo | None:
        """Retrieve a build by name.

        Args:
            name: Build name.

        Returns:
            BuildInfo instance or None if not found.
        """
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT b.name, b.source, b.variable, b.imported_at, COUNT(e.id) AS entry_count
                FROM builds b
                LEFT JOIN entries e ON e.build_id = b.id
                WHERE b.name = ?
                GROUP BY b.id
                """,
                (name,),
            )
            row = cursor.fetchone()
            if row:
                return self._row_to_build(row)
            return None

    def list_builds(self) -> list[BuildInfo]:
        """Return all stored builds ordered by name."""
        with self._get_connection() as conn:
            cursor = conn.execute("""
                SELECT b.name, b.source, b.variable, b.imported_at, COUNT(e.id) AS entry_count
                FROM builds b
                LEFT JOIN entries e ON e.build_id = b.id
                GROUP BY b.id
                ORDER BY b.name
            """)
            return [self._row_to_build(row) for row in cursor.fetchall()]

    def get_index(self, name: str) -> SearchIndex | None:
        """Rebuild the search index of a build in its original order.

        Args:
            name: Build name.

        Returns:
            SearchIndex instance or None if the build is not stored.
        """
        build = self.get_build(name)
        if build is None:
            return None
        entries = self.get_entries(name)
        return SearchIndex(docs=[stored.entry for stored in entries], variable=build.variable)

    def get_entries(
        self,
        name: str,
        location: str | None = None,
        page: str | None = None,
        category: str | None = None,
        limit: int | None = None,
    ) -> list[StoredEntry]:
        """Retrieve the entries of a build with optional exact-match filters.

        Args:
            name: Build name.
            location: Optional location filter.
            page: Optional page title filter.
            category: Optional category filter.
            limit: Maximum number of entries.

        Returns:
            List of StoredEntry instances in index order.
        """
        sql = """
            SELECT e.*, b.name AS build
            FROM entries e
            JOIN builds b ON e.build_id = b.id
            WHERE b.name = ?
        """
        params: list[str | int] = [name]

        for column, value in (("location", location), ("page", page), ("category", category)):
            if value is not None:
                sql += f" AND e.{column} = ?"
                params.append(value)

        sql += " ORDER BY e.position"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        with self._get_connection() as conn:
            cursor = conn.execute(sql, params)
            return [self._row_to_entry(row) for row in cursor.fetchall()]

    def list_pages(self, name: str) -> list[str]:
        """Return the page titles of a build in first-appearance order.

        Args:
            name: Build name.

        Returns:
            Distinct page titles.

        Raises:
            BuildNotFoundError: If the build is not stored.
        """
        self._require_build(name)
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT e.page, MIN(e.position) AS first_position
                FROM entries e
                JOIN builds b ON e.build_id = b.id
                WHERE b.name = ?
                GROUP BY e.page
                ORDER BY first_position
                """,
                (name,),
            )
            return [row["page"] for row in cursor.fetchall()]

    def category_counts(self, name: str) -> dict[str, int]:
        """Count the entries of a build per category.

        Args:
            name: Build name.

        Returns:
            Mapping of category to entry count, ordered by category.

        Raises:
            BuildNotFoundError: If the build is not stored.
        """
        self._require_build(name)
        with self._get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT e.category, COUNT(*) AS total
                FROM entries e
                JOIN builds b ON e.build_id = b.id
                WHERE b.name = ?
                GROUP BY e.category
                ORDER BY e.category
                """,
                (name,),
            )
            return {row["category"]: int(row["total"]) for row in cursor.fetchall()}

    def delete_build(self, name: str) -> bool:
        """Delete a build and its entries.

        Args:
            name: Build name.

        Returns:
            True if a build was deleted.
        """
        with self._get_connection() as conn:
            cursor = conn.execute("DELETE FROM builds WHERE name = ?", (name,))
            conn.commit()
            return cursor.rowcount > 0

    def clear(self) -> None:
        """Clear all builds from the database."""
        with self._get_connection() as conn:
            conn.execute("DELETE FROM builds")
            conn.commit()

    def get_entry_count(self, name: str | None = None) -> int:
        """Return the number of stored entries.

        Args:
            name: Optional build name to count within.

        Returns:
            Count of entries, across all builds when no name is given.
        """
        with self._get_connection() as conn:
            if name is None:
                cursor = conn.execute("SELECT COUNT(*) FROM entries")
            else:
                cursor = conn.execute(
                    "SELECT COUNT(*) FROM entries e JOIN builds b ON e.build_id = b.id WHERE b.name = ?",
                    (name,),
                )
            result = cursor.fetchone()
            return int(result[0]) if result else 0

    def _require_build(self, name: str) -> None:
        with self._get_connection() as conn:
            row = conn.execute("SELECT 1 FROM builds WHERE name = ?", (name,)).fetchone()
        if row is None:
            raise BuildNotFoundError(name)

    @staticmethod
    def _row_to_build(row: sqlite3.Row) -> BuildInfo:
        return BuildInfo(
            name=row["name"],
            source=row["source"],
            variable=row["variable"],
            entry_count=int(row["entry_count"]),
            imported_at=row["imported_at"],
        )

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> StoredEntry:
        return StoredEntry(
            build=row["build"],
            position=row["position"],
            entry=DocumentEntry(
                location=row["location"],
                page=row["page"],
                title=row["title"],
                text=row["text"],
                category=row["category"],
            ),
            signature=row["signature"],
            summary=row["summary"],
        )
