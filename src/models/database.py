"""
Database - Schema-driven SQLite persistence.

Tables are created from TableSchema definitions. Every query runs on a
worker thread so callers can await it.
"""

import asyncio
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Iterable, Optional

from .profile import PROFILE_SCHEMA, TableSchema

logger = logging.getLogger(__name__)

_SQL_TYPES = {
    "int": "INTEGER",
    "string": "TEXT",
}


def create_table_statement(schema: TableSchema) -> str:
    """CREATE TABLE statement for a schema."""
    columns = []
    for name, kind in schema.properties.items():
        if kind not in _SQL_TYPES:
            raise ValueError(f"Unsupported property type {kind!r} for {schema.name}.{name}")
        column = f'"{name}" {_SQL_TYPES[kind]}'
        if name == schema.primary_key:
            column += " PRIMARY KEY"
        else:
            column += " NOT NULL"
        columns.append(column)
    return f'CREATE TABLE IF NOT EXISTS "{schema.name}" ({", ".join(columns)})'


class Database:
    """
    SQLite database holding the schema's tables.

    Usage:
        db = Database(get_database_path())
        row_id = await db.insert("Profile", {"pseudo": "...", ...})
        rows = await db.select("Profile", limit=1)
    """

    def __init__(self, path: str | Path = ":memory:",
                 schemata: Iterable[TableSchema] = (PROFILE_SCHEMA,)):
        self.path = str(path)
        self._schemata = {schema.name: schema for schema in schemata}
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self.path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        with self._conn:
            for schema in self._schemata.values():
                self._conn.execute(create_table_statement(schema))

    def _schema(self, table: str) -> TableSchema:
        try:
            return self._schemata[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None

    def _columns(self, table: str, values: dict) -> list[str]:
        schema = self._schema(table)
        unknown = set(values) - set(schema.properties)
        if unknown:
            raise ValueError(f"Unknown columns for {table}: {sorted(unknown)}")
        return list(values)

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        with self._lock, self._conn:
            return self._conn.execute(sql, params)

    def _fetch(self, sql: str, params: tuple = ()) -> list[dict]:
        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
        return [dict(row) for row in rows]

    def _insert(self, table: str, values: dict) -> int:
        columns = self._columns(table, values)
        placeholders = ", ".join("?" for _ in columns)
        names = ", ".join(f'"{c}"' for c in columns)
        cursor = self._execute(
            f'INSERT INTO "{table}" ({names}) VALUES ({placeholders})',
            tuple(values[c] for c in columns),
        )
        return cursor.lastrowid

    def _update(self, table: str, row_id: int, values: dict) -> int:
        schema = self._schema(table)
        columns = [c for c in self._columns(table, values) if c != schema.primary_key]
        assignments = ", ".join(f'"{c}" = ?' for c in columns)
        cursor = self._execute(
            f'UPDATE "{table}" SET {assignments} WHERE "{schema.primary_key}" = ?',
            tuple(values[c] for c in columns) + (row_id,),
        )
        return cursor.rowcount

    def _select(self, table: str, limit: Optional[int]) -> list[dict]:
        schema = self._schema(table)
        sql = f'SELECT * FROM "{table}" ORDER BY "{schema.primary_key}"'
        if limit is not None:
            return self._fetch(sql + " LIMIT ?", (limit,))
        return self._fetch(sql)

    def _count(self, table: str) -> int:
        self._schema(table)
        rows = self._fetch(f'SELECT COUNT(*) AS n FROM "{table}"')
        return rows[0]["n"]

    async def insert(self, table: str, values: dict) -> int:
        """Insert a row and return its primary key."""
        return await asyncio.to_thread(self._insert, table, values)

    async def update(self, table: str, row_id: int, values: dict) -> int:
        """Update a row by primary key. Returns the number of rows changed."""
        return await asyncio.to_thread(self._update, table, row_id, values)

    async def select(self, table: str, limit: Optional[int] = None) -> list[dict]:
        """All rows of a table ordered by primary key."""
        return await asyncio.to_thread(self._select, table, limit)

    async def count(self, table: str) -> int:
        return await asyncio.to_thread(self._count, table)

    def close(self) -> None:
        with self._lock:
            self._conn.close()
        logger.debug(f"Closed database {self.path}")
