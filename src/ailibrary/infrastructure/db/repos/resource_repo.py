from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any, Mapping, Sequence

from ailibrary.core.errors import DatastoreError, ResourceNotFoundError
from ailibrary.domain.models.resource import RESOURCE_FIELDS, Resource
from ailibrary.infrastructure.db.sqlite import get_connection

_COLUMNS = ", ".join(RESOURCE_FIELDS)
_PLACEHOLDERS = ", ".join("?" for _ in RESOURCE_FIELDS)


class ResourceRepo:
    """SQLite-backed ``resources`` table for offline use."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def list_all(self) -> list[Resource]:
        try:
            with get_connection(self.db_path) as conn:
                rows = conn.execute(f"SELECT id, {_COLUMNS} FROM resources ORDER BY id ASC").fetchall()
        except sqlite3.Error as exc:
            raise DatastoreError(f"Failed to load resources: {exc}") from exc
        return [self._to_model(row) for row in rows]

    def insert_many(self, resources: Sequence[Resource]) -> list[Resource]:
        if not resources:
            return []
        inserted_ids: list[int] = []
        try:
            with get_connection(self.db_path) as conn:
                for resource in resources:
                    record = resource.to_record()
                    cursor = conn.execute(
                        f"INSERT INTO resources ({_COLUMNS}) VALUES ({_PLACEHOLDERS})",
                        tuple(record[name] for name in RESOURCE_FIELDS),
                    )
                    inserted_ids.append(int(cursor.lastrowid))
                conn.commit()
                rows = conn.execute(
                    f"SELECT id, {_COLUMNS} FROM resources WHERE id IN ({', '.join('?' for _ in inserted_ids)}) "
                    "ORDER BY id ASC",
                    inserted_ids,
                ).fetchall()
        except sqlite3.Error as exc:
            raise DatastoreError(f"Failed to insert {len(resources)} resources: {exc}") from exc
        return [self._to_model(row) for row in rows]

    def update(self, resource_id: int, fields: Mapping[str, Any]) -> Resource:
        columns = [name for name in RESOURCE_FIELDS if name in fields]
        try:
            with get_connection(self.db_path) as conn:
                if columns:
                    assignments = ", ".join(f"{name} = ?" for name in columns)
                    cursor = conn.execute(
                        f"UPDATE resources SET {assignments} WHERE id = ?",
                        (*[fields[name] for name in columns], resource_id),
                    )
                    if cursor.rowcount == 0:
                        raise ResourceNotFoundError(f"Resource not found: {resource_id}")
                    conn.commit()
                row = conn.execute(
                    f"SELECT id, {_COLUMNS} FROM resources WHERE id = ?",
                    (resource_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise DatastoreError(f"Failed to update resource {resource_id}: {exc}") from exc
        if row is None:
            raise ResourceNotFoundError(f"Resource not found: {resource_id}")
        return self._to_model(row)

    def delete(self, resource_id: int) -> None:
        try:
            with get_connection(self.db_path) as conn:
                cursor = conn.execute("DELETE FROM resources WHERE id = ?", (resource_id,))
                conn.commit()
        except sqlite3.Error as exc:
            raise DatastoreError(f"Failed to delete resource {resource_id}: {exc}") from exc
        if cursor.rowcount == 0:
            raise ResourceNotFoundError(f"Resource not found: {resource_id}")

    @staticmethod
    def _to_model(row: sqlite3.Row) -> Resource:
        return Resource.from_row(row)
