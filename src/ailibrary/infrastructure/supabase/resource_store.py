from __future__ import annotations

from typing import Any, Mapping, Sequence

from ailibrary.core.errors import ResourceNotFoundError
from ailibrary.domain.models.resource import RESOURCE_FIELDS, Resource
from ailibrary.infrastructure.supabase.client import PostgrestClient, eq, order

RESOURCES_TABLE = "resources"


class SupabaseResourceStore:
    def __init__(self, client: PostgrestClient, table: str = RESOURCES_TABLE) -> None:
        self.client = client
        self.table = table

    def list_all(self) -> list[Resource]:
        rows = self.client.select(self.table, "*", order_by=order("id"))
        return [Resource.from_row(row) for row in rows]

    def insert_many(self, resources: Sequence[Resource]) -> list[Resource]:
        rows = self.client.insert(self.table, [r.to_record() for r in resources])
        return [Resource.from_row(row) for row in rows]

    def update(self, resource_id: int, fields: Mapping[str, Any]) -> Resource:
        payload = {name: fields[name] for name in RESOURCE_FIELDS if name in fields}
        rows = self.client.update(self.table, payload, {"id": eq(resource_id)})
        if not rows:
            raise ResourceNotFoundError(f"Resource not found: {resource_id}")
        return Resource.from_row(rows[0])

    def delete(self, resource_id: int) -> None:
        rows = self.client.delete(self.table, {"id": eq(resource_id)})
        if not rows:
            raise ResourceNotFoundError(f"Resource not found: {resource_id}")
