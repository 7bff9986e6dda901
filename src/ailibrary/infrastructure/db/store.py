from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence

from ailibrary.core.config import AppSettings
from ailibrary.domain.models.resource import Resource
from ailibrary.infrastructure.db.repos.resource_repo import ResourceRepo
from ailibrary.infrastructure.db.sqlite import initialize_schema
from ailibrary.infrastructure.supabase.client import PostgrestClient
from ailibrary.infrastructure.supabase.resource_store import SupabaseResourceStore


class ResourceStore(Protocol):
    """Operations the catalog needs from the ``resources`` table.

    Implementations raise ``DatastoreError`` for transport or constraint
    failures and ``ResourceNotFoundError`` when an id does not exist.
    """

    def list_all(self) -> list[Resource]: ...

    def insert_many(self, resources: Sequence[Resource]) -> list[Resource]: ...

    def update(self, resource_id: int, fields: Mapping[str, Any]) -> Resource: ...

    def delete(self, resource_id: int) -> None: ...


def open_store(settings: AppSettings) -> ResourceStore:
    """Build the configured store: local SQLite when ``AILIB_DB_PATH`` is set, Supabase otherwise."""
    settings.require_datastore()
    if settings.db_path is not None:
        initialize_schema(settings.db_path)
        return ResourceRepo(settings.db_path)
    client = PostgrestClient(
        settings.supabase_url or "",
        settings.supabase_key or "",
        timeout=settings.request_timeout_seconds,
    )
    return SupabaseResourceStore(client)
