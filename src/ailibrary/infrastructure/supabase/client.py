from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import requests

from ailibrary.core.errors import DatastoreError

logger = logging.getLogger(__name__)


def eq(value: object) -> str:
    return f"eq.{value}"


def order(column: str, *, ascending: bool = True) -> str:
    return f"{column}.{'asc' if ascending else 'desc'}"


class PostgrestClient:
    """Thin wrapper around the Supabase PostgREST endpoint."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )

    def _url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _handle(self, response: requests.Response) -> list[dict[str, Any]]:
        if 200 <= response.status_code < 300:
            if not response.content:
                return []
            try:
                payload = response.json()
            except ValueError as exc:
                raise DatastoreError(f"Failed to decode JSON response from {response.url}") from exc
            if isinstance(payload, dict):
                return [payload]
            return list(payload)
        raise DatastoreError(
            f"{response.request.method} {response.url} failed with "
            f"status {response.status_code}: {response.text}"
        )

    def _send(self, method: str, table: str, **kwargs: Any) -> list[dict[str, Any]]:
        try:
            response = self.session.request(method, self._url(table), timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise DatastoreError(f"{method} {self._url(table)} failed: {exc}") from exc
        logger.debug("%s %s -> %s", method, response.url, response.status_code)
        return self._handle(response)

    def select(
        self,
        table: str,
        select: str = "*",
        filters: Mapping[str, str] | None = None,
        order_by: str | None = None,
    ) -> list[dict[str, Any]]:
        params: dict[str, str] = {"select": select, **(filters or {})}
        if order_by:
            params["order"] = order_by
        return self._send("GET", table, params=params)

    def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
        if not rows:
            return []
        return self._send(
            "POST",
            table,
            json=[dict(row) for row in rows],
            params={"select": "*"},
            headers={"Prefer": "return=representation"},
        )

    def update(
        self,
        table: str,
        fields: Mapping[str, Any],
        filters: Mapping[str, str],
    ) -> list[dict[str, Any]]:
        return self._send(
            "PATCH",
            table,
            json=dict(fields),
            params={"select": "*", **filters},
            headers={"Prefer": "return=representation"},
        )

    def delete(self, table: str, filters: Mapping[str, str]) -> list[dict[str, Any]]:
        return self._send(
            "DELETE",
            table,
            params=dict(filters),
            headers={"Prefer": "return=representation"},
        )
