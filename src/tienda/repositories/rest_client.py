from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

import requests

from tienda.domain.errors import StoreError

log = logging.getLogger(__name__)

Filters = Mapping[str, Any]


def _encode_filter(value: Any) -> str:
    """``5`` -> ``eq.5``; ``("gte", "2024-01-01")`` -> ``gte.2024-01-01``; ``None`` -> ``is.null``."""
    if isinstance(value, tuple) and len(value) == 2:
        op, operand = value
        if isinstance(operand, (list, tuple)):
            operand = "(" + ",".join(str(v) for v in operand) + ")"
        return f"{op}.{_literal(operand)}"
    if value is None:
        return "is.null"
    return f"eq.{_literal(value)}"


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class RestClient:
    """Thin table client for a PostgREST-style hosted database.

    Every call is a single HTTP request; there is no cross-call atomicity.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        if not base_url:
            raise ValueError("REST base URL is required.")
        self.base_url = base_url.rstrip("/")
        self.timeout = float(timeout)
        self.session = session or requests.Session()
        self.session.headers.update({
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def _url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _params(
        self,
        filters: Optional[Filters] = None,
        order: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
        columns: Optional[str] = None,
    ) -> dict[str, str]:
        params: dict[str, str] = {}
        if columns:
            params["select"] = columns
        for col, value in (filters or {}).items():
            # logical groups are passed through verbatim: and=(a.gte.1,a.lt.5)
            params[col] = str(value) if col in ("and", "or") else _encode_filter(value)
        if order:
            params["order"] = ",".join(order)
        if limit is not None:
            params["limit"] = str(int(limit))
        return params

    def _request(self, method: str, table: str, **kwargs) -> list[dict[str, Any]]:
        try:
            r = self.session.request(method, self._url(table), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            log.warning("store_request_failed method=%s table=%s error=%s", method, table, e)
            raise StoreError(f"Data store unreachable: {e}") from e

        if r.status_code >= 400:
            try:
                detail = r.json().get("message") or r.text
            except ValueError:
                detail = r.text
            log.warning("store_request_rejected method=%s table=%s status=%s detail=%s", method, table, r.status_code, detail)
            raise StoreError(f"{method} {table} failed ({r.status_code}): {detail}", status_code=r.status_code)

        if not r.content:
            return []
        data = r.json()
        if isinstance(data, dict):
            return [data]
        return list(data)

    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        order: Optional[Iterable[str]] = None,
        limit: Optional[int] = None,
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        return self._request("GET", table, params=self._params(filters, order, limit, columns))

    def select_one(self, table: str, filters: Filters, columns: str = "*") -> Optional[dict[str, Any]]:
        rows = self.select(table, filters, limit=1, columns=columns)
        return rows[0] if rows else None

    def insert(self, table: str, rows: Mapping[str, Any] | list[Mapping[str, Any]]) -> list[dict[str, Any]]:
        payload = rows if isinstance(rows, list) else dict(rows)
        return self._request(
            "POST", table, json=payload, headers={"Prefer": "return=representation"}
        )

    def update(self, table: str, values: Mapping[str, Any], filters: Filters) -> list[dict[str, Any]]:
        if not filters:
            raise ValueError("Refusing to update without filters.")
        return self._request(
            "PATCH", table, params=self._params(filters), json=dict(values),
            headers={"Prefer": "return=representation"},
        )

    def delete(self, table: str, filters: Filters) -> list[dict[str, Any]]:
        if not filters:
            raise ValueError("Refusing to delete without filters.")
        return self._request(
            "DELETE", table, params=self._params(filters), headers={"Prefer": "return=representation"}
        )
