import logging
from typing import Any, Callable, Dict, List, Optional

import requests

from errors import DataServiceError
from infrastructure.repositories.data_client import Row

log = logging.getLogger(__name__)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


class SupabaseDataClient:
    """PostgREST client; requests carry the signed-in user's token so row-level security applies."""

    def __init__(self, url: str, anon_key: str, token_provider: Optional[Callable[[], Optional[str]]] = None,
                 timeout: float = 10):
        self.base_url = url.rstrip("/") + "/rest/v1"
        self.anon_key = anon_key
        self.token_provider = token_provider
        self.timeout = timeout

    def _headers(self, prefer: Optional[str] = None) -> Dict[str, str]:
        token = self.token_provider() if self.token_provider else None
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token or self.anon_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    def _filter_params(self, filters: Optional[Row]) -> Dict[str, str]:
        params = {}
        for column, value in (filters or {}).items():
            op = "is" if value is None else "eq"
            params[column] = f"{op}.{_format_value(value)}"
        return params

    def _request(self, method: str, table: str, params: Dict[str, Any], payload=None, prefer=None):
        try:
            resp = requests.request(
                method,
                f"{self.base_url}/{table}",
                headers=self._headers(prefer),
                params=params,
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.error(f"❌ Network error on {method} {table}: {e}")
            raise DataServiceError(f"Data service unavailable: {e}") from e

        if resp.status_code >= 400:
            try:
                message = resp.json().get("message") or resp.text
            except ValueError:
                message = resp.text
            log.error(f"❌ {method} {table} failed: {resp.status_code} {message}")
            raise DataServiceError(message or f"HTTP {resp.status_code}", status_code=resp.status_code)
        return resp

    def select(self, table: str, *, filters: Optional[Row] = None, order: Optional[str] = None,
               descending: bool = True, limit: Optional[int] = None) -> List[Row]:
        params: Dict[str, Any] = {"select": "*"}
        params.update(self._filter_params(filters))
        if order:
            params["order"] = f"{order}.{'desc' if descending else 'asc'}"
        if limit is not None:
            params["limit"] = int(limit)
        return self._request("GET", table, params).json()

    def insert(self, table: str, row: Row) -> Row:
        resp = self._request("POST", table, {}, payload=row, prefer="return=representation")
        rows = resp.json()
        if not rows:
            raise DataServiceError(f"Insert into {table} returned no row")
        return rows[0]

    def update(self, table: str, values: Row, *, filters: Row) -> List[Row]:
        if not filters:
            raise DataServiceError(f"Refusing unfiltered update on {table}")
        resp = self._request("PATCH", table, self._filter_params(filters), payload=values, prefer="return=representation")
        return resp.json()

    def delete(self, table: str, *, filters: Row) -> None:
        if not filters:
            raise DataServiceError(f"Refusing unfiltered delete on {table}")
        self._request("DELETE", table, self._filter_params(filters))
