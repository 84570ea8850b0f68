# deputy_reports/api/deputy_client.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests
from requests import Session
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..settings import DeputySettings, load_settings


class RequestError(RuntimeError):
    """Не-2xx ответ или сбой транспорта. Исходное исключение — в __cause__."""

    def __init__(self, message: str, status: Optional[int] = None, body: Any = None):
        super().__init__(message)
        self.status = status
        self.body = body


def resource_path(name: str, *parts: Any) -> str:
    return "/".join(["resource", name, *(str(p) for p in parts)])


def compare_filter(
    field: str, data: Any, operator: str = "=", type_: str = "Integer"
) -> Dict[str, Any]:
    """
    Форма сравнения для search: {"s1": compare_filter("Id", 1000, ">=")}.
    """
    return {"field": field, "data": data, "type": type_, "operator": operator}


class DeputyApiClient:
    def __init__(self, settings: Optional[DeputySettings] = None) -> None:
        self.s = Session()
        self.st = settings or load_settings()

        # ретраи на уровне транспорта выключены по умолчанию (retry.total=0)
        retry = Retry(
            total=self.st.retry_total,
            backoff_factor=self.st.retry_backoff_factor,
            status_forcelist=self.st.retry_statuses,
            allowed_methods=frozenset(["GET", "POST"]),
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry)
        self.s.mount("https://", adapter)
        self.s.mount("http://", adapter)

        self.s.headers.update(
            {
                "accept": "application/json",
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.st.token}",
            }
        )

    # --- transport ---
    def request(self, path: str, method: str = "GET", body: Any = None) -> Any:
        url = f"{self.st.base_url.rstrip('/')}/{path.lstrip('/')}"
        try:
            r = self.s.request(method, url, json=body, timeout=self.st.timeout_sec)
        except requests.RequestException as e:
            raise RequestError(f"{method} {path}: {e}") from e

        try:
            r.raise_for_status()
        except requests.HTTPError as e:
            try:
                err_body = r.json()
            except ValueError:
                err_body = r.text
            raise RequestError(
                f"{method} {path}: HTTP {r.status_code}",
                status=r.status_code,
                body=err_body,
            ) from e

        try:
            return r.json()
        except ValueError as e:
            # 2xx, но не JSON: HTML-заглушка прокси и т.п.
            raise RequestError(
                f"{method} {path}: invalid JSON", status=r.status_code, body=r.text
            ) from e

    def _request_list(
        self, path: str, method: str = "GET", body: Any = None
    ) -> List[Dict[str, Any]]:
        data = self.request(path, method, body)
        if data is None:
            return []
        if not isinstance(data, list):
            raise RequestError(f"{method} {path}: expected a list", body=data)
        return data

    # --- resources ---
    def info(self, name: str) -> Dict[str, Any]:
        data = self.request(resource_path(name, "INFO"))
        return data if isinstance(data, dict) else {}

    def count(self, name: str) -> Optional[int]:
        """
        count из INFO. None, если поля нет или оно не число —
        вызывающий код использует его только как подсказку.
        """
        raw = self.info(name).get("count")
        try:
            return int(raw) if raw is not None else None
        except (TypeError, ValueError):
            return None

    def query(
        self,
        name: str,
        search: Optional[Dict[str, Any]] = None,
        max: Optional[int] = None,
        offset: Optional[int] = None,
        sort: Optional[Dict[str, str]] = None,
    ) -> List[Dict[str, Any]]:
        body: Dict[str, Any] = {}
        if search:
            body["search"] = search
        if max is not None:
            body["max"] = max
        if offset is not None:
            body["offset"] = offset
        if sort:
            body["sort"] = sort
        return self._request_list(resource_path(name, "QUERY"), "POST", body)

    def get_item(self, name: str, item_id: int) -> Dict[str, Any]:
        path = resource_path(name, item_id)
        data = self.request(path)
        if data is not None and not isinstance(data, dict):
            raise RequestError(f"GET {path}: expected an object", body=data)
        return data

    def get_all(self, name: str) -> List[Dict[str, Any]]:
        return self._request_list(resource_path(name))
