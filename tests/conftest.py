"""Shared fixtures: in-memory Deputy API built on the real client."""

from typing import Any, Dict, List, Optional

import pytest
import requests

from deputy_reports.api.deputy_client import DeputyApiClient, RequestError
from deputy_reports.settings import DeputySettings


def make_settings(**overrides) -> DeputySettings:
    base = {"base_url": "https://test.example/api/v1", "token": "test-token"}
    base.update(overrides)
    return DeputySettings(**base)


class StubResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise requests.exceptions.JSONDecodeError("Expecting value", self.text, 0)
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class StubSession:
    """
    Stands in for requests.Session. Either a fixed response/exception or a
    ``responder(method, url, json)`` callable returning a StubResponse.
    """

    def __init__(self, response=None, exc=None, responder=None):
        self.response = response
        self.exc = exc
        self.responder = responder
        self.sent = []

    def request(self, method, url, json=None, timeout=None):
        self.sent.append({"method": method, "url": url, "json": json, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        if self.responder is not None:
            return self.responder(method, url, json)
        return self.response


class FakeDeputyApi(DeputyApiClient):
    """
    Routes resource paths to in-memory collections instead of HTTP.
    Every call is recorded in ``calls`` as (method, path, body).
    """

    def __init__(self, settings: Optional[DeputySettings] = None) -> None:
        super().__init__(settings or make_settings())
        self.data: Dict[str, List[Dict[str, Any]]] = {}
        self.counts: Dict[str, Any] = {}
        self.failing_paths: Dict[str, int] = {}
        self.failing_dates: set = set()
        self.hidden_from_query: Dict[str, set] = {}
        self.calls: List[tuple] = []

    def add(self, name: str, items: List[Dict[str, Any]]) -> "FakeDeputyApi":
        self.data.setdefault(name, []).extend(items)
        return self

    def calls_to(self, suffix: str) -> List[tuple]:
        return [c for c in self.calls if c[1].endswith(suffix)]

    def request(self, path: str, method: str = "GET", body: Any = None) -> Any:
        self.calls.append((method, path, body))
        if path in self.failing_paths:
            status = self.failing_paths[path]
            raise RequestError(f"{method} {path}: HTTP {status}", status=status)

        parts = path.split("/")
        assert parts[0] == "resource"
        name = parts[1]
        items = self.data.get(name, [])

        if len(parts) == 2:
            return list(items)
        if parts[2] == "INFO":
            if name in self.counts:
                return {"count": self.counts[name]} if self.counts[name] is not None else {}
            return {"count": len(items)}
        if parts[2] == "QUERY":
            return self._query(name, items, body or {})

        item_id = int(parts[2])
        for it in items:
            if it.get("Id") == item_id:
                return dict(it)
        raise RequestError(f"{method} {path}: HTTP 404", status=404, body={"error": "not found"})

    def _query(self, name: str, items, body: Dict[str, Any]):
        hidden = self.hidden_from_query.get(name, set())
        rows = [it for it in items if it.get("Id") not in hidden]
        search = body.get("search") or {}
        for key, cond in search.items():
            if isinstance(cond, dict):
                assert cond["operator"] == ">="
                rows = [it for it in items if it[cond["field"]] >= cond["data"]]
            else:
                if key == "Date" and cond in self.failing_dates:
                    raise RequestError(f"POST QUERY Date={cond}: HTTP 500", status=500)
                rows = [it for it in rows if str(it.get(key))[:10] == cond]
        if body.get("sort") == {"Id": "ASC"}:
            rows = sorted(rows, key=lambda it: it["Id"])
        offset = body.get("offset") or 0
        limit = body.get("max")
        rows = rows[offset:]
        if limit is not None:
            rows = rows[:limit]
        return rows


@pytest.fixture
def api() -> FakeDeputyApi:
    return FakeDeputyApi()


def schedule(id_: int, start: str, name: Optional[str] = None) -> Dict[str, Any]:
    return {
        "Id": id_,
        "Name": name,
        "StartDate": f"{start}T00:00:00+10:00",
        "StartTime": f"{start}T09:00:00+10:00",
        "EndTime": f"{start}T17:00:00+10:00",
    }


def roster(id_: int, day: str, start_ts: int = 0) -> Dict[str, Any]:
    return {
        "Id": id_,
        "Date": f"{day}T00:00:00+10:00",
        "StartTime": start_ts,
        "EndTime": start_ts + 3600,
        "Employee": 100 + id_,
    }
