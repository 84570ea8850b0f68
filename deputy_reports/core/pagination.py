# deputy_reports/core/pagination.py
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Set

from ..api.deputy_client import DeputyApiClient, RequestError, compare_filter
from .core_common import BatchReport, Failure, log, merge_by_id

ID_ASC = {"Id": "ASC"}


def _merge_from_floor(
    client: DeputyApiClient,
    name: str,
    floor: int,
    limit: int,
    report: BatchReport,
    seen: Set[Any],
) -> None:
    """
    Дополнительный запрос Id >= floor. Сбой не фатален.
    """
    try:
        page = client.query(
            name,
            search={"s1": compare_filter("Id", floor, ">=")},
            max=limit,
            sort=ID_ASC,
        )
    except RequestError as e:
        log(f"[collect][{name}] id>={floor} query failed: status={e.status} {e}")
        report.failures.append(Failure(name, f">={floor}", str(e), e.status))
        return
    finally:
        report.requests += 1
    added = merge_by_id(report.items, page, seen)
    log(f"[collect][{name}] id>={floor} got={len(page)} added={added}")


def _merge_known_ids(
    client: DeputyApiClient,
    name: str,
    known_ids: Iterable[int],
    report: BatchReport,
    seen: Set[Any],
) -> None:
    for _id in known_ids:
        if _id in seen:
            continue
        try:
            item = client.get_item(name, _id)
        except RequestError as e:
            log(f"[collect][{name}] id={_id} fetch failed: status={e.status} {e}")
            report.failures.append(Failure(name, _id, str(e), e.status))
            continue
        finally:
            report.requests += 1
        if not item:
            log(f"[collect][{name}] id={_id} empty response")
            report.failures.append(Failure(name, _id, "empty response"))
            continue
        merge_by_id(report.items, [item], seen)


def collect_all(
    client: DeputyApiClient,
    name: str,
    page_size: Optional[int] = None,
    known_ids: Iterable[int] = (),
    high_id_floor: Optional[int] = None,
) -> BatchReport:
    """
    Выкачивает коллекцию целиком страницами offset/limit, сортировка Id ASC.

    count из INFO — только подсказка для остановки. Настоящий признак конца —
    страница короче limit. Если последняя страница ровно limit и count не
    помог (нет его или он больше), будет ещё один пустой запрос — это норма.

    Сбой INFO или любой страницы — фатален (RequestError уходит наверх).
    known_ids и high_id_floor — необязательная сверка, её сбои не фатальны.
    """
    limit = page_size or client.st.default_limit
    if limit <= 0:
        raise ValueError(f"page_size must be positive, got {limit}")

    report = BatchReport()
    seen: Set[Any] = set()

    total = client.count(name)
    report.requests += 1
    log(f"[collect][{name}] info count={total}")

    offset = 0
    while True:
        page: List[Dict[str, Any]] = client.query(
            name, max=limit, offset=offset, sort=ID_ASC
        )
        report.requests += 1
        added = merge_by_id(report.items, page, seen)
        log(
            f"[collect][{name}] page offset={offset} got={len(page)} "
            f"added={added} collected={len(report.items)}"
        )
        offset += limit

        if len(page) < limit:
            break
        if total is not None and len(report.items) >= total:
            break
        if added == 0:
            # полная страница без новых Id — сервер игнорирует offset
            log(f"[collect][{name}] full page without new ids, stopping")
            break

    if high_id_floor is not None:
        _merge_from_floor(client, name, high_id_floor, limit, report, seen)
    _merge_known_ids(client, name, known_ids, report, seen)

    report.items.sort(key=lambda it: it["Id"])
    if total is not None and len(report.items) != total:
        log(f"[collect][{name}] collected={len(report.items)} differs from count={total}")
    log(f"[collect][{name}] done items={len(report.items)} requests={report.requests}")
    return report


def fetch_collection(
    client: DeputyApiClient, name: str, paginated: bool = False
) -> BatchReport:
    """
    Вся коллекция: одним GET resource/<name> или постранично через collect_all.
    Сбой — фатален.
    """
    if paginated:
        return collect_all(client, name)
    report = BatchReport()
    items = client.get_all(name)
    report.requests += 1
    merge_by_id(report.items, items, set())
    log(f"[fetch][{name}] items={len(report.items)}")
    return report
