# deputy_reports/core/date_range.py
from __future__ import annotations

from collections import OrderedDict
from datetime import date
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..api.deputy_client import DeputyApiClient, RequestError
from .core_common import BatchReport, DateInterval, Failure, log, to_day
from .pagination import fetch_collection


class ResourceKind(str, Enum):
    SCHEDULE = "Schedule"
    EVENT = "Event"
    ROSTER = "Roster"


def _item_day(
    item: Dict[str, Any],
    field: str,
    resource: str,
    report: BatchReport,
    key: Any = None,
) -> Optional[date]:
    key = item.get("Id") if key is None else key
    try:
        return to_day(item.get(field))
    except ValueError as e:
        log(f"[{resource.lower()}][id={key}] bad {field}: {e}")
        report.failures.append(Failure(resource, key, str(e)))
        return None


# ───────────────────────────── Schedule ─────────────────────────────


def schedules_in_range(
    client: DeputyApiClient, interval: DateInterval, paginated: bool = False
) -> BatchReport:
    """
    У Schedule нет серверного фильтра по дате: берём всё и фильтруем по StartDate.
    """
    report = BatchReport()
    if interval.is_empty:
        return report

    schedules = fetch_collection(client, ResourceKind.SCHEDULE.value, paginated)
    report.requests += schedules.requests
    for sch in schedules:
        day = _item_day(sch, "StartDate", ResourceKind.SCHEDULE.value, report)
        if day is not None and interval.contains(day):
            report.items.append(sch)

    log(
        f"[schedule][{interval}] fetched={len(schedules)} in_range={len(report)} "
        f"failed={len(report.failures)}"
    )
    return report


# ───────────────────────────── Event ─────────────────────────────


def join_schedule(event: Dict[str, Any], schedule: Dict[str, Any]) -> Dict[str, Any]:
    return {**event, "scheduleDetails": schedule}


def events_in_range(
    client: DeputyApiClient, interval: DateInterval, paginated: bool = False
) -> BatchReport:
    """
    Дата события — StartDate его расписания. Для каждого события со ссылкой
    Schedule подтягиваем расписание по id и оставляем событие, если дата в
    интервале. Без ссылки — пропуск, сбой подтягивания — пропуск с записью в
    failures; пакет целиком не падает.
    """
    report = BatchReport()
    if interval.is_empty:
        return report

    events = fetch_collection(client, ResourceKind.EVENT.value, paginated)
    report.requests += events.requests

    for ev in events:
        ref = ev.get("Schedule")
        if not ref:
            report.skipped += 1
            continue
        try:
            schedule = client.get_item(ResourceKind.SCHEDULE.value, ref)
        except RequestError as e:
            log(
                f"[event][id={ev.get('Id')}] schedule {ref} lookup failed: "
                f"status={e.status} {e}"
            )
            report.failures.append(
                Failure(ResourceKind.EVENT.value, ev.get("Id"), str(e), e.status)
            )
            continue
        finally:
            report.requests += 1

        day = _item_day(
            schedule or {}, "StartDate", ResourceKind.EVENT.value, report, ev.get("Id")
        )
        if day is not None and interval.contains(day):
            report.items.append(join_schedule(ev, schedule))

    log(
        f"[event][{interval}] events={len(events)} in_range={len(report)} "
        f"no_schedule={report.skipped} failed={len(report.failures)}"
    )
    return report


# ───────────────────────────── Roster ─────────────────────────────


def roster_in_range(
    client: DeputyApiClient,
    interval: DateInterval,
    max_days: Optional[int] = None,
    page_size: Optional[int] = None,
) -> BatchReport:
    """
    Roster фильтруется только по точной дате: один QUERY на каждый день.
    max_days ограничивает число дней от начала интервала. Без него запросов
    столько, сколько дней в интервале. Сбой одного дня — лог и следующий день.
    """
    limit = page_size or client.st.roster_page_size
    days = interval.capped(max_days)
    if len(days) < len(interval):
        log(f"[roster][{interval}] capped to {days} (max_days={max_days})")

    report = BatchReport()
    for day in days:
        day_s = day.isoformat()
        try:
            items = client.query(
                ResourceKind.ROSTER.value, search={"Date": day_s}, max=limit
            )
        except RequestError as e:
            log(f"[roster][{day_s}] failed: status={e.status} {e}")
            report.failures.append(
                Failure(ResourceKind.ROSTER.value, day, str(e), e.status)
            )
            continue
        finally:
            report.requests += 1

        report.items.extend(items)
        if len(items) >= limit:
            log(f"[roster][{day_s}] got={len(items)} hit max={limit}, may be truncated")
        else:
            log(f"[roster][{day_s}] got={len(items)}")

    log(
        f"[roster][{days}] days={len(days)} items={len(report)} "
        f"failed_days={len(report.failures)}"
    )
    return report


def bucket_by_day(
    items: Iterable[Dict[str, Any]], field: str = "Date"
) -> "OrderedDict[date, List[Dict[str, Any]]]":
    """
    Раскладка по календарным дням. Дни по возрастанию, внутри дня — исходный порядок.
    """
    buckets: Dict[date, List[Dict[str, Any]]] = {}
    for it in items:
        buckets.setdefault(to_day(it.get(field)), []).append(it)
    return OrderedDict(sorted(buckets.items(), key=lambda kv: kv[0]))


def sort_by_time(items: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(
        items, key=lambda it: (to_day(it.get("Date")), it.get("StartTime") or 0)
    )


# ───────────────────────────── entrypoint ─────────────────────────────


def expand(
    client: DeputyApiClient,
    interval: DateInterval,
    kind: ResourceKind,
    max_days: Optional[int] = None,
    page_size: Optional[int] = None,
    paginated: Optional[bool] = None,
) -> BatchReport:
    kind = ResourceKind(kind)
    if paginated is None:
        paginated = client.st.paginated_fetch

    if kind is ResourceKind.SCHEDULE:
        return schedules_in_range(client, interval, paginated=paginated)
    if kind is ResourceKind.EVENT:
        return events_in_range(client, interval, paginated=paginated)
    return roster_in_range(
        client,
        interval,
        max_days=max_days if max_days is not None else client.st.roster_max_days,
        page_size=page_size,
    )
