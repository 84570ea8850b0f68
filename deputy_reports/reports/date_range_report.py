# deputy_reports/reports/date_range_report.py
from __future__ import annotations

import argparse
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from ..api.deputy_client import DeputyApiClient, RequestError
from ..core.core_common import BatchReport, DateInterval, log
from ..core.date_range import ResourceKind, expand, sort_by_time
from ..settings import CONFIG
from .common import (
    divider,
    fmt_day,
    fmt_time,
    print_failures,
    print_table,
    summary_line,
)

KINDS = {
    "events": ResourceKind.EVENT,
    "schedules": ResourceKind.SCHEDULE,
    "roster": ResourceKind.ROSTER,
}

EVENT_COLUMNS = [
    ("EVENT ID", 8),
    ("TITLE", 22),
    ("SCHEDULE ID", 11),
    ("SCHEDULE DATE", 13),
    ("SCHEDULE TIME", 13),
]
SCHEDULE_COLUMNS = [
    ("SCHEDULE ID", 11),
    ("NAME", 24),
    ("START DATE", 10),
    ("TIME RANGE", 13),
]
ROSTER_COLUMNS = [
    ("ROSTER ID", 9),
    ("DATE", 10),
    ("START", 5),
    ("END", 5),
    ("EMPLOYEE", 8),
]


def resolve_interval(
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    days_forward: Optional[int] = None,
    days_back: Optional[int] = None,
    today: Optional[date] = None,
) -> DateInterval:
    """
    --from/--to, либо относительные окна от today:
    days_forward=N -> today..today+N, days_back=N -> today-N..today.
    """
    today = today or date.today()
    if date_from or date_to:
        if days_forward is not None or days_back is not None:
            raise ValueError(
                "--from/--to cannot be combined with --days-forward/--days-back"
            )
        if not (date_from and date_to):
            raise ValueError("--from and --to must be given together")
        return DateInterval.parse(date_from, date_to)
    if days_back is not None:
        return DateInterval(today - timedelta(days=days_back), today)
    if days_forward is None:
        days_forward = int(((CONFIG or {}).get("reports") or {}).get("days_forward", 7))
    return DateInterval(today, today + timedelta(days=days_forward))


def event_rows(report: BatchReport) -> List[List[Any]]:
    rows = []
    for ev in report:
        sch = ev.get("scheduleDetails") or {}
        rows.append(
            [
                ev.get("Id"),
                ev.get("Title") or "No Title",
                ev.get("Schedule"),
                fmt_day(sch.get("StartDate")),
                f"{fmt_time(sch.get('StartTime'))} - {fmt_time(sch.get('EndTime'))}",
            ]
        )
    return rows


def schedule_rows(report: BatchReport) -> List[List[Any]]:
    return [
        [
            s.get("Id"),
            s.get("Name") or "No Name",
            fmt_day(s.get("StartDate")),
            f"{fmt_time(s.get('StartTime'))} - {fmt_time(s.get('EndTime'))}",
        ]
        for s in report
    ]


def roster_rows(items) -> List[List[Any]]:
    return [
        [
            r.get("Id"),
            fmt_day(r.get("Date")),
            fmt_time(r.get("StartTime")),
            fmt_time(r.get("EndTime")),
            r.get("Employee"),
        ]
        for r in items
    ]


def run(
    client: DeputyApiClient,
    interval: DateInterval,
    kinds: List[ResourceKind],
    max_days: Optional[int] = None,
    sort_roster: bool = False,
    sample_rows: Optional[int] = None,
) -> Dict[ResourceKind, BatchReport]:
    """
    Прогоняет выбранные виды по интервалу и печатает таблицы.
    RequestError уровня пакета не ловим — он уходит в main.
    """
    log(f"📅 Date range: {interval.start.isoformat()} to {interval.end.isoformat()}")
    log(divider("="))
    out: Dict[ResourceKind, BatchReport] = {}

    for kind in kinds:
        report = expand(client, interval, kind, max_days=max_days)
        out[kind] = report
        log(summary_line(kind.value, report))

        if kind is ResourceKind.EVENT:
            print_table(event_rows(report), EVENT_COLUMNS, sample_rows)
        elif kind is ResourceKind.SCHEDULE:
            print_table(schedule_rows(report), SCHEDULE_COLUMNS, sample_rows)
        else:
            items = sort_by_time(report) if sort_roster else list(report)
            print_table(roster_rows(items), ROSTER_COLUMNS, sample_rows)
        print_failures(report)
        log(divider("="))

    return out


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Deputy events/schedules/roster by date range")
    p.add_argument("--from", dest="date_from", type=str, help="YYYY-MM-DD")
    p.add_argument("--to", dest="date_to", type=str, help="YYYY-MM-DD")
    g = p.add_mutually_exclusive_group()
    g.add_argument("--days-forward", type=int, help="today..today+N")
    g.add_argument("--days-back", type=int, help="today-N..today")
    p.add_argument(
        "--kind",
        choices=[*KINDS.keys(), "all"],
        default="all",
    )
    p.add_argument(
        "--max-days", type=int, help="cap on per-day Roster queries from --from"
    )
    p.add_argument(
        "--sort-roster", action="store_true", help="sort roster by Date, StartTime"
    )
    p.add_argument("--rows", type=int, help="max table rows per kind")
    return p.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    try:
        interval = resolve_interval(
            args.date_from, args.date_to, args.days_forward, args.days_back
        )
    except ValueError as e:
        raise SystemExit(str(e))

    kinds = list(KINDS.values()) if args.kind == "all" else [KINDS[args.kind]]
    rows = args.rows
    if rows is None:
        rows = ((CONFIG or {}).get("reports") or {}).get("sample_rows")

    client = DeputyApiClient()
    try:
        run(
            client,
            interval,
            kinds,
            max_days=args.max_days,
            sort_roster=args.sort_roster,
            sample_rows=rows,
        )
    except RequestError as e:
        raise SystemExit(f"❌ date range report failed: {e} (status={e.status})")


if __name__ == "__main__":
    main()
