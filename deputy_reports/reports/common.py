# deputy_reports/reports/common.py
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..core.core_common import BatchReport, log

# (заголовок, ширина)
Column = Tuple[str, int]


def divider(char: str = "-", length: int = 80) -> str:
    return char * length


def fmt_day(value: Any) -> str:
    """ISO-строка или date -> YYYY-MM-DD, пусто -> N/A."""
    if not value:
        return "N/A"
    if isinstance(value, (date, datetime)):
        return value.isoformat()[:10]
    return str(value)[:10]


def fmt_time(value: Any) -> str:
    """
    Время из ISO-строки ('...T09:00:00+10:00' -> '09:00')
    или из unix timestamp (Roster.StartTime) в UTC.
    """
    if value is None or value == "":
        return "N/A"
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc).strftime("%H:%M")
    s = str(value)
    if "T" in s:
        return s.split("T", 1)[1][:5]
    return s[:5]


def format_table(
    rows: Iterable[Sequence[Any]], columns: Sequence[Column]
) -> List[str]:
    header = " | ".join(title.ljust(width) for title, width in columns)
    lines = [divider(length=len(header)), header, divider(length=len(header))]
    for row in rows:
        cells = []
        for (_, width), value in zip(columns, row):
            text = "N/A" if value is None else str(value)
            cells.append(text[:width].ljust(width))
        lines.append(" | ".join(cells).rstrip())
    return lines


def print_table(
    rows: Iterable[Sequence[Any]],
    columns: Sequence[Column],
    limit: Optional[int] = None,
) -> None:
    rows = list(rows)
    shown = rows if limit is None else rows[:limit]
    for line in format_table(shown, columns):
        log(line)
    if limit is not None and len(rows) > limit:
        log(f"... and {len(rows) - limit} more")


def print_failures(report: BatchReport) -> None:
    for f in report.failures:
        status = f" status={f.status}" if f.status is not None else ""
        log(f"  ! {f.resource} {f.key}:{status} {f.message}")


def summary_line(title: str, report: BatchReport) -> str:
    parts: Dict[str, Any] = {"items": len(report), "requests": report.requests}
    if report.skipped:
        parts["skipped"] = report.skipped
    if report.failures:
        parts["failed"] = len(report.failures)
    return f"📌 {title}: " + " ".join(f"{k}={v}" for k, v in parts.items())
