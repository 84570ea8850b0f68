# deputy_reports/reports/schedule_ids_report.py
from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..api.deputy_client import DeputyApiClient, RequestError
from ..core.core_common import BatchReport, log
from ..core.pagination import collect_all
from .common import divider, print_failures, summary_line

SCHEDULE = "Schedule"


@dataclass(frozen=True)
class IdRange:
    start: int
    end: int
    count: int

    def __str__(self) -> str:
        if self.start == self.end:
            return f"ID: {self.start}"
        return f"IDs: {self.start} - {self.end} ({self.count} schedules)"


def id_ranges(ids: Iterable[int]) -> List[IdRange]:
    """
    Сворачивает Id в непрерывные диапазоны: [1,2,3,7,9,10] -> 1-3, 7, 9-10.
    """
    ordered = sorted(set(ids))
    if not ordered:
        return []
    out: List[IdRange] = []
    start = prev = ordered[0]
    for cur in ordered[1:]:
        if cur == prev + 1:
            prev = cur
            continue
        out.append(IdRange(start, prev, prev - start + 1))
        start = prev = cur
    out.append(IdRange(start, prev, prev - start + 1))
    return out


def print_summary(
    report: BatchReport, high_id_floor: Optional[int] = None, tail: int = 20
) -> None:
    if not len(report):
        log("No schedules retrieved")
        return

    ids = report.ids()
    log(f"Lowest ID: {ids[0]}")
    log(f"Highest ID: {ids[-1]}")

    log("\nSchedule ID Ranges:")
    log(divider("="))
    for r in id_ranges(ids):
        log(str(r))

    named = [s for s in report if s.get("Name") and s.get("Name") != "No Name"]
    log(f"\nNamed Schedules ({len(named)}/{len(report)}):")
    log(divider("="))
    for s in named:
        log(f"ID: {str(s['Id']).ljust(6)} | Name: {s['Name']}")

    if high_id_floor is not None:
        high = [s for s in report if s["Id"] >= high_id_floor]
        log(f"\nHigh ID Schedules ({high_id_floor}+) ({len(high)}):")
        log(divider("="))
        for s in high:
            log(
                f"ID: {str(s['Id']).ljust(6)} | Name: {s.get('Name') or 'No Name'} "
                f"| Created: {s.get('Created')}"
            )

    log(f"\nHighest Schedule IDs (last {tail}):")
    log(divider("="))
    for s in report[-tail:]:
        log(f"ID: {str(s['Id']).ljust(6)} | Name: {s.get('Name') or 'No Name'}")


def run(
    client: DeputyApiClient,
    known_ids: Iterable[int] = (),
    high_id_floor: Optional[int] = None,
    page_size: Optional[int] = None,
) -> BatchReport:
    log("Compiling comprehensive list of schedule IDs...")
    report = collect_all(
        client,
        SCHEDULE,
        page_size=page_size,
        known_ids=known_ids,
        high_id_floor=high_id_floor,
    )
    log(summary_line(SCHEDULE, report))
    print_failures(report)
    print_summary(report, high_id_floor=high_id_floor)
    return report


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Complete Schedule ID listing")
    p.add_argument("--page-size", type=int)
    p.add_argument(
        "--known-ids",
        type=str,
        help="comma-separated schedule ids that must be present (reconciliation)",
    )
    p.add_argument("--high-id-floor", type=int, help="extra Id >= N query")
    return p.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    client = DeputyApiClient()

    if args.known_ids:
        known = [int(s) for s in args.known_ids.split(",") if s.strip()]
    else:
        known = list(client.st.known_schedule_ids)
    floor = args.high_id_floor if args.high_id_floor is not None else client.st.high_id_floor

    try:
        run(client, known_ids=known, high_id_floor=floor, page_size=args.page_size)
    except RequestError as e:
        raise SystemExit(f"❌ schedule ids report failed: {e} (status={e.status})")


if __name__ == "__main__":
    main()
