# deputy_reports/smoke_api.py
from __future__ import annotations

from datetime import date

from deputy_reports.api.deputy_client import DeputyApiClient, RequestError
from deputy_reports.core.core_common import log

RESOURCES = ("Event", "Schedule", "Roster", "Employee")


def main() -> None:
    api = DeputyApiClient()

    failed = 0
    for name in RESOURCES:
        try:
            log(f"📌 {name}: count={api.count(name)}")
        except RequestError as e:
            failed += 1
            log(f"❌ {name}: status={e.status} {e}")

    # roster на сегодня — проверка QUERY с точной датой
    today = date.today().isoformat()
    try:
        items = api.query("Roster", search={"Date": today}, max=1)
        log(f"📌 Roster[{today}]: items={len(items)}")
    except RequestError as e:
        failed += 1
        log(f"❌ Roster[{today}]: status={e.status} {e}")

    if failed:
        raise SystemExit(f"❌ API smoke failed: {failed} checks")
    log("✅ API smoke passed")


if __name__ == "__main__":
    main()
