"""Unit tests for date helpers, result types and Id merging."""

from datetime import date, datetime

import pytest

from deputy_reports.core.core_common import (
    BatchReport,
    DateInterval,
    Failure,
    merge_by_id,
    to_day,
)


@pytest.mark.parametrize(
    "value",
    [
        "2023-10-09",
        "2023-10-09T00:00:00+11:00",
        "2023-10-09T23:59:59Z",
        date(2023, 10, 9),
        datetime(2023, 10, 9, 18, 30),
    ],
)
def test_to_day_normalizes_to_calendar_date(value):
    assert to_day(value) == date(2023, 10, 9)


@pytest.mark.parametrize("value", [None, "", "2023", 1696809600, "not-a-date"])
def test_to_day_rejects_garbage(value):
    with pytest.raises(ValueError):
        to_day(value)


def test_interval_iterates_inclusive_days():
    iv = DateInterval.parse("2023-10-09", "2023-10-15")
    days = list(iv)
    assert len(iv) == 7
    assert days[0] == date(2023, 10, 9)
    assert days[-1] == date(2023, 10, 15)


def test_interval_is_restartable():
    iv = DateInterval.parse("2023-10-30", "2023-11-02")
    assert list(iv) == list(iv)
    assert [d.isoformat() for d in iv] == [
        "2023-10-30",
        "2023-10-31",
        "2023-11-01",
        "2023-11-02",
    ]


def test_single_day_interval():
    iv = DateInterval.parse("2024-02-29", "2024-02-29")
    assert list(iv) == [date(2024, 2, 29)]


def test_reversed_interval_is_empty():
    iv = DateInterval.parse("2023-10-15", "2023-10-09")
    assert iv.is_empty
    assert len(iv) == 0
    assert list(iv) == []


def test_contains_is_inclusive_on_both_bounds():
    iv = DateInterval.parse("2023-09-01", "2023-12-31")
    assert iv.contains("2023-09-01T00:00:00+10:00")
    assert iv.contains("2023-12-31T23:00:00+10:00")
    assert not iv.contains("2023-08-31")
    assert not iv.contains("2024-01-01")


def test_capped_limits_days_from_start():
    iv = DateInterval.parse("2023-10-01", "2023-10-31")
    capped = iv.capped(7)
    assert capped == DateInterval(date(2023, 10, 1), date(2023, 10, 7))


def test_capped_never_extends_end():
    iv = DateInterval.parse("2023-10-01", "2023-10-03")
    assert iv.capped(7) == iv
    assert iv.capped(None) is iv


@pytest.mark.parametrize("max_days", [0, -3])
def test_capped_non_positive_is_empty(max_days):
    assert list(DateInterval.parse("2023-10-01", "2023-10-03").capped(max_days)) == []


def test_merge_by_id_keeps_first_and_skips_missing_ids():
    out, seen = [], set()
    assert merge_by_id(out, [{"Id": 1, "v": "a"}, {"Id": 2}], seen) == 2
    assert merge_by_id(out, [{"Id": 1, "v": "b"}, {"v": "no id"}, {"Id": 3}], seen) == 1
    assert [it["Id"] for it in out] == [1, 2, 3]
    assert out[0]["v"] == "a"


def test_batch_report_behaves_as_sequence():
    report = BatchReport(items=[{"Id": 1}, {"Id": 2}])
    assert len(report) == 2
    assert [it["Id"] for it in report] == [1, 2]
    assert report[-1] == {"Id": 2}
    assert report.ids() == [1, 2]
    assert report.ok
    report.failures.append(Failure("Roster", date(2023, 10, 9), "boom", 500))
    assert not report.ok
