# deputy_reports/core/core_common.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set

# ──────────────────────────────────────────────────────────────────────────────
# Лог


def log(msg: str) -> None:
    print(msg, flush=True)


# ──────────────────────────────────────────────────────────────────────────────
# Результаты по элементам: успехи + причины отказов


@dataclass(frozen=True)
class Failure:
    resource: str
    key: Any  # id элемента или дата
    message: str
    status: Optional[int] = None


@dataclass
class BatchReport:
    """
    Итог одного сбора. Ведёт себя как последовательность успешных элементов,
    частичные ошибки лежат в failures.
    """

    items: List[Dict[str, Any]] = field(default_factory=list)
    failures: List[Failure] = field(default_factory=list)
    skipped: int = 0
    requests: int = 0

    def __iter__(self) -> Iterator[Dict[str, Any]]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def ok(self) -> bool:
        return not self.failures

    def ids(self) -> List[Any]:
        return [it.get("Id") for it in self.items]


# ──────────────────────────────────────────────────────────────────────────────
# Даты


def to_day(value: Any) -> date:
    """
    '2023-10-09', '2023-10-09T00:00:00+11:00', date, datetime -> date.
    Сравниваем только календарные даты, время отбрасываем.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and len(value) >= 10:
        return date.fromisoformat(value[:10])
    raise ValueError(f"not a calendar date: {value!r}")


@dataclass(frozen=True)
class DateInterval:
    """
    [start..end] включительно с обеих сторон. start > end — пустой интервал.
    Итерация ленивая и перезапускаемая: каждый iter() идёт с начала.
    """

    start: date
    end: date

    @classmethod
    def parse(cls, start: Any, end: Any) -> "DateInterval":
        return cls(to_day(start), to_day(end))

    @property
    def is_empty(self) -> bool:
        return self.start > self.end

    def __iter__(self) -> Iterator[date]:
        cur = self.start
        while cur <= self.end:
            yield cur
            cur += timedelta(days=1)

    def __len__(self) -> int:
        return max((self.end - self.start).days + 1, 0)

    def contains(self, value: Any) -> bool:
        return self.start <= to_day(value) <= self.end

    def capped(self, max_days: Optional[int]) -> "DateInterval":
        """Первые max_days дней: end = min(start + max_days - 1, end)."""
        if max_days is None:
            return self
        if max_days <= 0:
            return DateInterval(self.start, self.start - timedelta(days=1))
        return DateInterval(
            self.start, min(self.start + timedelta(days=max_days - 1), self.end)
        )

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


# ──────────────────────────────────────────────────────────────────────────────
# Дедупликация по Id


def merge_by_id(
    out: List[Dict[str, Any]], items: Iterable[Dict[str, Any]], seen: Set[Any]
) -> int:
    """
    Дописывает в out элементы, чьих Id ещё нет в seen. Первое вхождение
    выигрывает, записи без Id пропускаются. Возвращает число добавленных.
    """
    added = 0
    for it in items:
        _id = it.get("Id")
        if _id is None or _id in seen:
            continue
        seen.add(_id)
        out.append(it)
        added += 1
    return added
