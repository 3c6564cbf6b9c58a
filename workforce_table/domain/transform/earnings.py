from __future__ import annotations

import re
from datetime import date
from typing import Any

from workforce_table.domain.models import QuarterEarning, UtilisationAggregate

DEFAULT_EARNINGS = "0"

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def previous_month_start(today: date) -> date:
    """
    Назначение:
        Первое число месяца, предшествующего дате today.
        Январь откатывается на декабрь предыдущего года.
    """
    if today.month == 1:
        return date(today.year - 1, 12, 1)
    return date(today.year, today.month - 1, 1)


def reference_date(today: date) -> str:
    return previous_month_start(today).isoformat()


def is_iso_date(value: str | None) -> bool:
    return value is not None and _ISO_DATE_RE.match(value) is not None


def find_matching_entry(
    aggregate: UtilisationAggregate | None,
    reference: str,
) -> QuarterEarning | None:
    """
    Назначение:
        Первая запись quarter_earnings, диапазон которой содержит reference.

    Контракт:
        - сравнение строковое: start <= reference <= end (границы включительно);
        - корректно только для ISO-дат фиксированной ширины;
        - записи без start/end не совпадают никогда;
        - при пересечении диапазонов выигрывает первая по списку.
    """
    if aggregate is None or aggregate.quarter_earnings is None:
        return None
    for entry in aggregate.quarter_earnings:
        if entry.start is None or entry.end is None:
            continue
        if entry.start <= reference <= entry.end:
            return entry
    return None


def match_earnings(aggregate: UtilisationAggregate | None, reference: str) -> Any:
    """
    Назначение:
        Доход за прошлый месяц: earnings совпавшей записи как есть, иначе "0".
    """
    entry = find_matching_entry(aggregate, reference)
    if entry is None or entry.earnings is None:
        return DEFAULT_EARNINGS
    return entry.earnings


def non_iso_dates(aggregate: UtilisationAggregate | None) -> list[str]:
    if aggregate is None or aggregate.quarter_earnings is None:
        return []
    found: list[str] = []
    for entry in aggregate.quarter_earnings:
        for value in (entry.start, entry.end):
            if value is not None and not is_iso_date(value):
                found.append(value)
    return found
