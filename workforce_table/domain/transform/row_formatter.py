from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from workforce_table.domain.models import RateField, ResolvedEntity, TableRow
from workforce_table.domain.transform.utilisation import (
    InvalidRatePolicy,
    format_number,
    format_percent,
    month_rate,
    period_rate,
)

CURRENCY_SUFFIX = " EUR"

# Литеральные названия месяцев колонок таблицы (без локализации).
MONTH_COLUMNS: tuple[tuple[str, str], ...] = (
    ("may", "May"),
    ("june", "June"),
    ("july", "July"),
)


def format_earnings(earnings: Any) -> str:
    """
    Назначение:
        Доход выводится как есть: число через JS-форматирование, строка без изменений.
    """
    if isinstance(earnings, bool):
        return f"{str(earnings).lower()}{CURRENCY_SUFFIX}"
    if isinstance(earnings, (int, float)):
        return f"{format_number(earnings)}{CURRENCY_SUFFIX}"
    return f"{earnings}{CURRENCY_SUFFIX}"


@dataclass(frozen=True)
class RowFormatter:
    """
    Назначение/ответственность:
        Сборка итоговой TableRow из разрешённой сущности и найденного дохода.
    """

    invalid_rate_policy: InvalidRatePolicy = InvalidRatePolicy.PASSTHROUGH

    def format(self, entity: ResolvedEntity, earnings: Any) -> TableRow:
        aggregate = entity.aggregate
        months = {
            key: format_percent(month_rate(aggregate, month_name), self.invalid_rate_policy)
            for key, month_name in MONTH_COLUMNS
        }
        return TableRow(
            person=entity.display_name,
            past_12_months=format_percent(
                period_rate(aggregate, RateField.LAST_TWELVE_MONTHS), self.invalid_rate_policy
            ),
            y2d=format_percent(period_rate(aggregate, RateField.YEAR_TO_DATE), self.invalid_rate_policy),
            may=months["may"],
            june=months["june"],
            july=months["july"],
            net_earnings_prev_month=format_earnings(earnings),
        )
