from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ColumnSpec:
    """
    Назначение:
        Описание колонки для внешнего компонента отображения.
    """

    key: str
    header: str


COLUMNS: tuple[ColumnSpec, ...] = (
    ColumnSpec(key="person", header="Person"),
    ColumnSpec(key="past12Months", header="Past 12 Months"),
    ColumnSpec(key="y2d", header="Y2D"),
    ColumnSpec(key="may", header="May"),
    ColumnSpec(key="june", header="June"),
    ColumnSpec(key="july", header="July"),
    ColumnSpec(key="netEarningsPrevMonth", header="Net Earnings Prev Month"),
)
