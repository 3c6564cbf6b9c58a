from __future__ import annotations

from datetime import date
from typing import Iterable

from workforce_table.domain.models import (
    DiagnosticStage,
    RateField,
    RowRef,
    SourceRecord,
    TableRow,
    UtilisationAggregate,
    ValidationErrorItem,
)
from workforce_table.domain.transform.earnings import match_earnings, non_iso_dates, reference_date
from workforce_table.domain.transform.resolver import EntityResolver
from workforce_table.domain.transform.result import CollectResult, TransformResult
from workforce_table.domain.transform.row_formatter import MONTH_COLUMNS, RowFormatter
from workforce_table.domain.transform.utilisation import (
    InvalidRatePolicy,
    is_numeric_rate,
    month_rate,
    period_rate,
)


class TablePipeline:
    """
    Назначение/ответственность:
        Последовательный запуск resolve -> extract/match -> format для каждой записи.

    Контракт:
        - одна выходная строка на каждую входную запись, порядок сохраняется;
        - состояние между записями не хранится;
        - опорная дата (первое число прошлого месяца) вычисляется из today один раз.
    """

    def __init__(
        self,
        today: date,
        resolver: EntityResolver | None = None,
        formatter: RowFormatter | None = None,
    ) -> None:
        self.today = today
        self.reference = reference_date(today)
        self.resolver = resolver or EntityResolver()
        self.formatter = formatter or RowFormatter()

    def transform(self, collected: CollectResult | SourceRecord) -> TransformResult[TableRow]:
        if isinstance(collected, SourceRecord):
            collected = CollectResult(record=collected)
        record = collected.record

        entity = self.resolver.resolve(record)
        earnings = match_earnings(entity.aggregate, self.reference)
        row = self.formatter.format(entity, earnings)

        warnings = [*collected.warnings]
        warnings.extend(_rate_warnings(entity.aggregate, self.formatter.invalid_rate_policy))
        warnings.extend(_date_warnings(entity.aggregate))

        return TransformResult(
            record=record,
            row=row,
            row_ref=RowRef(
                line_no=record.line_no,
                row_id=record.record_id,
                source=entity.source.value if entity.source else None,
            ),
            warnings=warnings,
        )

    def run(self, records: Iterable[CollectResult | SourceRecord]) -> list[TransformResult[TableRow]]:
        return [self.transform(item) for item in records]


def build_table_rows(
    records: Iterable[SourceRecord],
    today: date,
    invalid_rate_policy: InvalidRatePolicy = InvalidRatePolicy.PASSTHROUGH,
) -> list[TableRow]:
    """
    Назначение:
        Чистая функция: входная последовательность записей + текущая дата
        -> последовательность строк таблицы той же длины и в том же порядке.
    """
    pipeline = TablePipeline(today, formatter=RowFormatter(invalid_rate_policy=invalid_rate_policy))
    return [result.row for result in pipeline.run(records)]


def _rate_warnings(
    aggregate: UtilisationAggregate | None,
    policy: InvalidRatePolicy,
) -> list[ValidationErrorItem]:
    raws: list[tuple[str, str]] = [
        ("past12Months", period_rate(aggregate, RateField.LAST_TWELVE_MONTHS)),
        ("y2d", period_rate(aggregate, RateField.YEAR_TO_DATE)),
    ]
    raws.extend((key, month_rate(aggregate, month_name)) for key, month_name in MONTH_COLUMNS)

    shown_as = "NaN%" if policy is InvalidRatePolicy.PASSTHROUGH else "0%"
    return [
        ValidationErrorItem(
            stage=DiagnosticStage.EXTRACT_RATES,
            code="RATE_NOT_NUMERIC",
            field=key,
            message=f"rate {raw!r} is not numeric, rendered as {shown_as}",
        )
        for key, raw in raws
        if not is_numeric_rate(raw)
    ]


def _date_warnings(aggregate: UtilisationAggregate | None) -> list[ValidationErrorItem]:
    return [
        ValidationErrorItem(
            stage=DiagnosticStage.MATCH_EARNINGS,
            code="EARNINGS_DATE_NOT_ISO",
            field="quarterEarnings",
            message=f"date {value!r} is not yyyy-mm-dd, range matching compares it as text",
        )
        for value in non_iso_dates(aggregate)
    ]
