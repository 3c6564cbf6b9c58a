from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Iterator

from workforce_table.domain.models import (
    DiagnosticStage,
    EmployeeVariant,
    ExternalVariant,
    MonthRate,
    QuarterEarning,
    SourceKind,
    SourceRecord,
    TeamVariant,
    UtilisationAggregate,
    ValidationErrorItem,
)
from workforce_table.domain.transform.result import CollectResult
from workforce_table.domain.transform.utilisation import format_number

UTILISATION_KEY = "workforceUtilisation"


class SourceFormatError(ValueError):
    """
    Назначение:
        Источник не читается или имеет неподдерживаемую структуру верхнего уровня.
    """


def _read_json_list(path: str) -> list[Any]:
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise SourceFormatError(f"Cannot read source file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise SourceFormatError(f"Invalid JSON in {path}: {exc}") from exc
    return extract_record_list(raw)


def extract_record_list(raw: Any) -> list[Any]:
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict):
        for key in ("items", "data"):
            value = raw.get(key)
            if isinstance(value, list):
                return value
    raise SourceFormatError("Unsupported JSON structure for source records")


def _to_str_or_none(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


class _RecordParser:
    """
    Назначение:
        Разбор одной сырой записи в SourceRecord.
        Неверные типы не роняют разбор: ветка/поле считаются отсутствующими,
        а в warnings добавляется диагностика.
    """

    def __init__(self, line_no: int) -> None:
        self.line_no = line_no
        self.warnings: list[ValidationErrorItem] = []

    def _warn(self, code: str, field: str | None, message: str) -> None:
        self.warnings.append(
            ValidationErrorItem(stage=DiagnosticStage.EXTRACT, code=code, field=field, message=message)
        )

    def _object(self, value: Any, field: str) -> dict[str, Any] | None:
        if value is None:
            return None
        if not isinstance(value, dict):
            self._warn("FIELD_NOT_OBJECT", field, f"{field} is {type(value).__name__}, expected object")
            return None
        return value

    def _list(self, value: Any, field: str) -> list[Any] | None:
        if value is None:
            return None
        if not isinstance(value, list):
            self._warn("FIELD_NOT_LIST", field, f"{field} is {type(value).__name__}, expected list")
            return None
        return value

    def parse(self, raw: Any) -> CollectResult:
        record_id = f"record:{self.line_no}"
        if not isinstance(raw, dict):
            self._warn("RECORD_NOT_OBJECT", None, f"record is {type(raw).__name__}, expected object")
            return CollectResult(
                record=SourceRecord(line_no=self.line_no, record_id=record_id),
                warnings=self.warnings,
            )

        employee_raw = self._object(raw.get(SourceKind.EMPLOYEE.value), SourceKind.EMPLOYEE.value)
        external_raw = self._object(raw.get(SourceKind.EXTERNAL.value), SourceKind.EXTERNAL.value)
        team_raw = self._object(raw.get(SourceKind.TEAM.value), SourceKind.TEAM.value)

        employee = None
        if employee_raw is not None:
            employee = EmployeeVariant(
                firstname=_to_str_or_none(employee_raw.get("firstname")),
                lastname=_to_str_or_none(employee_raw.get("lastname")),
                utilisation=self._aggregate(employee_raw.get(UTILISATION_KEY), SourceKind.EMPLOYEE.value),
            )
        external = None
        if external_raw is not None:
            external = ExternalVariant(
                firstname=_to_str_or_none(external_raw.get("firstname")),
                lastname=_to_str_or_none(external_raw.get("lastname")),
                utilisation=self._aggregate(external_raw.get(UTILISATION_KEY), SourceKind.EXTERNAL.value),
            )
        team = None
        if team_raw is not None:
            team = TeamVariant(
                name=_to_str_or_none(team_raw.get("name")),
                utilisation=self._aggregate(team_raw.get(UTILISATION_KEY), SourceKind.TEAM.value),
            )

        if employee is None and external is None and team is None:
            self._warn("NO_SOURCE_BRANCH", None, "record has no employees/externals/teams data")

        return CollectResult(
            record=SourceRecord(
                line_no=self.line_no,
                record_id=record_id,
                employee=employee,
                external=external,
                team=team,
            ),
            warnings=self.warnings,
        )

    def _aggregate(self, value: Any, branch: str) -> UtilisationAggregate | None:
        field = f"{branch}.{UTILISATION_KEY}"
        if value is None:
            return None
        data = self._object(value, field)
        if data is None:
            # Присутствующее не-null значение всё равно занимает приоритет ветки,
            # все ставки и доход получают значения по умолчанию.
            return UtilisationAggregate()

        months_raw = self._list(data.get("lastThreeMonthsIndividually"), f"{field}.lastThreeMonthsIndividually")
        months = None
        if months_raw is not None:
            months = tuple(
                MonthRate(
                    month=_to_str_or_none(item.get("month")),
                    utilisation_rate=_to_str_or_none(item.get("utilisationRate")),
                )
                for item in months_raw
                if self._object(item, f"{field}.lastThreeMonthsIndividually[]") is not None
            )

        earnings_raw = self._list(data.get("quarterEarnings"), f"{field}.quarterEarnings")
        earnings = None
        if earnings_raw is not None:
            earnings = tuple(
                QuarterEarning(
                    name=_to_str_or_none(item.get("name")),
                    start=_to_str_or_none(item.get("start")),
                    end=_to_str_or_none(item.get("end")),
                    earnings=item.get("earnings"),
                )
                for item in earnings_raw
                if self._object(item, f"{field}.quarterEarnings[]") is not None
            )

        return UtilisationAggregate(
            utilisation_rate_last_twelve_months=_to_str_or_none(data.get("utilisationRateLastTwelveMonths")),
            utilisation_rate_year_to_date=_to_str_or_none(data.get("utilisationRateYearToDate")),
            last_three_months_individually=months,
            quarter_earnings=earnings,
        )


def parse_source_records(items: Iterable[Any]) -> Iterator[CollectResult]:
    """
    Назначение:
        Разбор последовательности сырых записей; одна CollectResult на каждый элемент,
        порядок сохраняется.
    """
    for index, raw in enumerate(items, start=1):
        yield _RecordParser(line_no=index).parse(raw)


def load_source_records(path: str) -> list[CollectResult]:
    """
    Назначение:
        Загрузка JSON-файла исходных записей.

    Исключения:
        SourceFormatError: файл не читается, невалидный JSON или неподдерживаемая структура.
    """
    return list(parse_source_records(_read_json_list(path)))
