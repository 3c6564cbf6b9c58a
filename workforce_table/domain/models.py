from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class DiagnosticStage(str, Enum):
    """
    Назначение:
        Источник диагностического события в пайплайне.
    """

    EXTRACT = "EXTRACT"
    EXTRACT_RATES = "EXTRACT_RATES"
    MATCH_EARNINGS = "MATCH_EARNINGS"


@dataclass
class ValidationErrorItem:
    """
    Назначение:
        Диагностическое сообщение пайплайна (ошибка/предупреждение).
    """
    stage: DiagnosticStage
    code: str
    field: str | None
    message: str


class SourceKind(str, Enum):
    """
    Назначение:
        Дискриминант ветки исходной записи.
    """

    EMPLOYEE = "employees"
    EXTERNAL = "externals"
    TEAM = "teams"


# Порядок приоритета веток: и для имени, и для выбора агрегата.
SOURCE_PRIORITY: tuple[SourceKind, ...] = (
    SourceKind.EMPLOYEE,
    SourceKind.EXTERNAL,
    SourceKind.TEAM,
)


class RateField(str, Enum):
    LAST_TWELVE_MONTHS = "utilisationRateLastTwelveMonths"
    YEAR_TO_DATE = "utilisationRateYearToDate"


@dataclass(frozen=True)
class MonthRate:
    month: str | None
    utilisation_rate: str | None


@dataclass(frozen=True)
class QuarterEarning:
    """
    Назначение:
        Чистый доход за явный диапазон дат (не обязательно календарный квартал).

    Инварианты:
        start/end ожидаются в виде ISO yyyy-mm-dd с ведущими нулями.
    """

    name: str | None
    start: str | None
    end: str | None
    earnings: Any


@dataclass(frozen=True)
class UtilisationAggregate:
    """
    Назначение:
        Агрегат загрузки сотрудника/подрядчика/команды.

    Инварианты:
        - ставки хранятся сырыми строками, как пришли из источника;
        - None (отсутствие) отличается от "0".
    """

    utilisation_rate_last_twelve_months: str | None = None
    utilisation_rate_year_to_date: str | None = None
    last_three_months_individually: tuple[MonthRate, ...] | None = None
    quarter_earnings: tuple[QuarterEarning, ...] | None = None

    def rate_for(self, rate_field: RateField) -> str | None:
        if rate_field is RateField.LAST_TWELVE_MONTHS:
            return self.utilisation_rate_last_twelve_months
        return self.utilisation_rate_year_to_date


@dataclass(frozen=True)
class EmployeeVariant:
    firstname: str | None = None
    lastname: str | None = None
    utilisation: UtilisationAggregate | None = None


@dataclass(frozen=True)
class ExternalVariant:
    firstname: str | None = None
    lastname: str | None = None
    utilisation: UtilisationAggregate | None = None


@dataclass(frozen=True)
class TeamVariant:
    name: str | None = None
    utilisation: UtilisationAggregate | None = None


@dataclass(frozen=True)
class SourceRecord:
    """
    Назначение:
        Исходная запись с тремя необязательными ветками.
        На практике заполнена ровно одна, но это не проверяется.
    """

    line_no: int
    record_id: str
    employee: EmployeeVariant | None = None
    external: ExternalVariant | None = None
    team: TeamVariant | None = None

    def branch(self, kind: SourceKind) -> EmployeeVariant | ExternalVariant | TeamVariant | None:
        if kind is SourceKind.EMPLOYEE:
            return self.employee
        if kind is SourceKind.EXTERNAL:
            return self.external
        return self.team


@dataclass(frozen=True)
class ResolvedEntity:
    """
    Назначение:
        Результат EntityResolver: отображаемое имя и выбранный агрегат.
    """

    display_name: str
    aggregate: UtilisationAggregate | None
    source: SourceKind | None = None


@dataclass(frozen=True)
class TableRow:
    """
    Назначение:
        Готовая строка таблицы; все значения уже отформатированы для отображения.
    """

    person: str
    past_12_months: str
    y2d: str
    may: str
    june: str
    july: str
    net_earnings_prev_month: str

    def as_dict(self) -> dict[str, str]:
        return {
            "person": self.person,
            "past12Months": self.past_12_months,
            "y2d": self.y2d,
            "may": self.may,
            "june": self.june,
            "july": self.july,
            "netEarningsPrevMonth": self.net_earnings_prev_month,
        }


@dataclass(frozen=True)
class RowRef:
    """
    Назначение:
        Ссылка на запись входного набора для отчётов.
    """
    line_no: int
    row_id: str
    source: str | None = None

