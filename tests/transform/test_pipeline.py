from __future__ import annotations

from datetime import date

from workforce_table.domain.models import (
    EmployeeVariant,
    ExternalVariant,
    MonthRate,
    QuarterEarning,
    ResolvedEntity,
    SourceRecord,
    TeamVariant,
    UtilisationAggregate,
)
from workforce_table.domain.transform.pipeline import TablePipeline, build_table_rows
from workforce_table.domain.transform.row_formatter import RowFormatter, format_earnings
from workforce_table.domain.transform.utilisation import InvalidRatePolicy
from workforce_table.infra.sources.json_source import parse_source_records

APRIL_2024 = date(2024, 4, 15)


def _record(line_no: int = 1, **branches) -> SourceRecord:
    return SourceRecord(line_no=line_no, record_id=f"record:{line_no}", **branches)


def test_employee_row():
    aggregate = UtilisationAggregate(
        utilisation_rate_last_twelve_months="80",
        last_three_months_individually=(MonthRate(month="May", utilisation_rate="75"),),
    )
    [row] = build_table_rows(
        [_record(employee=EmployeeVariant(firstname="Ann", lastname="Lee", utilisation=aggregate))],
        APRIL_2024,
    )

    assert row.person == "Ann Lee"
    assert row.past_12_months == "80%"
    assert row.y2d == "0%"
    assert row.may == "75%"
    assert row.june == "0%"
    assert row.july == "0%"
    assert row.net_earnings_prev_month == "0 EUR"


def test_team_without_aggregate_defaults_everything():
    [row] = build_table_rows([_record(team=TeamVariant(name="Team X"))], APRIL_2024)

    assert row.as_dict() == {
        "person": "Team X",
        "past12Months": "0%",
        "y2d": "0%",
        "may": "0%",
        "june": "0%",
        "july": "0%",
        "netEarningsPrevMonth": "0 EUR",
    }


def test_earnings_for_previous_month():
    aggregate = UtilisationAggregate(
        quarter_earnings=(QuarterEarning(name="Q1", start="2024-01-01", end="2024-03-31", earnings=5000),)
    )
    record = _record(external=ExternalVariant(firstname="Bob", lastname="Ray", utilisation=aggregate))

    [april] = build_table_rows([record], APRIL_2024)
    [may] = build_table_rows([record], date(2024, 5, 2))

    assert april.net_earnings_prev_month == "5000 EUR"
    assert may.net_earnings_prev_month == "0 EUR"


def test_rows_are_one_to_one_and_ordered():
    records = [
        _record(1, team=TeamVariant(name="A")),
        _record(2),
        _record(3, employee=EmployeeVariant(firstname="C")),
        _record(4, team=TeamVariant(name="A")),
    ]
    rows = build_table_rows(records, APRIL_2024)

    assert [row.person for row in rows] == ["A", "", "C", "A"]


def test_non_numeric_rate_passthrough_and_warning():
    aggregate = UtilisationAggregate(utilisation_rate_last_twelve_months="n/a")
    pipeline = TablePipeline(APRIL_2024)
    result = pipeline.transform(_record(employee=EmployeeVariant(firstname="Ann", utilisation=aggregate)))

    assert result.row.past_12_months == "NaN%"
    codes = [(w.code, w.field) for w in result.warnings]
    assert codes == [("RATE_NOT_NUMERIC", "past12Months")]


def test_non_numeric_rate_zero_policy():
    aggregate = UtilisationAggregate(utilisation_rate_year_to_date="")
    [row] = build_table_rows(
        [_record(employee=EmployeeVariant(firstname="Ann", utilisation=aggregate))],
        APRIL_2024,
        invalid_rate_policy=InvalidRatePolicy.ZERO,
    )
    assert row.y2d == "0%"


def test_non_iso_earnings_date_is_flagged_but_compared_as_text():
    aggregate = UtilisationAggregate(
        quarter_earnings=(QuarterEarning(name="Q1", start="2024-01-01", end="2024-3-31", earnings=5000),)
    )
    result = TablePipeline(APRIL_2024).transform(_record(team=TeamVariant(name="T", utilisation=aggregate)))

    # "2024-03-01" <= "2024-3-31" holds as text
    assert result.row.net_earnings_prev_month == "5000 EUR"
    assert [w.code for w in result.warnings] == ["EARNINGS_DATE_NOT_ISO"]


def test_row_ref_records_aggregate_source():
    result = TablePipeline(APRIL_2024).transform(
        _record(7, team=TeamVariant(name="T", utilisation=UtilisationAggregate()))
    )
    assert result.row_ref.line_no == 7
    assert result.row_ref.row_id == "record:7"
    assert result.row_ref.source == "teams"


def test_reference_date_is_previous_month_start():
    assert TablePipeline(date(2024, 1, 31)).reference == "2023-12-01"


def test_earnings_rendered_as_is():
    assert format_earnings(5000) == "5000 EUR"
    assert format_earnings(1234.5) == "1234.5 EUR"
    assert format_earnings(5000.0) == "5000 EUR"
    assert format_earnings("0") == "0 EUR"
    assert format_earnings("4,500.00") == "4,500.00 EUR"


def test_formatter_uses_display_name_verbatim():
    row = RowFormatter().format(ResolvedEntity(display_name="  x ", aggregate=None), "0")
    assert row.person == "  x "


def test_malformed_employee_aggregate_keeps_employee_priority():
    [collected] = parse_source_records(
        [
            {
                "employees": {"firstname": "Ann", "workforceUtilisation": "n/a"},
                "teams": {"name": "T", "workforceUtilisation": {"utilisationRateLastTwelveMonths": "10"}},
            }
        ]
    )
    result = TablePipeline(APRIL_2024).transform(collected)

    assert result.row.person == "Ann"
    assert result.row.past_12_months == "0%"
    assert result.row_ref.source == "employees"
    assert ("FIELD_NOT_OBJECT", "employees.workforceUtilisation") in [
        (w.code, w.field) for w in result.warnings
    ]
