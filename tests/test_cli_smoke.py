import json
from pathlib import Path

from typer.testing import CliRunner
from workforce_table.main import app

runner = CliRunner()

SOURCE = [
    {
        "employees": {
            "firstname": "Ann",
            "lastname": "Lee",
            "workforceUtilisation": {
                "utilisationRateLastTwelveMonths": "80",
                "utilisationRateYearToDate": "n/a",
                "lastThreeMonthsIndividually": [{"month": "May", "utilisationRate": "75"}],
                "quarterEarnings": [
                    {"name": "Q1", "start": "2024-01-01", "end": "2024-03-31", "earnings": 5000}
                ],
            },
        }
    },
    {"teams": {"name": "Team X"}},
]


def _dirs(tmp_path: Path) -> list[str]:
    return ["--log-dir", str(tmp_path / "logs"), "--report-dir", str(tmp_path / "reports")]


def _source(tmp_path: Path) -> str:
    path = tmp_path / "source-data.json"
    path.write_text(json.dumps(SOURCE), encoding="utf-8")
    return str(path)


def test_help_shows_commands():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "build" in result.stdout
    assert "columns" in result.stdout


def test_columns_lists_schema(tmp_path: Path):
    result = runner.invoke(app, [*_dirs(tmp_path), "columns"])
    assert result.exit_code == 0
    assert "netEarningsPrevMonth\tNet Earnings Prev Month" in result.stdout


def test_build_requires_input(tmp_path: Path):
    result = runner.invoke(app, [*_dirs(tmp_path), "build"])
    assert result.exit_code == 2


def test_build_missing_file(tmp_path: Path):
    result = runner.invoke(app, [*_dirs(tmp_path), "build", "--input", str(tmp_path / "nope.json")])
    assert result.exit_code == 2


def test_build_invalid_json(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")
    result = runner.invoke(app, [*_dirs(tmp_path), "build", "--input", str(path)])
    assert result.exit_code == 2


def test_build_invalid_as_of(tmp_path: Path):
    result = runner.invoke(app, [*_dirs(tmp_path), "--as-of", "April", "build", "--input", _source(tmp_path)])
    assert result.exit_code == 2


def test_build_writes_json_table_and_report(tmp_path: Path):
    output = tmp_path / "out" / "table.json"
    result = runner.invoke(
        app,
        [
            *_dirs(tmp_path),
            "--run-id", "run-1",
            "--as-of", "2024-04-10",
            "build",
            "--input", _source(tmp_path),
            "--output", str(output),
        ],
    )
    assert result.exit_code == 0, result.output

    table = json.loads(output.read_text(encoding="utf-8"))
    assert [c["key"] for c in table["columns"]][0] == "person"
    assert table["rows"][0] == {
        "person": "Ann Lee",
        "past12Months": "80%",
        "y2d": "NaN%",
        "may": "75%",
        "june": "0%",
        "july": "0%",
        "netEarningsPrevMonth": "5000 EUR",
    }
    assert table["rows"][1]["person"] == "Team X"
    assert table["rows"][1]["netEarningsPrevMonth"] == "0 EUR"

    report = json.loads((tmp_path / "reports" / "report_build_run-1.json").read_text(encoding="utf-8"))
    assert report["status"] == "SUCCESS_WITH_WARNINGS"
    assert report["meta"]["reference_date"] == "2024-03-01"
    assert report["summary"]["rows_total"] == 2
    assert report["summary"]["warnings_total"] == 1
    assert report["items"][0]["diagnostics"][0]["code"] == "RATE_NOT_NUMERIC"

    log_text = (tmp_path / "logs" / "build_run-1.log").read_text(encoding="utf-8")
    assert "RATE_NOT_NUMERIC" in log_text


def test_build_zero_policy_and_csv(tmp_path: Path):
    output = tmp_path / "table.csv"
    result = runner.invoke(
        app,
        [
            *_dirs(tmp_path),
            "--as-of", "2024-04-10",
            "--invalid-rate-policy", "zero",
            "build",
            "--input", _source(tmp_path),
            "--format", "csv",
            "--output", str(output),
        ],
    )
    assert result.exit_code == 0, result.output

    lines = output.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Person,Past 12 Months,Y2D,May,June,July,Net Earnings Prev Month"
    assert lines[1] == "Ann Lee,80%,0%,75%,0%,0%,5000 EUR"
    assert lines[2] == "Team X,0%,0%,0%,0%,0%,0 EUR"
