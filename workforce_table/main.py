from __future__ import annotations

import logging
import sys
import time
from pathlib import Path

import typer

from workforce_table.common.run_id import generate_run_id
from workforce_table.common.time import getDurationMs
from workforce_table.config import Settings, load_settings
from workforce_table.domain.columns import COLUMNS
from workforce_table.domain.transform.pipeline import TablePipeline
from workforce_table.domain.transform.row_formatter import RowFormatter
from workforce_table.infra.artifacts.report_writer import createEmptyReport, finalizeReport, writeReportJson
from workforce_table.infra.artifacts.table_writer import OutputFormat, render_table
from workforce_table.infra.logging.setup import (
    StdStreamToLogger,
    TeeStream,
    closeCommandLogger,
    createCommandLogger,
    logEvent,
)
from workforce_table.infra.sources.json_source import SourceFormatError, load_source_records

app = typer.Typer(no_args_is_help=True, add_completion=False)

def ensureDir(path: str) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)

def requireInput(inputPath: str | None) -> None:
    """
    Назначение:
        Проверка наличия входного JSON-файла.

    Поведение:
        - Если путь не задан или файл не существует, exit code 2.
    """
    if not inputPath:
        typer.echo("ERROR: --input is required", err=True)
        raise typer.Exit(code=2)

    p = Path(inputPath)
    if not p.exists() or not p.is_file():
        typer.echo(f"ERROR: input file not found: {inputPath}", err=True)
        raise typer.Exit(code=2)

def printRunHeader(runId: str, command: str, settings: Settings, sources: list[str]) -> None:
    """
    Назначение:
        Печатает сводку параметров запуска в stderr, stdout остаётся под данные.
    """
    typer.echo(
        f"run_id={runId} command={command} "
        f"as_of={settings.today().isoformat()} invalid_rate_policy={settings.invalid_rate_policy.value} "
        f"sources={sources} log_level={settings.log_level}",
        err=True,
    )

def runWithReport(ctx: typer.Context, commandName: str, inputPath: str | None, runner) -> None:
    """
    Назначение:
        Унифицированная обвязка выполнения команды:
        - создаёт логгер + файл лога
        - создаёт report.json skeleton
        - валидирует наличие входного файла
        - дублирует stderr в лог
        - гарантирует запись отчёта в finally
    """
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]
    sources = ctx.obj["sources"]

    startMonotonic = time.monotonic()

    logger, logFilePath = createCommandLogger(
        commandName=commandName,
        logDir=settings.log_dir,
        runId=runId,
        logLevel=settings.log_level,
    )

    report = createEmptyReport(runId=runId, command=commandName, configSources=sources)
    report.meta.source_path = inputPath
    report.meta.items_limit = settings.report_items_limit

    originalStderr = sys.stderr
    sys.stderr = TeeStream(originalStderr, StdStreamToLogger(logger, logging.ERROR, runId, "stderr"))

    exitCode: int | None = None

    try:
        logEvent(logger, logging.INFO, runId, "core", "Command started")
        printRunHeader(runId, commandName, settings, sources)

        try:
            requireInput(inputPath)
        except typer.Exit:
            logEvent(logger, logging.ERROR, runId, "source", "Input is missing or not accessible")
            exitCode = 2
            return

        exitCode = runner(logger, report)

    finally:
        durationMs = getDurationMs(startMonotonic, time.monotonic())
        finalizeReport(report=report, durationMs=durationMs, logFile=logFilePath, reportDir=settings.report_dir)
        reportPath = writeReportJson(report, settings.report_dir, f"report_{commandName}_{runId}")
        logEvent(logger, logging.INFO, runId, "report", f"Report written: {reportPath}")

        sys.stderr = originalStderr
        closeCommandLogger(logger)

        if exitCode is not None and exitCode != 0:
            raise typer.Exit(code=exitCode)

def runBuildCommand(ctx: typer.Context, inputPath: str | None, outputPath: str | None, outputFormat: OutputFormat) -> None:
    settings: Settings = ctx.obj["settings"]
    runId = ctx.obj["runId"]

    def execute(logger: logging.Logger, report) -> int:
        try:
            collected = load_source_records(inputPath)
        except SourceFormatError as exc:
            logEvent(logger, logging.ERROR, runId, "source", str(exc))
            typer.echo(f"ERROR: {exc}", err=True)
            return 2

        pipeline = TablePipeline(
            settings.today(),
            formatter=RowFormatter(invalid_rate_policy=settings.invalid_rate_policy),
        )
        report.meta.reference_date = pipeline.reference
        logEvent(
            logger,
            logging.INFO,
            runId,
            "transform",
            f"Building table: records={len(collected)} reference_date={pipeline.reference}",
        )

        results = pipeline.run(collected)
        for result in results:
            report.add_result(result)
            for warning in result.warnings:
                logEvent(
                    logger,
                    logging.WARNING,
                    runId,
                    "transform",
                    f"{result.record.record_id} {warning.code} field={warning.field} {warning.message}",
                )

        rendered = render_table([result.row for result in results], outputFormat)
        if outputPath:
            ensureDir(str(Path(outputPath).parent))
            Path(outputPath).write_text(rendered, encoding="utf-8")
            logEvent(logger, logging.INFO, runId, "output", f"Table written: {outputPath}")
        else:
            typer.echo(rendered.rstrip("\n"))

        logEvent(
            logger,
            logging.INFO,
            runId,
            "core",
            f"Command finished: rows={report.summary.rows_total} warnings={report.summary.warnings_total}",
        )
        return 0

    runWithReport(ctx=ctx, commandName="build", inputPath=inputPath, runner=execute)

@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to config.yml"),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier (UUID). If omitted, generated."),
    logLevel: str | None = typer.Option(None, "--log-level", help="Log level: ERROR|WARN|INFO|DEBUG"),
    logDir: str | None = typer.Option(None, "--log-dir", help="Directory for logs."),
    reportDir: str | None = typer.Option(None, "--report-dir", help="Directory for reports."),
    asOf: str | None = typer.Option(None, "--as-of", help="Evaluation date yyyy-mm-dd (default: today)"),
    invalidRatePolicy: str | None = typer.Option(
        None,
        "--invalid-rate-policy",
        help="Non-numeric rates: passthrough (NaN%) | zero (0%)",
    ),
    reportItemsLimit: int | None = typer.Option(None, "--report-items-limit", help="Limit report items stored"),
):
    """
    Назначение:
        Глобальная инициализация CLI:
        - генерирует/принимает run_id
        - загружает настройки (CLI > ENV > config > defaults)
        - создаёт каталоги log/report
        - сохраняет всё в ctx.obj для подкоманд
    """
    if not runId:
        runId = generate_run_id()

    cliOverrides = {
        "log_level": logLevel,
        "log_dir": logDir,
        "report_dir": reportDir,
        "as_of": asOf,
        "invalid_rate_policy": invalidRatePolicy,
        "report_items_limit": reportItemsLimit,
    }
    try:
        loaded = load_settings(config_path=config, cli_overrides=cliOverrides)
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=2)

    ensureDir(loaded.settings.log_dir)
    ensureDir(loaded.settings.report_dir)

    ctx.obj = {
        "runId": runId,
        "settings": loaded.settings,
        "sources": loaded.sources_used,
    }

@app.command()
def build(
    ctx: typer.Context,
    input: str | None = typer.Option(None, "--input", help="Path to source records JSON"),
    output: str | None = typer.Option(None, "--output", help="Write table to file instead of stdout"),
    outputFormat: OutputFormat = typer.Option(OutputFormat.JSON, "--format", help="Output format"),
):
    runBuildCommand(ctx, input, output, outputFormat)

@app.command()
def columns():
    """
    Печатает схему колонок таблицы (key<TAB>header).
    """
    for column in COLUMNS:
        typer.echo(f"{column.key}\t{column.header}")
