from __future__ import annotations

from dataclasses import asdict
from typing import Any

from workforce_table.common.time import getNowIso
from workforce_table.domain.models import DiagnosticStage, TableRow, ValidationErrorItem
from workforce_table.domain.reporting.models import (
    ReportDiagnostic,
    ReportEnvelope,
    ReportItem,
    ReportMeta,
    ReportSummary,
)
from workforce_table.domain.transform.result import TransformResult


class ReportCollector:
    """
    Назначение/ответственность:
        Сборщик отчёта по запуску: счётчики, диагностика по записям, метаданные.

    Поведение:
        - в items попадают только записи с диагностикой, не больше items_limit;
        - при переполнении выставляется meta.items_truncated.
    """

    def __init__(self, run_id: str, command: str, started_at: str | None = None) -> None:
        self.meta = ReportMeta(
            run_id=run_id,
            command=command,
            started_at=started_at or getNowIso(),
        )
        self.summary = ReportSummary()
        self.items: list[ReportItem] = []
        self.context: dict[str, Any] = {}
        self.status: str | None = None

    def set_context(self, name: str, value: dict[str, Any]) -> None:
        self.context[name] = value

    def add_result(self, result: TransformResult[TableRow]) -> None:
        self.summary.rows_total += 1

        source = result.row_ref.source if result.row_ref and result.row_ref.source else "none"
        self.summary.by_source[source] = self.summary.by_source.get(source, 0) + 1

        if not result.warnings:
            return
        self.summary.rows_with_warnings += 1
        self._count_warnings(result.warnings)

        if self.meta.items_limit is not None and len(self.items) >= self.meta.items_limit:
            self.meta.items_truncated = True
            return
        self.items.append(
            ReportItem(
                status="WARN",
                row_ref=result.row_ref,
                payload=result.row.as_dict() if result.row else None,
                diagnostics=[self._from_warning(w) for w in result.warnings],
            )
        )

    def finish(self, finished_at: str | None = None, duration_ms: int | None = None) -> None:
        self.meta.finished_at = finished_at or getNowIso()
        self.meta.duration_ms = duration_ms
        if self.status is None:
            self.status = self._derive_status()

    def build(self) -> ReportEnvelope:
        return ReportEnvelope(
            status=self.status or self._derive_status(),
            meta=self.meta,
            summary=self.summary,
            items=self.items,
            context=self.context,
        )

    def _derive_status(self) -> str:
        # Ошибок на уровне записи нет: любое отсутствие данных заменяется значением по умолчанию.
        if self.summary.warnings_total == 0:
            return "SUCCESS"
        return "SUCCESS_WITH_WARNINGS"

    def _count_warnings(self, warnings: list[ValidationErrorItem]) -> None:
        self.summary.warnings_total += len(warnings)
        for warning in warnings:
            key = warning.stage.value if isinstance(warning.stage, DiagnosticStage) else str(warning.stage)
            self.summary.by_stage[key] = self.summary.by_stage.get(key, 0) + 1

    @staticmethod
    def _from_warning(item: ValidationErrorItem) -> ReportDiagnostic:
        return ReportDiagnostic(
            stage=item.stage,
            code=item.code,
            field=item.field,
            message=item.message,
        )


def asdict_report(envelope: ReportEnvelope) -> dict[str, Any]:
    """
    Назначение:
        Сериализация отчёта в dict для json.dump.
    """
    return {
        "status": envelope.status,
        "meta": asdict(envelope.meta),
        "summary": asdict(envelope.summary),
        "items": [
            {
                "status": item.status,
                "row_ref": asdict(item.row_ref) if item.row_ref else None,
                "payload": item.payload,
                "diagnostics": [
                    {**asdict(diag), "stage": diag.stage.value} for diag in item.diagnostics
                ],
            }
            for item in envelope.items
        ],
        "context": envelope.context,
    }
