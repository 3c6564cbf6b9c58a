from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from workforce_table.domain.models import DiagnosticStage, RowRef


@dataclass
class ReportMeta:
    """
    Назначение:
        Универсальные метаданные запуска команды.
    """

    run_id: str
    command: str
    started_at: str
    source_path: str | None = None
    reference_date: str | None = None
    finished_at: str | None = None
    duration_ms: int | None = None
    items_limit: int | None = None
    items_truncated: bool = False


@dataclass
class ReportSummary:
    rows_total: int = 0
    rows_with_warnings: int = 0
    warnings_total: int = 0
    by_stage: dict[str, int] = field(default_factory=dict)
    by_source: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ReportDiagnostic:
    stage: DiagnosticStage
    code: str
    field: str | None
    message: str


@dataclass
class ReportItem:
    """
    Назначение:
        Единица отчёта, привязанная к конкретной записи.
    """

    status: str
    row_ref: RowRef | None = None
    payload: Mapping[str, Any] | None = None
    diagnostics: list[ReportDiagnostic] = field(default_factory=list)


@dataclass
class ReportEnvelope:
    """
    Назначение:
        Корневой объект отчёта.
    """

    status: str
    meta: ReportMeta
    summary: ReportSummary
    items: list[ReportItem]
    context: dict[str, Any] = field(default_factory=dict)
