from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from workforce_table.domain.models import RowRef, SourceRecord, ValidationErrorItem

T = TypeVar("T")


@dataclass(frozen=True)
class CollectResult:
    """
    Назначение:
        Результат преобразования сырой JSON-записи в SourceRecord с диагностикой.
    """

    record: SourceRecord
    warnings: list[ValidationErrorItem] = field(default_factory=list)


@dataclass
class TransformResult(Generic[T]):
    """
    Назначение:
        Унифицированный результат transform-пайплайна для одной записи.
    """

    record: SourceRecord
    row: T | None
    row_ref: RowRef | None
    warnings: list[ValidationErrorItem] = field(default_factory=list)
