from __future__ import annotations

import csv
import io
import json
from enum import Enum
from typing import Iterable

from workforce_table.domain.columns import COLUMNS, ColumnSpec
from workforce_table.domain.models import TableRow


class OutputFormat(str, Enum):
    JSON = "json"
    CSV = "csv"


def render_json(rows: Iterable[TableRow], columns: tuple[ColumnSpec, ...] = COLUMNS) -> str:
    """
    Назначение:
        Таблица для внешнего компонента отображения: схема колонок + строки.
    """
    data = {
        "columns": [{"key": c.key, "header": c.header} for c in columns],
        "rows": [row.as_dict() for row in rows],
    }
    return json.dumps(data, ensure_ascii=False, indent=2)


def render_csv(rows: Iterable[TableRow], columns: tuple[ColumnSpec, ...] = COLUMNS) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([c.header for c in columns])
    for row in rows:
        values = row.as_dict()
        writer.writerow([values[c.key] for c in columns])
    return buffer.getvalue()


def render_table(rows: Iterable[TableRow], output_format: OutputFormat) -> str:
    if output_format is OutputFormat.CSV:
        return render_csv(rows)
    return render_json(rows)
