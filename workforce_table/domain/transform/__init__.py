from .resolver import EntityResolver
from .result import CollectResult, TransformResult
from .utilisation import InvalidRatePolicy, format_number, format_percent, month_rate, parse_rate, period_rate
from .earnings import match_earnings, previous_month_start, reference_date
from .row_formatter import RowFormatter
from .pipeline import TablePipeline, build_table_rows

__all__ = [
    "EntityResolver",
    "CollectResult",
    "TransformResult",
    "InvalidRatePolicy",
    "format_number",
    "format_percent",
    "month_rate",
    "parse_rate",
    "period_rate",
    "match_earnings",
    "previous_month_start",
    "reference_date",
    "RowFormatter",
    "TablePipeline",
    "build_table_rows",
]
