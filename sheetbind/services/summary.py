from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..models.row_error import RowError

"""Summary line rendering for check runs.

Format::

    SUMMARY rows={rows} valid={valid} invalid={invalid} errors={errors} elapsed_sec={elapsed}
"""

__all__ = [
    "ReadSummary",
    "summarize",
    "render_summary_line",
]


@dataclass(frozen=True)
class ReadSummary:
    """Aggregated counts of one read or stream run."""
    rows: int  # data rows seen (blank rows excluded)
    valid: int  # rows that produced a record
    errors: int  # total row errors
    invalid_rows: int  # distinct physical rows with at least one error
    start_time: datetime
    end_time: datetime

    @property
    def elapsed_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()


def summarize(
    rows: int, valid: int, errors: list[RowError], start_time: datetime, end_time: datetime
) -> ReadSummary:
    return ReadSummary(
        rows=rows,
        valid=valid,
        errors=len(errors),
        invalid_rows=len({e.physical_row for e in errors}),
        start_time=start_time,
        end_time=end_time,
    )


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(summary: ReadSummary) -> str:
    """Render the SUMMARY line.

    >>> from datetime import datetime, timezone
    >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
    >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
    >>> render_summary_line(ReadSummary(10, 8, 3, 2, start, end))
    'SUMMARY rows=10 valid=8 invalid=2 errors=3 elapsed_sec=2'
    """
    return (
        f"SUMMARY rows={summary.rows} "
        f"valid={summary.valid} "
        f"invalid={summary.invalid_rows} "
        f"errors={summary.errors} "
        f"elapsed_sec={_format_seconds(summary.elapsed_seconds)}"
    )
