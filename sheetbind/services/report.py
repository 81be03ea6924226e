from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from ..models.row_error import RowError

"""Tabular views of row errors for inspection and export."""

__all__ = [
    "ERROR_COLUMNS",
    "errors_to_frame",
]

ERROR_COLUMNS = [
    "physical_row",
    "logical_row",
    "column",
    "column_letter",
    "field",
    "column_name",
    "value",
    "error_type",
    "message",
]


def errors_to_frame(errors: Sequence[RowError]) -> pd.DataFrame:
    """One row per RowError, in the order given.

    Row and column numbers use the nullable Int64 dtype since row-read
    failures carry no logical row and validator failures may lack a column.
    """
    df = pd.DataFrame([e.to_dict() for e in errors], columns=ERROR_COLUMNS)
    for col in ("physical_row", "logical_row", "column"):
        df[col] = df[col].astype("Int64")
    return df
