from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Row progress display with tqdm (TTY only).

In non-TTY environments (CI, pipes) no bar is created, so log output stays
free of ANSI control sequences. The total row count of a streamed sheet is
unknown up front; the bar counts rows and shows the running error count.
"""

__all__ = [
    "RowProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class RowProgress:
    """Counts streamed rows and errors, showing a bar on a TTY."""

    def __init__(self, *, description: str = "Reading rows", enabled: bool | None = None) -> None:
        self.description = description
        self.rows = 0
        self.valid = 0
        self.errors = 0
        self.enabled = is_tty_enabled() if enabled is None else enabled
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                desc=description,
                unit="row",
                leave=True,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def update(self, valid: bool, error_count: int = 0) -> None:
        self.rows += 1
        if valid:
            self.valid += 1
        self.errors += error_count
        if self.pbar is not None:
            self.pbar.update(1)
            if error_count:
                self.pbar.set_postfix(errors=self.errors)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> RowProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
