from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

from ..models.row_error import RowError

"""Row error log buffering.

Row errors are buffered in memory and appended as JSON Lines to
``logs/errors-YYYYMMDD-HHMMSS.log`` (UTC) on flush. Each line carries the
timestamp, workbook, sheet and the RowError fields.
"""

__all__ = [
    "LOGS_DIR",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for row errors. Flush writes JSON Lines.

    The file path is decided on first access. Not thread safe; one buffer
    belongs to one read operation.
    """

    def __init__(self, file: str = "", sheet: str = "", logs_dir: Path | None = None) -> None:
        self.file = file
        self.sheet = sheet
        self.logs_dir = logs_dir or LOGS_DIR
        self._records: list[RowError] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self.logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: RowError) -> None:
        self._records.append(record)

    def extend(self, records: list[RowError]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def to_line(self, record: RowError) -> str:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        entry = {"timestamp": ts, "file": self.file, "sheet": self.sheet}
        entry.update(record.to_dict())
        return json.dumps(entry, ensure_ascii=False)

    def flush(self) -> Path:
        if not self._records:
            return self.file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(self.to_line(r) + "\n")
        self._records.clear()
        return fp
