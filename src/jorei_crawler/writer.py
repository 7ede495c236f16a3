"""Persist ordinance records and the collection index."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import TextIO

from .errors import OutputError
from .models import IndexEntry, OrdinanceRecord
from .utils import ensure_dir, safe_filename


class OutputWriter:
    """Writes one JSON file per ordinance plus a JSON Lines index.

    The index is truncated when the writer is entered, so two runs against an
    unchanged listing leave identical index files. An index line is appended
    only after the record file has been flushed to disk.
    """

    def __init__(self, output_dir: Path, index_path: Path):
        self.output_dir = Path(output_dir)
        self.index_path = Path(index_path)
        self._index: TextIO | None = None
        self._count = 0

    def __enter__(self) -> "OutputWriter":
        try:
            ensure_dir(self.output_dir)
            ensure_dir(self.index_path.parent)
            self._index = open(self.index_path, "w", encoding="utf-8")
        except OSError as exc:
            raise OutputError(f"cannot open index: {exc}", url=str(self.index_path)) from exc
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        if self._index:
            self._index.close()
            self._index = None

    def record_path(self, record: OrdinanceRecord) -> Path:
        return self.output_dir / f"{safe_filename(record.id)}.json"

    def write(self, record: OrdinanceRecord) -> IndexEntry:
        if self._index is None:
            raise RuntimeError("Writer not initialized. Use with context manager.")
        path = self.record_path(record)
        try:
            with path.open("w", encoding="utf-8") as handle:
                json.dump(record.to_dict(), handle, ensure_ascii=False, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
        except OSError as exc:
            raise OutputError(
                f"cannot write record: {exc}", url=str(path), context={"id": record.id}
            ) from exc

        entry = IndexEntry.for_record(record, path)
        try:
            self._index.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")
            self._index.flush()
            os.fsync(self._index.fileno())
        except OSError as exc:
            raise OutputError(
                f"cannot append index line: {exc}",
                url=str(self.index_path),
                context={"id": record.id},
            ) from exc
        self._count += 1
        return entry

    @property
    def count(self) -> int:
        return self._count
