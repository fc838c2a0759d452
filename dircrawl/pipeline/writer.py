"""
Checkpointed Table Writer - crash-tolerant CSV output

Accumulates ContactRecords in memory and rewrites the whole table at a
record-count cadence, on request, and when an exception escapes the
``with`` block. Each flush replaces the file atomically, so the file on disk
is always a complete snapshot as of the last flush.
"""
from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from ..schemas import CSV_HEADERS, ContactRecord
from .parsers import escape_csv


def render_csv(records: Iterable[ContactRecord]) -> str:
    """Serialise records (with header row) as comma-delimited text."""
    lines = [",".join(escape_csv(h) for h in CSV_HEADERS)]
    for rec in records:
        lines.append(",".join(escape_csv(v) for v in rec.to_row()))
    return "\n".join(lines)


class CheckpointWriter:
    """Buffered writer with an injectable flush trigger.

    ``should_flush`` receives the accumulated record count after each add;
    by default it fires on every multiple of ``checkpoint_every``.
    """

    def __init__(
        self,
        path: Path | str,
        *,
        checkpoint_every: int = 10,
        should_flush: Optional[Callable[[int], bool]] = None,
        on_flush: Optional[Callable[[int, Path], None]] = None,
    ) -> None:
        if checkpoint_every < 1:
            raise ValueError("checkpoint_every must be >= 1")
        self.path = Path(path)
        self.checkpoint_every = checkpoint_every
        self.should_flush = should_flush or (lambda n: n % self.checkpoint_every == 0)
        self.on_flush = on_flush
        self.records: List[ContactRecord] = []
        self.flushes = 0
        self.flushed_count = 0

    def __enter__(self) -> "CheckpointWriter":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None:
            self.flush()
        return False

    def __len__(self) -> int:
        return len(self.records)

    def add(self, record: ContactRecord) -> bool:
        """Append a record; returns True when this add triggered a checkpoint."""
        self.records.append(record)
        if self.should_flush(len(self.records)):
            self.flush()
            return True
        return False

    def flush(self) -> Path:
        """Write the full accumulated set, replacing the previous snapshot."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = render_csv(self.records)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(data)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        self.flushes += 1
        self.flushed_count = len(self.records)
        if self.on_flush is not None:
            self.on_flush(self.flushed_count, self.path)
        return self.path
