from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


class OpsLogger:
    """Append-only JSONL log of crawl events.

    - One JSON object per line (UTF-8), stamped with event name and UTC time
    - Thread-safe (coarse lock)
    - Best-effort: never raises to caller
    """

    def __init__(self, file_path: Path | str, also_stdout: bool = False, run_id: Optional[str] = None) -> None:
        self.file_path = Path(file_path)
        self.also_stdout = bool(also_stdout)
        self.run_id = run_id or datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        self._lock = threading.Lock()
        try:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass

    def event(self, name: str, **fields: Any) -> None:
        record: Dict[str, Any] = {
            "dcc_ops": 1,
            "event": name,
            "run_id": self.run_id,
            "ts": datetime.now(timezone.utc).isoformat(),
        }
        record.update(fields)
        self.emit(record)

    def emit(self, record: Dict[str, Any]) -> None:
        try:
            line = json.dumps(record, ensure_ascii=False, default=str)
        except (TypeError, ValueError):
            line = json.dumps({"dcc_ops": 1, "_serialization_error": True, "record_str": str(record)})
        try:
            with self._lock:
                with self.file_path.open("a", encoding="utf-8") as f:
                    f.write(line)
                    f.write("\n")
        except OSError:
            # Never propagate logging errors
            pass
        if self.also_stdout:
            print(line)


class NullOpsLogger:
    """Stand-in used when no ops log was requested."""

    def event(self, name: str, **fields: Any) -> None:
        return None

    def emit(self, record: Dict[str, Any]) -> None:
        return None
