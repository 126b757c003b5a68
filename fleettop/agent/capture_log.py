# fleettop/agent/capture_log.py
from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError

from ..errors import DecodeError, PersistError
from ..schemas import MetricSnapshot

log = structlog.get_logger()


class CaptureLog:
    """Append-only newline-delimited JSON file of MetricSnapshots.

    Records are never rewritten; reads stream the file one line at a time.
    """

    def __init__(self, path: Path, strict: bool = False):
        self.path = Path(path)
        self.strict = strict
        self._write_lock = threading.Lock()

    def append(self, snapshot: MetricSnapshot) -> None:
        line = snapshot.to_json() + "\n"
        try:
            with self._write_lock:
                if self.path.parent != Path("."):
                    self.path.parent.mkdir(parents=True, exist_ok=True)
                with open(self.path, "a", encoding="utf-8") as f:
                    f.write(line)
        except OSError as e:
            raise PersistError(f"failed to append snapshot to {self.path}: {e}") from e

    def iter_since(self, since: Optional[datetime] = None, strict: Optional[bool] = None) -> Iterator[MetricSnapshot]:
        """Yield snapshots with timestamp strictly after ``since`` in append order.

        A missing file yields nothing. Malformed lines are logged and skipped
        unless ``strict``, in which case DecodeError aborts the read.
        """
        strict = self.strict if strict is None else strict
        try:
            f = open(self.path, "r", encoding="utf-8")
        except FileNotFoundError:
            return
        with f:
            for lineno, raw in enumerate(f, start=1):
                raw = raw.strip()
                if not raw:
                    continue
                try:
                    snap = MetricSnapshot.model_validate_json(raw)
                except PydanticValidationError as e:
                    if strict:
                        raise DecodeError(f"{self.path}:{lineno}: malformed snapshot record") from e
                    log.warning("capture_log_record_skipped", path=str(self.path), line=lineno)
                    continue
                if since is None or snap.timestamp > since:
                    yield snap

    def query(self, since: Optional[datetime] = None, strict: Optional[bool] = None) -> List[MetricSnapshot]:
        return list(self.iter_since(since, strict=strict))
