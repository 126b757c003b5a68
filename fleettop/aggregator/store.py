# fleettop/aggregator/store.py
from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..db import session_scope
from ..errors import PersistError
from ..models import ProcessSampleRow, as_utc
from ..schemas import MetricSnapshot


class ProcessSampleStore:
    """Normalises agent snapshots into one row per (snapshot, process)."""

    def __init__(self, session_factory: Optional[sessionmaker] = None):
        self._factory = session_factory

    def insert(self, server_id: int, snapshots: Iterable[MetricSnapshot]) -> int:
        """Insert rows tagged with ``server_id``; returns how many were new.

        Rows already stored under the same (server_id, pid, timestamp) are
        ignored, so re-polling an overlapping window is harmless.
        """
        values = []
        for snap in snapshots:
            ts = as_utc(snap.timestamp)
            seen = set()
            for p in snap.processes:
                if p.pid in seen:
                    continue
                seen.add(p.pid)
                values.append({
                    "timestamp": ts,
                    "pid": p.pid,
                    "name": p.name,
                    "cpu": p.cpu_percent,
                    "memory": p.memory_percent,
                    "server_id": server_id,
                })
        if not values:
            return 0

        stmt = insert(ProcessSampleRow.__table__).on_conflict_do_nothing(
            index_elements=["server_id", "pid", "timestamp"]
        )
        inserted = 0
        try:
            with session_scope(self._factory) as s:
                for row in values:
                    inserted += s.execute(stmt, row).rowcount
        except SQLAlchemyError as e:
            raise PersistError(f"failed to insert process samples for server {server_id}: {e}") from e
        return inserted
