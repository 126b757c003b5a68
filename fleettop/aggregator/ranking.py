# fleettop/aggregator/ranking.py
from __future__ import annotations

import enum
from datetime import timedelta
from typing import List, Optional, Union

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from ..db import session_scope
from ..durations import parse_duration
from ..errors import InvalidArgument
from ..models import ProcessSampleRow, as_utc, utcnow
from ..schemas import ProcessInfo


class RankMetric(str, enum.Enum):
    CPU = "cpu"
    MEMORY = "memory"


INVALID_METRIC = "Invalid type. Must be 'cpu' or 'memory'"

# one fixed ordering per metric; the column is never taken from user input
_ORDERINGS = {
    RankMetric.CPU: (ProcessSampleRow.cpu.desc(), ProcessSampleRow.id.asc()),
    RankMetric.MEMORY: (ProcessSampleRow.memory.desc(), ProcessSampleRow.id.asc()),
}


def parse_metric(value) -> RankMetric:
    try:
        return RankMetric(value)
    except ValueError:
        raise InvalidArgument(INVALID_METRIC) from None


class RankingQuery:
    """Top-N processes for one server over a trailing window."""

    def __init__(self, session_factory: Optional[sessionmaker] = None, default_limit: int = 10):
        self._factory = session_factory
        self.default_limit = default_limit

    def top(
        self,
        metric: Union[str, RankMetric],
        duration: Union[str, timedelta],
        server_id: int,
        limit: Optional[int] = None,
    ) -> List[ProcessInfo]:
        metric = parse_metric(metric)
        if isinstance(duration, str):
            try:
                duration = parse_duration(duration)
            except InvalidArgument:
                raise InvalidArgument("Invalid duration format") from None
        limit = self.default_limit if limit is None else limit
        if limit < 1:
            raise InvalidArgument("limit must be at least 1")

        threshold = as_utc(utcnow() - duration)
        q = (
            select(ProcessSampleRow.pid, ProcessSampleRow.name, ProcessSampleRow.cpu, ProcessSampleRow.memory)
            .where(ProcessSampleRow.timestamp >= threshold, ProcessSampleRow.server_id == server_id)
            .order_by(*_ORDERINGS[metric])
            .limit(limit)
        )
        with session_scope(self._factory) as s:
            return [
                ProcessInfo(pid=r.pid, name=r.name, cpu=r.cpu, memory=r.memory)
                for r in s.execute(q)
            ]
