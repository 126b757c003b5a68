# fleettop/aggregator/__init__.py
from __future__ import annotations

from typing import Optional

from ..config import get_config
from ..db import get_session_factory
from ..durations import parse_duration
from .poller import Aggregator
from .ranking import RankingQuery, RankMetric
from .registry import ServerRegistry
from .store import ProcessSampleStore

__all__ = [
    "Aggregator", "ProcessSampleStore", "RankingQuery", "RankMetric", "ServerRegistry",
    "get_registry", "get_ranking", "get_aggregator",
]

_registry: Optional[ServerRegistry] = None
_ranking: Optional[RankingQuery] = None
_aggregator: Optional[Aggregator] = None


def get_registry() -> ServerRegistry:
    global _registry
    if _registry is None:
        _registry = ServerRegistry(get_session_factory())
    return _registry


def get_ranking() -> RankingQuery:
    global _ranking
    if _ranking is None:
        _ranking = RankingQuery(get_session_factory(), default_limit=get_config().aggregator.top_limit)
    return _ranking


def get_aggregator() -> Aggregator:
    global _aggregator
    if _aggregator is None:
        cfg = get_config().aggregator
        _aggregator = Aggregator(
            get_registry(),
            ProcessSampleStore(get_session_factory()),
            window=parse_duration(cfg.poll_window),
            interval=cfg.poll_interval,
            timeout=cfg.fetch_timeout,
        )
    return _aggregator
