from datetime import datetime
from typing import Iterable, Tuple

import pytest

from fleettop.agent import CaptureLog
from fleettop.db import init_db, make_engine, make_session_factory
from fleettop.schemas import MetricSnapshot, ProcessSample


def make_snapshot(
    ts: datetime,
    cpu: Iterable[float] = (10.0, 20.0),
    processes: Iterable[Tuple[int, str, float, float]] = (),
) -> MetricSnapshot:
    return MetricSnapshot(
        timestamp=ts,
        cpu_percentages=list(cpu),
        processes=[
            ProcessSample(pid=pid, name=name, cpu_percent=c, memory_percent=m)
            for pid, name, c, m in processes
        ],
    )


@pytest.fixture
def capture_log(tmp_path):
    return CaptureLog(tmp_path / "htop_data.json")


@pytest.fixture
def session_factory(tmp_path):
    engine = make_engine(tmp_path / "metrics.db")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()
