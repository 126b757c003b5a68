import json
from datetime import timedelta

import pytest

from fleettop.agent import CaptureLog
from fleettop.errors import DecodeError
from fleettop.models import utcnow

from conftest import make_snapshot


def test_query_returns_appended_snapshots_in_order(capture_log):
    now = utcnow()
    stamps = [now - timedelta(seconds=30 - i) for i in range(5)]
    for i, ts in enumerate(stamps):
        capture_log.append(make_snapshot(ts, cpu=[float(i)]))

    got = capture_log.query()
    assert [s.timestamp for s in got] == stamps
    assert [s.cpu_percentages for s in got] == [[float(i)] for i in range(5)]


def test_append_never_rewrites_previous_records(capture_log):
    now = utcnow()
    capture_log.append(make_snapshot(now - timedelta(seconds=20)))
    capture_log.append(make_snapshot(now - timedelta(seconds=10)))
    before = capture_log.path.read_text()

    capture_log.append(make_snapshot(now))
    after = capture_log.path.read_text()

    assert after.startswith(before)
    assert len(after.splitlines()) == 3


def test_window_excludes_boundary(capture_log):
    now = utcnow()
    edge = now - timedelta(seconds=30)
    capture_log.append(make_snapshot(edge))
    capture_log.append(make_snapshot(now))

    got = capture_log.query(since=edge)
    assert [s.timestamp for s in got] == [now]


def test_only_recent_snapshot_in_last_minute(capture_log):
    now = utcnow()
    capture_log.append(make_snapshot(now - timedelta(seconds=70), cpu=[10, 20]))
    capture_log.append(make_snapshot(now, cpu=[90, 95]))

    got = capture_log.query(since=utcnow() - timedelta(seconds=60))
    assert len(got) == 1
    assert got[0].cpu_percentages == [90.0, 95.0]


def test_missing_file_reads_as_empty(tmp_path):
    log = CaptureLog(tmp_path / "absent.json")
    assert log.query() == []


def test_malformed_record_is_skipped(capture_log):
    now = utcnow()
    capture_log.append(make_snapshot(now - timedelta(seconds=5), cpu=[1]))
    with open(capture_log.path, "a") as f:
        f.write('{"timestamp": "2024-01-01T00:0\n')
    capture_log.append(make_snapshot(now, cpu=[2]))

    got = capture_log.query()
    assert [s.cpu_percentages for s in got] == [[1.0], [2.0]]


def test_strict_read_fails_on_malformed_record(capture_log):
    capture_log.append(make_snapshot(utcnow()))
    with open(capture_log.path, "a") as f:
        f.write("not json\n")

    with pytest.raises(DecodeError):
        capture_log.query(strict=True)

    strict_log = CaptureLog(capture_log.path, strict=True)
    with pytest.raises(DecodeError):
        strict_log.query()


def test_reads_records_written_by_other_agents(capture_log):
    record = {
        "timestamp": "2030-05-01T12:00:00.123456789+02:00",
        "cpu": [12.5, 7.25],
        "memory": {"total": 100, "available": 40, "used": 60, "free": 40,
                   "usedPercent": 60.0, "cached": 5, "buffers": 1},
        "disk": {"path": "/", "fstype": "ext4", "total": 10, "free": 4, "used": 6, "usedPercent": 60.0},
        "processes": None,
    }
    capture_log.path.write_text(json.dumps(record) + "\n")

    (snap,) = capture_log.query()
    assert snap.cpu_percentages == [12.5, 7.25]
    assert snap.memory.used_percent == 60.0
    assert snap.disk.used_percent == 60.0
    assert snap.processes == []
    assert snap.timestamp.utcoffset() == timedelta(hours=2)


def test_serialised_record_uses_wire_keys(capture_log):
    capture_log.append(make_snapshot(utcnow(), cpu=[5], processes=[(1, "init", 0.5, 0.1)]))
    data = json.loads(capture_log.path.read_text())
    assert data["cpu"] == [5.0]
    assert "usedPercent" in data["memory"]
    assert data["processes"] == [{"pid": 1, "name": "init", "cpu": 0.5, "memory": 0.1}]
